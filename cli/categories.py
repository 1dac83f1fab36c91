#!/usr/bin/env python3

import sys
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List the owner's categories, seeding the catalog on first access."""
    categories = services.reconciliation.ensure_seeded(args.owner)

    logger.info("\nCategories:")
    logger.info("=" * 80)
    for category in categories:
        lock = " [system]" if category.is_system else ""
        icon = f"{category.icon} " if category.icon else ""
        logger.info(f"{icon}{category.name}{lock}")
        logger.info(f"  ID: {category.id}  Order: {category.order}")
        if category.description:
            logger.info(f"  Description: {category.description}")
        subs = services.subcategories.find_by_category(category.id)
        if subs:
            logger.info(f"  Subcategories: {', '.join(s.name for s in subs)}")
        logger.info("-" * 80)

    logger.info(f"\nTotal categories: {len(categories)}")


def cmd_create(args, services):
    """Interactively create a new custom category."""
    print("\nCreate New Category")
    print("=" * 80)

    name = input("Category name (e.g., Viagens): ").strip()
    if not name:
        logger.error("Category name cannot be empty.")
        sys.exit(1)

    icon = input("Icon (optional, press Enter to skip): ").strip() or None
    description = input("Description (optional, press Enter to skip): ").strip() or None

    category = services.categories.create(
        args.owner, name, icon=icon, description=description
    )
    logger.info(f"\n✓ Category created successfully with ID: {category.id}")


def cmd_delete(args, services):
    """Delete a custom category by ID."""
    category = services.categories.find(args.category_id)
    if not category or category.owner != args.owner:
        logger.error(f"Category with ID {args.category_id} not found.")
        sys.exit(1)

    logger.info("\nCategory to delete:")
    logger.info(f"  ID: {category.id}")
    logger.info(f"  Name: {category.name}")

    confirm = (
        input("\nDelete this category and its subcategories? (yes/no): ")
        .strip()
        .lower()
    )
    if confirm != "yes":
        logger.info("Deletion cancelled.")
        return

    services.categories.delete(category.id)
    logger.info(f"✓ Category '{category.name}' deleted successfully.")
    logger.info("Run 'tasks repair' to re-home tasks that used it.")


def cmd_sync(args, services):
    """Seed the system catalog (safe to run repeatedly)."""
    report = services.reconciliation.sync_system_catalog(args.owner)

    logger.info(f"\nCatalog {report.catalog_version} synchronized")
    logger.info("=" * 80)
    logger.info(f"Categories created: {report.categories_created}")
    logger.info(f"Categories updated: {report.categories_updated}")
    logger.info(f"Subcategories created: {report.subcategories_created}")
    logger.info(f"Subcategories pinned: {report.subcategories_pinned}")
    logger.info(f"Tasks repaired: {report.link_repair.tasks_updated}")


def cmd_dedup(args, services):
    """Remove duplicate categories and subcategories."""
    report = services.reconciliation.deduplicate(args.owner)

    logger.info(f"Categories removed: {report.categories_removed}")
    logger.info(f"Subcategories removed: {report.subcategories_removed}")
    logger.info(f"Subcategories moved: {report.subcategories_reparented}")
    logger.info(f"Tasks repaired: {report.link_repair.tasks_updated}")


def cmd_reset(args, services):
    """Deduplicate and reseed the owner's categories."""
    confirm = (
        input("Repair categories (deduplicate and reseed)? (yes/no): ")
        .strip()
        .lower()
    )
    if confirm != "yes":
        logger.info("Reset cancelled.")
        return

    report = services.reconciliation.force_reset(args.owner)

    logger.info("\nCategory reset complete!")
    logger.info("=" * 80)
    logger.info(f"Duplicate categories removed: {report.dedup.categories_removed}")
    logger.info(f"Duplicate subcategories removed: {report.dedup.subcategories_removed}")
    logger.info(f"Categories created: {report.seed.categories_created}")
    logger.info(f"Subcategories created: {report.seed.subcategories_created}")
    logger.info(
        f"Tasks repaired: "
        f"{report.dedup.link_repair.tasks_updated + report.seed.link_repair.tasks_updated}"
    )


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage categories",
        description="List, create and delete categories; seed and repair the taxonomy",
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    list_parser = categories_subparsers.add_parser("list", help="List all categories")
    list_parser.set_defaults(func=cmd_list)

    create_parser = categories_subparsers.add_parser(
        "create", help="Create a new category interactively"
    )
    create_parser.set_defaults(func=cmd_create)

    delete_parser = categories_subparsers.add_parser(
        "delete", help="Delete a custom category by ID"
    )
    delete_parser.add_argument("category_id", help="ID of the category to delete")
    delete_parser.set_defaults(func=cmd_delete)

    sync_parser = categories_subparsers.add_parser(
        "sync", help="Seed the system catalog"
    )
    sync_parser.set_defaults(func=cmd_sync)

    dedup_parser = categories_subparsers.add_parser(
        "dedup", help="Remove duplicate categories and subcategories"
    )
    dedup_parser.set_defaults(func=cmd_dedup)

    reset_parser = categories_subparsers.add_parser(
        "reset", help="Deduplicate, then reseed the system catalog"
    )
    reset_parser.set_defaults(func=cmd_reset)
