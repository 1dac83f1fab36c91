#!/usr/bin/env python3

import sys
from logger import get_logger

logger = get_logger()


def _owned_category(args, services):
    category = services.categories.find(args.category_id)
    if not category or category.owner != args.owner:
        logger.error(f"Category with ID {args.category_id} not found.")
        sys.exit(1)
    return category


def cmd_list(args, services):
    """List the subcategories of a category."""
    category = _owned_category(args, services)
    subs = services.subcategories.find_by_category(category.id)

    if not subs:
        logger.info(f"No subcategories in '{category.name}'.")
        return

    logger.info(f"\nSubcategories of {category.name}:")
    logger.info("=" * 80)
    for sub in subs:
        pin = " [pinned]" if sub.pinned else ""
        logger.info(f"{sub.order:>3}  {sub.name}{pin}  (ID: {sub.id})")


def cmd_create(args, services):
    """Create a subcategory under a category."""
    category = _owned_category(args, services)
    sub = services.subcategories.create(category.id, args.name)
    logger.info(f"✓ Subcategory '{sub.name}' created in '{category.name}' (ID: {sub.id})")


def cmd_delete(args, services):
    """Delete an unpinned subcategory."""
    sub = services.subcategories.find(args.subcategory_id)
    if not sub:
        logger.error(f"Subcategory with ID {args.subcategory_id} not found.")
        sys.exit(1)

    services.subcategories.delete(sub.id)
    logger.info(f"✓ Subcategory '{sub.name}' deleted successfully.")


def setup_parser(subparsers):
    """Setup subcategories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "subcategories",
        help="Manage subcategories",
        description="List, create and delete subcategories of a category",
    )

    sub_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available subcategory commands",
        dest="subcommand",
        required=True,
    )

    list_parser = sub_subparsers.add_parser("list", help="List subcategories")
    list_parser.add_argument("category_id", help="Parent category ID")
    list_parser.set_defaults(func=cmd_list)

    create_parser = sub_subparsers.add_parser("create", help="Create a subcategory")
    create_parser.add_argument("category_id", help="Parent category ID")
    create_parser.add_argument("name", help="Subcategory name")
    create_parser.set_defaults(func=cmd_create)

    delete_parser = sub_subparsers.add_parser("delete", help="Delete a subcategory")
    delete_parser.add_argument("subcategory_id", help="ID of the subcategory")
    delete_parser.set_defaults(func=cmd_delete)
