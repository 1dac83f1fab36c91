#!/usr/bin/env python3

import sys
from pathlib import Path

from llm.contract import ActionType, parse_ai_response
from logger import get_logger
from services.tasks import TaskFilters
from tools.tasks import get_financial_summary

logger = get_logger()


def cmd_list(args, services):
    """List the owner's tasks with optional filters."""
    filters = TaskFilters(
        status=args.status or [],
        category_id=args.category_id,
        priority=args.priority,
        search=args.search,
    )
    tasks = services.tasks.find_all(args.owner, filters)

    if not tasks:
        logger.info("No tasks found.")
        return

    names = {c.id: c.name for c in services.categories.find_all(args.owner)}
    for task in tasks:
        category = names.get(task.category_id, "?")
        logger.info(f"[{task.status}] {task.title}  ({category}, {task.priority})  ID: {task.id}")

    logger.info(f"\nTotal tasks: {len(tasks)}")


def cmd_repair(args, services):
    """Fix tasks whose category or subcategory no longer exists."""
    report = services.reconciliation.repair_links(args.owner)

    logger.info(f"Tasks scanned: {report.tasks_scanned}")
    logger.info(f"Tasks updated: {report.tasks_updated}")
    logger.info(f"Categories relinked: {report.categories_relinked}")
    logger.info(f"Subcategories cleared: {report.subcategories_cleared}")
    if report.unresolved:
        logger.warning(f"Tasks left without a category: {report.unresolved}")


def cmd_summary(args, services):
    """Show income, expenses and net over the owner's financial tasks."""
    summary = get_financial_summary(services.tasks.find_all(args.owner))
    names = {c.id: c.name for c in services.categories.find_all(args.owner)}

    logger.info(f"Financial tasks: {summary['count']}")
    logger.info(f"Income:   R$ {summary['income_total']:.2f}")
    logger.info(f"Expenses: R$ {summary['expense_total']:.2f}")
    logger.info(f"Net:      R$ {summary['net']:.2f}")
    for category_id, amount in summary["expenses_by_category"].items():
        logger.info(f"  {names.get(category_id, 'Sem categoria')}: R$ {amount:.2f}")


def cmd_import(args, services):
    """Create tasks from a saved task-extraction response (JSON)."""
    path = Path(args.file)
    if not path.exists():
        logger.error(f"File not found: {path}")
        sys.exit(1)

    response = parse_ai_response(path.read_text(encoding="utf-8"))
    if response.action != ActionType.CREATE or not response.created_tasks:
        logger.info(f"Nothing to import ({response.action.value}): {response.message}")
        return

    # Make sure the owner has categories to resolve names against
    services.reconciliation.ensure_seeded(args.owner)
    ids = services.tasks.create_bulk(
        args.owner, response.created_tasks, services.resolver
    )
    logger.info(f"✓ Imported {len(ids)} task(s)")


def cmd_share(args, services):
    """Share a task and print its public id."""
    task = services.tasks.find(args.task_id)
    if not task or task.owner != args.owner:
        logger.error(f"Task with ID {args.task_id} not found.")
        sys.exit(1)

    services.tasks.share(task.id)
    logger.info(f"✓ Task '{task.title}' is shared. Public id: {task.id}")


def setup_parser(subparsers):
    """Setup tasks subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "tasks",
        help="Manage tasks",
        description="List, summarize, import and repair tasks",
    )

    tasks_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available task commands",
        dest="subcommand",
        required=True,
    )

    list_parser = tasks_subparsers.add_parser("list", help="List tasks")
    list_parser.add_argument("--status", action="append", help="Filter by status (repeatable)")
    list_parser.add_argument("--category-id", help="Filter by category ID")
    list_parser.add_argument("--priority", choices=["baixa", "media", "alta"])
    list_parser.add_argument("--search", help="Search in title and description")
    list_parser.set_defaults(func=cmd_list)

    repair_parser = tasks_subparsers.add_parser(
        "repair", help="Repair dangling category references"
    )
    repair_parser.set_defaults(func=cmd_repair)

    summary_parser = tasks_subparsers.add_parser(
        "summary", help="Financial summary of tasks"
    )
    summary_parser.set_defaults(func=cmd_summary)

    import_parser = tasks_subparsers.add_parser(
        "import", help="Import tasks from a task-extraction JSON response"
    )
    import_parser.add_argument("file", help="Path to the JSON file")
    import_parser.set_defaults(func=cmd_import)

    share_parser = tasks_subparsers.add_parser(
        "share", help="Make a task reachable through its public link"
    )
    share_parser.add_argument("task_id", help="ID of the task to share")
    share_parser.set_defaults(func=cmd_share)
