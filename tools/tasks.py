"""Financial aggregation over tasks."""

import re
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Optional

from models.task import Task

_NOT_A_NUMBER = re.compile(r"[^0-9,.\-]")


def parse_money(value) -> Optional[Decimal]:
    """Parse a free-text money amount.

    Accepts plain numbers and Brazilian formatting ("150,50", "1.500,00",
    "R$ 20"). A lone comma is a decimal separator; when both "." and ","
    appear, "." groups thousands.

    Returns:
        The amount as Decimal, or None if the text is not a number.
    """
    if value is None:
        return None
    if isinstance(value, (int, float, Decimal)):
        return Decimal(str(value))

    text = _NOT_A_NUMBER.sub("", str(value))
    if "," in text:
        text = text.replace(".", "").replace(",", ".")
    if not text:
        return None

    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def get_financial_summary(tasks: Iterable[Task]) -> Dict[str, object]:
    """Summarize income and expenses recorded on tasks.

    Only tasks with both a parseable value and a flow ('entrada' or 'saida')
    count.

    Returns:
        Dictionary with:
        - "income_total": Sum of 'entrada' values (Decimal)
        - "expense_total": Sum of 'saida' values (Decimal)
        - "net": income_total - expense_total (Decimal)
        - "expenses_by_category": Dict mapping category_id to expense amount
          (key None for tasks without a category)
        - "count": Number of tasks counted

    Example:
        {
            "income_total": Decimal("1000.00"),
            "expense_total": Decimal("250.00"),
            "net": Decimal("750.00"),
            "expenses_by_category": {"a1b2...": Decimal("250.00")},
            "count": 3,
        }
    """
    income_total = Decimal("0")
    expense_total = Decimal("0")
    expenses_by_category: Dict[Optional[str], Decimal] = {}
    count = 0

    for task in tasks:
        amount = parse_money(task.value)
        if amount is None or task.flow not in ("entrada", "saida"):
            continue

        count += 1
        if task.flow == "entrada":
            income_total += amount
        else:
            expense_total += amount
            expenses_by_category[task.category_id] = (
                expenses_by_category.get(task.category_id, Decimal("0")) + amount
            )

    return {
        "income_total": income_total,
        "expense_total": expense_total,
        "net": income_total - expense_total,
        "expenses_by_category": expenses_by_category,
        "count": count,
    }
