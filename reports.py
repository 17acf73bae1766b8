"""Report generator: income/expense totals for a user, optionally date-bounded."""
from typing import Optional

from catalog import OperationType, categories_for
from models import Operation, User
from utils import compute_summary, filter_operations, sum_amounts


def _by_category(operations: list[Operation], op_type: OperationType) -> list[dict]:
    # every catalog category is listed, in catalog order, even with a zero total
    return [
        {
            "category": category,
            "amount": sum_amounts(
                op for op in operations if op.type == op_type and op.category == category
            ),
        }
        for category in categories_for(op_type)
    ]


def generate_report(
    user: User,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> dict:
    """Aggregate the user's ledger.

    Both ``start_date`` and ``end_date`` must be given for the range to apply;
    they are compared as YYYY-MM-DD strings, inclusive on both ends.
    """
    operations = filter_operations(user.operations, start_date, end_date)
    summary = compute_summary(operations)

    return {
        "total_income": summary["income_total"],
        "total_expense": summary["expense_total"],
        "net": summary["net"],
        "start_date": start_date if start_date and end_date else None,
        "end_date": end_date if start_date and end_date else None,
        "by_category": {
            "income": _by_category(operations, OperationType.INCOME),
            "expense": _by_category(operations, OperationType.EXPENSE),
        },
    }
