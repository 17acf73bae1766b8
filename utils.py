"""Utility functions for amounts, dates, and ledger filtering."""
import datetime as dt
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from catalog import OperationType
from models import Operation

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
PERIOD_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

# Amounts are whole cents below one quadrillion.
CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("1e15")


def is_blank(value: Any) -> bool:
    """True for values a client did not really send (None, empty or whitespace strings)."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def is_empty(value: Any) -> bool:
    """True only for None and the empty string; whitespace counts as a value."""
    return value is None or value == ""


def is_missing_amount(value: Any) -> bool:
    """Blank values and a zero amount both count as not sent."""
    if is_blank(value):
        return True
    try:
        return to_decimal(value) == 0
    except ValueError:
        return False


def to_decimal(value: Any) -> Decimal:
    """Coerce an int/float/str/Decimal amount to a finite Decimal or raise ValueError."""
    if isinstance(value, bool):
        raise ValueError("Invalid amount")
    if isinstance(value, Decimal):
        dec = value
    else:
        try:
            # str() first so floats like 0.1 keep their short decimal form
            dec = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError("Invalid amount")
    if not dec.is_finite():
        raise ValueError("Invalid amount")
    return dec


def to_money(value: Any) -> Decimal:
    """Coerce a positive amount with at most two decimal places below MAX_AMOUNT.

    Raises ValueError for anything else, including zero and negatives.
    """
    dec = to_decimal(value)
    if dec <= 0 or dec >= MAX_AMOUNT:
        raise ValueError("Invalid amount")
    cents = dec.quantize(CENT)
    if cents != dec:
        raise ValueError("Invalid amount")
    return cents


def normalize_iso_date(value: Any) -> dt.date:
    """Normalize a value to a date or raise a ValueError.

    Strings must be zero-padded YYYY-MM-DD so that their string order matches
    calendar order; report filtering relies on it.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value

    if isinstance(value, str) and ISO_DATE_RE.match(value.strip()):
        try:
            return dt.date.fromisoformat(value.strip())
        except ValueError:
            pass

    raise ValueError("Invalid date format. Expected YYYY-MM-DD.")


def is_valid_period(value: str) -> bool:
    return bool(PERIOD_RE.match(value))


def filter_operations(
    operations: Iterable[Operation],
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    op_type: Optional[OperationType] = None,
) -> list[Operation]:
    """Filter operations by type and by an inclusive date range.

    The range only applies when both bounds are given. Bounds are compared as
    strings against the operation's ISO date, without parsing them.
    """
    results: list[Operation] = []
    use_range = bool(start_date) and bool(end_date)

    for op in operations:
        if op_type and op.type != op_type:
            continue

        if use_range:
            day = op.date.isoformat()
            if day < start_date or day > end_date:
                continue

        results.append(op)

    return results


def sum_amounts(operations: Iterable[Operation]) -> Decimal:
    total = Decimal("0")
    for op in operations:
        total += op.amount
    return total


def compute_summary(operations: Iterable[Operation]) -> dict[str, Decimal]:
    """Income and expense totals plus their difference, in exact Decimals."""
    income_total = Decimal("0")
    expense_total = Decimal("0")

    for op in operations:
        if op.type == OperationType.INCOME:
            income_total += op.amount
        elif op.type == OperationType.EXPENSE:
            expense_total += op.amount

    return {
        "income_total": income_total,
        "expense_total": expense_total,
        "net": income_total - expense_total,
    }
