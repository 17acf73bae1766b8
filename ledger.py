"""Ledger: records operations and keeps each user's balance in step with them."""
import logging
from decimal import Decimal
from typing import Any, Optional

from budgets import apply_expense, get_user_or_404
from catalog import OperationType, is_valid_category, parse_operation_type
from errors import (
    ValidationError,
    insufficient_funds,
    invalid_amount,
    invalid_category,
    missing_fields,
)
from models import Operation
from store import Storage
from utils import filter_operations, is_blank, is_missing_amount, normalize_iso_date, to_money

logger = logging.getLogger(__name__)


def _insert_sorted(operations: list[Operation], operation: Operation) -> None:
    """Insert and keep the ledger ordered by date, newest first.

    The new operation goes in front before the stable sort, so among equal
    dates the most recently recorded one comes first.
    """
    operations.insert(0, operation)
    operations.sort(key=lambda op: op.date, reverse=True)


def record_operation(
    storage: Storage,
    user_id: str,
    type: Any,
    amount: Any,
    category: Any,
    description: Optional[str],
    date: Any,
) -> tuple[Operation, Decimal]:
    """Validate and apply one operation; return it with the updated balance.

    Checks run in a fixed order (missing fields, type, category, malformed
    amount or date, funds) and all of them finish before anything is mutated.
    A zero amount counts as missing.
    """
    if is_blank(type) or is_missing_amount(amount) or is_blank(category) or is_blank(date):
        raise missing_fields()

    op_type = parse_operation_type(type)
    if op_type is None:
        raise ValidationError("Invalid operation type", code="InvalidType")

    if not is_valid_category(op_type, category):
        raise invalid_category()

    try:
        value = to_money(amount)
    except ValueError:
        raise invalid_amount()

    try:
        day = normalize_iso_date(date)
    except ValueError as exc:
        raise ValidationError(str(exc), code="InvalidDate")

    with storage.users.lock(user_id):
        user = get_user_or_404(storage, user_id)

        if op_type == OperationType.EXPENSE and value > user.balance:
            logger.warning("Rejected expense for user %s: insufficient funds", user.id)
            raise insufficient_funds()

        operation = Operation(
            type=op_type,
            amount=value,
            category=category,
            description=description or "",
            date=day,
        )

        if op_type == OperationType.INCOME:
            user.balance += operation.amount
        else:
            user.balance -= operation.amount

        _insert_sorted(user.operations, operation)

        if op_type == OperationType.EXPENSE:
            apply_expense(user, operation.category, operation.amount)

        storage.users.put(user.id, user)

    logger.info(
        "Recorded %s %s for user %s", op_type.value, operation.amount, user.id
    )
    return operation, user.balance


def list_operations(
    storage: Storage,
    user_id: str,
    op_type: Optional[OperationType] = None,
) -> list[Operation]:
    with storage.users.lock(user_id):
        user = get_user_or_404(storage, user_id)
        return filter_operations(user.operations, op_type=op_type)
