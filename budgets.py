"""Budget tracker: per-category spending caps with accumulated spend."""
import logging
from decimal import Decimal
from typing import Any, Optional

from catalog import OperationType, is_valid_category
from errors import NotFound, ValidationError, invalid_amount, invalid_category, missing_fields
from models import Budget, User
from store import Storage
from utils import is_blank, is_missing_amount, is_valid_period, to_money

logger = logging.getLogger(__name__)


def get_user_or_404(storage: Storage, user_id: str) -> User:
    user = storage.users.get(user_id)
    if user is None:
        raise NotFound("User not found", code="UserNotFound")
    return user


def create_budget(storage: Storage, user_id: str, category: Any, limit: Any, period: Any) -> Budget:
    """Validate in order (missing fields, category, limit, period), then append.
    A zero limit counts as missing.
    """
    if is_blank(category) or is_missing_amount(limit) or is_blank(period):
        raise missing_fields()

    if not is_valid_category(OperationType.EXPENSE, category):
        raise invalid_category()

    try:
        cap = to_money(limit)
    except ValueError:
        raise invalid_amount()

    period = str(period).strip()
    if not is_valid_period(period):
        raise ValidationError("Invalid period. Expected YYYY-MM.", code="InvalidPeriod")

    with storage.users.lock(user_id):
        user = get_user_or_404(storage, user_id)
        budget = Budget(category=category, limit=cap, period=period)
        user.budgets.append(budget)
        storage.users.put(user.id, user)

    logger.info("Created %s budget for %s (user %s)", budget.category, budget.period, user.id)
    return budget


def apply_expense(user: User, category: str, amount: Decimal) -> Optional[Budget]:
    """Add ``amount`` to the first budget (creation order) for ``category``.

    The budget period is not consulted, and only that one budget is updated.
    Returns the updated budget, or None when the category has no budget.
    The caller must hold the user's lock.
    """
    for budget in user.budgets:
        if budget.category == category:
            budget.spent += amount
            return budget
    return None


def list_budgets(storage: Storage, user_id: str) -> list[Budget]:
    with storage.users.lock(user_id):
        return list(get_user_or_404(storage, user_id).budgets)
