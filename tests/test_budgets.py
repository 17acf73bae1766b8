from decimal import Decimal

import pytest

from budgets import apply_expense, create_budget, list_budgets
from errors import NotFound, ValidationError
from ledger import record_operation


def test_create_budget_starts_with_zero_spent(storage, make_user):
    user = make_user()
    budget = create_budget(storage, user.id, "food", "15000", "2025-10")

    assert budget.spent == Decimal("0")
    assert budget.limit == Decimal("15000")
    assert budget.period == "2025-10"
    assert user.budgets == [budget]


@pytest.mark.parametrize(
    "category, limit, period",
    [(None, 100, "2025-01"), ("food", None, "2025-01"), ("food", 100, ""), ("", "", "")],
)
def test_create_budget_missing_fields(storage, make_user, category, limit, period):
    user = make_user()
    with pytest.raises(ValidationError) as exc:
        create_budget(storage, user.id, category, limit, period)
    assert exc.value.code == "MissingFields"
    assert user.budgets == []


def test_create_budget_rejects_income_category(storage, make_user):
    user = make_user()
    with pytest.raises(ValidationError) as exc:
        create_budget(storage, user.id, "salary", 100, "2025-01")
    assert exc.value.code == "InvalidCategory"


@pytest.mark.parametrize("limit", [-10, "lots", "1e400", "0.001", "1000000000000000"])
def test_create_budget_rejects_bad_limit(storage, make_user, limit):
    user = make_user()
    with pytest.raises(ValidationError) as exc:
        create_budget(storage, user.id, "food", limit, "2025-01")
    assert exc.value.code == "InvalidAmount"
    assert user.budgets == []


def test_create_budget_zero_limit_counts_as_missing(storage, make_user):
    user = make_user()
    with pytest.raises(ValidationError) as exc:
        create_budget(storage, user.id, "food", 0, "2025-01")
    assert exc.value.code == "MissingFields"


@pytest.mark.parametrize("limit, period", [(-10, "2025-01"), ("lots", "2025-01"), (100, "January")])
def test_create_budget_category_checked_before_limit_and_period(storage, make_user, limit, period):
    user = make_user()
    with pytest.raises(ValidationError) as exc:
        create_budget(storage, user.id, "salary", limit, period)
    assert exc.value.code == "InvalidCategory"


def test_create_budget_rejects_bad_period(storage, make_user):
    user = make_user()
    with pytest.raises(ValidationError) as exc:
        create_budget(storage, user.id, "food", 100, "January")
    assert exc.value.code == "InvalidPeriod"


def test_create_budget_unknown_user(storage):
    with pytest.raises(NotFound):
        create_budget(storage, "nope", "food", 100, "2025-01")


def test_apply_expense_without_matching_budget_is_noop(make_user):
    user = make_user()
    assert apply_expense(user, "food", Decimal("10")) is None


def test_only_first_budget_for_category_is_charged(storage, make_user):
    user = make_user()
    january = create_budget(storage, user.id, "food", 100, "2025-01")
    february = create_budget(storage, user.id, "food", 100, "2025-02")

    updated = apply_expense(user, "food", Decimal("25"))

    assert updated is january
    assert january.spent == Decimal("25")
    assert february.spent == Decimal("0")


def test_spent_ignores_budget_period(storage, make_user):
    user = make_user()
    budget = create_budget(storage, user.id, "transport", 1000, "2025-01")
    record_operation(storage, user.id, "income", 1000, "salary", None, "2024-06-01")

    for day, amount in [("2024-06-02", "12.50"), ("2025-01-15", "7.25"), ("2026-03-01", "0.25")]:
        record_operation(storage, user.id, "expense", amount, "transport", None, day)

    assert budget.spent == Decimal("20.00")


def test_spent_may_exceed_limit(storage, make_user):
    user = make_user()
    budget = create_budget(storage, user.id, "health", 10, "2025-01")
    record_operation(storage, user.id, "income", 100, "salary", None, "2025-01-01")
    record_operation(storage, user.id, "expense", 50, "health", None, "2025-01-02")

    assert budget.spent == Decimal("50")


def test_list_budgets_in_creation_order(storage, make_user):
    user = make_user()
    a = create_budget(storage, user.id, "food", 10, "2025-01")
    b = create_budget(storage, user.id, "education", 20, "2025-01")

    assert [x.id for x in list_budgets(storage, user.id)] == [a.id, b.id]
