"""Fixed category catalog for income and expense operations."""
from enum import Enum


class OperationType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


# Ordered (tag, label) pairs per operation type. Report breakdowns follow this order.
CATEGORIES: dict[OperationType, tuple[tuple[str, str], ...]] = {
    OperationType.INCOME: (
        ("salary", "Зарплата"),
        ("freelance", "Фриланс"),
        ("investment", "Инвестиции"),
        ("other", "Другое"),
    ),
    OperationType.EXPENSE: (
        ("food", "Еда"),
        ("transport", "Транспорт"),
        ("entertainment", "Развлечения"),
        ("health", "Здоровье"),
        ("education", "Образование"),
        ("other", "Другое"),
    ),
}


def _check_catalog() -> None:
    """Every operation type must map to a non-empty list of unique tags."""
    for op_type in OperationType:
        entries = CATEGORIES.get(op_type)
        if not entries:
            raise RuntimeError(f"No categories configured for {op_type.value!r}")
        tags = [tag for tag, _ in entries]
        if len(set(tags)) != len(tags):
            raise RuntimeError(f"Duplicate categories for {op_type.value!r}")


_check_catalog()


def parse_operation_type(value) -> OperationType | None:
    """Return the OperationType for ``value`` or None when it is not one."""
    if isinstance(value, OperationType):
        return value
    try:
        return OperationType(value)
    except ValueError:
        return None


def categories_for(op_type: OperationType) -> tuple[str, ...]:
    return tuple(tag for tag, _ in CATEGORIES[op_type])


def is_valid_category(op_type: OperationType, category: str) -> bool:
    return category in categories_for(op_type)


def catalog_payload() -> dict[str, list[dict[str, str]]]:
    return {
        op_type.value: [{"value": tag, "label": label} for tag, label in entries]
        for op_type, entries in CATEGORIES.items()
    }
