"""Pydantic/SQLModel schemas for API payloads and responses."""
from typing import Any, Optional
import datetime as dt

from sqlmodel import SQLModel, Field
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from models import Budget, Money, Operation

EMAIL_MAX_LEN = 254
DESCRIPTION_MAX_LEN = 300


class StripMixin:
    """Trim surrounding whitespace from free-text fields."""
    @field_validator("email", "description", mode="before", check_fields=False)
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


# Request payloads. Required fields are Optional here on purpose: the services
# report missing values as "Missing required fields" (400) in a fixed order.

class Credentials(StripMixin, SQLModel):
    """Payload for registering or logging in."""
    email: Optional[str] = Field(default=None, max_length=EMAIL_MAX_LEN)
    password: Optional[str] = None


class PasswordChange(BaseModel):
    """Payload to change password."""
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class OperationCreate(StripMixin, SQLModel):
    """Payload for recording an income or expense.
    'amount' may arrive as a number or a numeric string (HTML forms send strings).
    """
    type: Optional[str] = None
    amount: Optional[Any] = None
    category: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LEN)
    date: Optional[str] = None


class BudgetCreate(SQLModel):
    """Payload for creating a budget."""
    category: Optional[str] = None
    limit: Optional[Any] = None
    period: Optional[str] = None


# Responses

class CamelModel(BaseModel):
    """Response model rendered with camelCase keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserSummary(CamelModel):
    id: str
    email: str
    balance: Money


class UserDetail(UserSummary):
    operations: list[Operation]
    budgets: list[Budget]


class AuthResponse(CamelModel):
    token: str
    user: UserSummary


class OperationResult(CamelModel):
    operation: Operation
    new_balance: Money


class CategoryTotal(CamelModel):
    category: str
    amount: Money


class CategoryBreakdown(CamelModel):
    income: list[CategoryTotal]
    expense: list[CategoryTotal]


class ReportRead(CamelModel):
    total_income: Money
    total_expense: Money
    net: Money
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    by_category: CategoryBreakdown


class CategoryOption(BaseModel):
    value: str
    label: str


class CategoryCatalog(BaseModel):
    income: list[CategoryOption]
    expense: list[CategoryOption]


class Message(BaseModel):
    message: str


class Health(BaseModel):
    status: str
    timestamp: dt.datetime
    app: str
    version: str
