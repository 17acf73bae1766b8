from typing import Annotated
from decimal import Decimal
import datetime as dt
from datetime import datetime
import uuid

from pydantic import PlainSerializer
from sqlmodel import SQLModel, Field

from catalog import OperationType

# Amounts are exact Decimals in memory and plain JSON numbers on the wire.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def new_id() -> str:
    return str(uuid.uuid4())


# These classes describe the records kept in the store.
# They are plain SQLModel models (no table=True): state lives in memory only.
class Operation(SQLModel):
    """A single income or expense entry in a user's ledger.
    Operations are never edited after they are recorded.
    """
    id: str = Field(default_factory=new_id)
    type: OperationType
    amount: Money = Field(gt=0)
    category: str
    description: str = ""
    date: dt.date


class Budget(SQLModel):
    """Spending cap for one expense category and month.
    'spent' accumulates every expense posted to the category after creation.
    """
    id: str = Field(default_factory=new_id)
    category: str
    limit: Money = Field(gt=0)
    period: str  # "YYYY-MM"
    spent: Money = Decimal("0")


class User(SQLModel):
    id: str = Field(default_factory=new_id)
    email: str
    hashed_password: str
    balance: Money = Decimal("0")
    operations: list[Operation] = Field(default_factory=list)  # newest date first
    budgets: list[Budget] = Field(default_factory=list)  # creation order
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Session(SQLModel):
    token: str
    user_id: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
