"""SQLModel definitions for user-owned finance records."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from sqlalchemy import DateTime
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover - import guard for circular dependency
    from .user import User


UNCATEGORIZED = "uncategorized"


class RecordType(str, Enum):
    """Direction of a finance record."""

    INCOME = "income"
    EXPENSE = "expense"


class Category(str, Enum):
    """Fixed set of record categories accepted on create and update."""

    SALARY = "salary"
    EDUCATION = "education"
    HEALTH = "health"
    FOOD = "food"
    TRANSPORTATION = "transportation"
    ENTERTAINMENT = "entertainment"
    UTILITIES = "utilities"
    OTHERS = "others"


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime, the stored representation."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


class FinanceRecord(SQLModel, table=True):
    """A single dated income or expense entry owned by one user."""

    __tablename__: ClassVar[str] = "finance_record"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=255)
    amount: Decimal = Field(nullable=False, max_digits=12, decimal_places=2)
    type: str = Field(nullable=False, max_length=16, index=True)
    # Nullable so rows written before categories were mandatory still aggregate.
    category: Optional[str] = Field(default=None, max_length=32, index=True)
    # Naive UTC on both sides of every comparison.
    created_at: datetime = Field(
        default_factory=utcnow, nullable=False, index=True, sa_type=DateTime(timezone=False)
    )
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=False))

    user: "User" = Relationship(
        sa_relationship=relationship("User", back_populates="finance_records")
    )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON projection exposed by the HTTP layer."""

        return {
            "id": self.id,
            "user": self.user_id,
            "title": self.title,
            "amount": float(self.amount),
            "type": self.type,
            "category": self.category,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
        }


def _isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat(timespec="milliseconds") + "Z"
