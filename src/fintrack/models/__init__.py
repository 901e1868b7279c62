"""SQLModel table exports."""

from .finance import UNCATEGORIZED, Category, FinanceRecord, RecordType
from .user import User

__all__ = [
    "UNCATEGORIZED",
    "Category",
    "FinanceRecord",
    "RecordType",
    "User",
]
