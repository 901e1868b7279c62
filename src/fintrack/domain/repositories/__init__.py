"""Repository protocol definitions for domain layer."""

from .finance import FinanceRepository, GroupTotal

__all__ = ["FinanceRepository", "GroupTotal"]
