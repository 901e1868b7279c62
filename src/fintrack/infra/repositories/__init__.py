"""Concrete repository implementations using SQLModel."""

from .finance import SQLModelFinanceRepository

__all__ = ["SQLModelFinanceRepository"]
