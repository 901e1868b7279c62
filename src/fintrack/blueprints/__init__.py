"""Blueprint exports."""

from . import finances

__all__ = ["finances"]
