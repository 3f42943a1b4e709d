"""Utility functions and helpers for lightorm."""

from lightorm.utils.decorators import traced

__all__ = [
    "traced",
]
