"""Fluent query building on top of a Grammar and a Connection."""

from lightorm.query.builder import QueryBuilder

__all__ = ["QueryBuilder"]
