"""Dialect strategies composed into a Grammar.

Each dialect differs from the others in a few narrow places: the identifier
quote character, how LIMIT/OFFSET are spelled, and what an INSERT without
columns looks like. Those differences are captured here as small strategy
objects so that one Grammar class can serve every dialect.
"""

from abc import ABC, abstractmethod
from typing import List, Optional


class IdentifierQuoting:
    """Wraps identifier segments in dialect quote characters.

    Args:
        opening: Opening quote character
        closing: Closing quote character, defaults to ``opening``
    """

    def __init__(self, opening: str, closing: Optional[str] = None):
        self.opening = opening
        self.closing = closing if closing is not None else opening

    def wrap_segment(self, segment: str) -> str:
        if segment == "*":
            return segment
        return f"{self.opening}{segment}{self.closing}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.opening!r}, {self.closing!r})"


BACKTICK_QUOTING = IdentifierQuoting("`")
DOUBLE_QUOTE_QUOTING = IdentifierQuoting('"')


class LimitOffsetStrategy(ABC):
    """Renders the LIMIT/OFFSET tail of a SELECT."""

    @abstractmethod
    def compile(self, limit: Optional[int], offset: Optional[int]) -> List[str]:
        """Return the clause fragments, in order; empty when neither is set."""


class SeparateLimitOffset(LimitOffsetStrategy):
    """Independent ``limit N`` and ``offset M`` clauses (MySQL, PostgreSQL)."""

    def compile(self, limit: Optional[int], offset: Optional[int]) -> List[str]:
        clauses = []
        if limit is not None:
            clauses.append(f"limit {limit}")
        if offset is not None:
            clauses.append(f"offset {offset}")
        return clauses


class CombinedLimitOffset(LimitOffsetStrategy):
    """A single ``limit N offset M`` clause (SQLite).

    SQLite only accepts OFFSET as part of a LIMIT clause, so an offset on
    its own is rendered with the unbounded limit ``-1``.
    """

    UNBOUNDED = -1

    def compile(self, limit: Optional[int], offset: Optional[int]) -> List[str]:
        if limit is None and offset is None:
            return []

        clause = f"limit {self.UNBOUNDED if limit is None else limit}"
        if offset is not None:
            clause += f" offset {offset}"
        return [clause]


# Templates for an INSERT that supplies no columns; {table} is already wrapped
EMPTY_VALUES_INSERT = "insert into {table} () values ()"
DEFAULT_VALUES_INSERT = "insert into {table} default values"
