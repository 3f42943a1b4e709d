"""Collaborator protocol definitions.

The query cache and the query profiler live outside the compilation and
transaction core. These protocols describe the narrow surface the core
relies on, so any implementation with matching methods can be attached.
"""

from typing import Any, Callable, Optional, Protocol, Sequence, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class QueryCache(Protocol):
    """Protocol for the query result cache used by ``QueryBuilder.get()``.

    The builder computes the key itself (from the compiled SQL and the
    serialized bindings); the cache only stores and returns results.
    """

    def remember(self, key: str, callback: Callable[[], T], ttl: Optional[int] = None) -> T:
        """Return the cached value for ``key`` or compute and store it.

        Args:
            key: Deterministic cache key for the statement
            callback: Performs the real query; only invoked on a miss
            ttl: Time-to-live in seconds, None for the cache's default

        Returns:
            The cached or freshly computed result
        """
        ...


@runtime_checkable
class QueryProfiler(Protocol):
    """Protocol for the side-channel profiler attached to a Connection."""

    def is_enabled(self) -> bool:
        ...

    def start_query(self, sql: str, bindings: Sequence[Any] = ()) -> str:
        """Record the start of a statement and return its query id."""
        ...

    def end_query(self, query_id: str, affected_rows: Optional[int] = None) -> None:
        """Record the end of a statement; ``affected_rows`` is None on failure."""
        ...
