"""Protocol definitions for external collaborators."""

from lightorm.protocols.collaborators import QueryCache, QueryProfiler

__all__ = [
    "QueryCache",
    "QueryProfiler",
]
