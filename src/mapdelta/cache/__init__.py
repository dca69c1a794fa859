"""Time-limited in-memory store for comparison results."""

from mapdelta.cache.store import ResultCache, StoredComparison

__all__ = ["ResultCache", "StoredComparison"]
