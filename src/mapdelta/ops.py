"""Service layer shared by the HTTP daemon and the CLI.

Parses uploaded or on-disk map text, runs the comparers and keeps results
in the ResultCache so they can be fetched again by id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from mapdelta.cache import ResultCache
from mapdelta.compare import CompareOptions, CompareResult, compare_analyses
from mapdelta.config.models import MapDeltaConfig
from mapdelta.core.errors import InputError
from mapdelta.diff import DiffOptions, DiffResult, compute_memory_diff
from mapdelta.mapfile import ParsedResult, parse_map_text

log = structlog.get_logger(__name__)


@dataclass
class AnalysisService:
    """Parse, compare, diff and remember results."""

    config: MapDeltaConfig = field(default_factory=MapDeltaConfig)
    cache: ResultCache = field(init=False)

    def __post_init__(self) -> None:
        self.cache = ResultCache(
            ttl_seconds=self.config.cache.ttl_sec,
            sweep_interval_seconds=self.config.cache.sweep_interval_sec,
        )

    # -----------------------------------------------------------------
    # Options
    # -----------------------------------------------------------------

    def compare_options(self, **overrides: Any) -> CompareOptions:
        """CompareOptions from configured defaults plus non-None overrides."""
        return CompareOptions.from_config(self.config.compare, **overrides)

    def diff_options(self, **overrides: Any) -> DiffOptions:
        """DiffOptions from configured defaults plus non-None overrides."""
        return DiffOptions.from_config(self.config.diff, **overrides)

    # -----------------------------------------------------------------
    # Operations
    # -----------------------------------------------------------------

    def parse(self, text: str, *, source: str) -> ParsedResult:
        """Parse map text, rejecting input with no recognisable sections.

        Raises:
            InputError: If nothing in the text looks like a map section.
        """
        result = parse_map_text(text, join_wrapped_names=self.config.parser.join_wrapped_names)
        if result.is_empty:
            log.warning("invalid_map", source=source)
            raise InputError.invalid_map(source)
        return result

    def analyze(self, text: str, *, source: str = "mapFile") -> ParsedResult:
        return self.parse(text, source=source)

    def compare(
        self,
        text_a: str,
        text_b: str,
        options: CompareOptions | None = None,
        *,
        store: bool = True,
    ) -> tuple[str | None, CompareResult]:
        """Summary-compare two builds; returns (compare id, result)."""
        analysis_a = self.parse(text_a, source="fileA")
        analysis_b = self.parse(text_b, source="fileB")
        result = compare_analyses(analysis_a, analysis_b, options or self.compare_options())

        cache_id = self.cache.put(result.to_dict(), prefix="cmp") if store else None
        return cache_id, result

    def diff(
        self,
        text_v1: str,
        text_v2: str,
        options: DiffOptions | None = None,
        *,
        store: bool = True,
    ) -> tuple[str | None, DiffResult]:
        """Version-diff two builds; returns (diff id, result)."""
        analysis_v1 = self.parse(text_v1, source="fileV1")
        analysis_v2 = self.parse(text_v2, source="fileV2")
        result = compute_memory_diff(analysis_v1, analysis_v2, options or self.diff_options())

        cache_id = self.cache.put(result.to_dict(), prefix="diff") if store else None
        return cache_id, result

    # -----------------------------------------------------------------
    # Stored results
    # -----------------------------------------------------------------

    def get_stored(self, cache_id: str) -> dict[str, Any] | None:
        stored: dict[str, Any] | None = self.cache.get(cache_id)
        return stored

    def delete_stored(self, cache_id: str) -> bool:
        deleted = self.cache.delete(cache_id)
        if deleted:
            log.info("comparison_deleted", cache_id=cache_id)
        return deleted

    def stats(self) -> dict[str, Any]:
        return self.cache.stats()

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------

    def start(self) -> None:
        self.cache.start()

    def stop(self) -> None:
        self.cache.stop()
