"""Version diff of two builds keyed by (section, object file)."""

from mapdelta.diff.engine import compute_memory_diff, determine_region, determine_severity
from mapdelta.diff.models import DiffAnomaly, DiffEntry, DiffOptions, DiffResult, DiffSummary

__all__ = [
    "DiffAnomaly",
    "DiffEntry",
    "DiffOptions",
    "DiffResult",
    "DiffSummary",
    "compute_memory_diff",
    "determine_region",
    "determine_severity",
]
