"""Summary (name-level) comparison of two builds."""

from mapdelta.compare.models import (
    CompareAnomaly,
    CompareOptions,
    CompareResult,
    CompareSummary,
    FileGroup,
    SectionDiff,
)
from mapdelta.compare.summary import compare_analyses, compute_file_groups, detect_anomalies

__all__ = [
    "CompareAnomaly",
    "CompareOptions",
    "CompareResult",
    "CompareSummary",
    "FileGroup",
    "SectionDiff",
    "compare_analyses",
    "compute_file_groups",
    "detect_anomalies",
]
