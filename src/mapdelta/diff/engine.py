"""Version diff: per-(section, file) alignment with address tracking.

Where the summary comparer answers "how much did each name grow", the
version differ follows each object's contribution separately and also
reports when a section moved in the address space.
"""

from __future__ import annotations

import structlog

from mapdelta.config.constants import (
    DIFF_CRITICAL_SECTION_BYTES,
    DIFF_LARGE_SECTION_BYTES,
    DIFF_SEVERITY_PCT_CRITICAL,
    DIFF_SEVERITY_PCT_HIGH,
    DIFF_SEVERITY_PCT_MEDIUM,
    FLASH_PREFIXES,
    RAM_PREFIXES,
)
from mapdelta.core.formatting import (
    DIFF_SEVERITY_RANK,
    format_bytes,
    pct_change,
    round_pct,
    total_pct_change,
    utc_timestamp,
)
from mapdelta.diff.models import (
    DiffAnomaly,
    DiffEntry,
    DiffOptions,
    DiffResult,
    DiffSeverity,
    DiffStatus,
    DiffSummary,
    Region,
)
from mapdelta.mapfile.models import ParsedResult, Section

log = structlog.get_logger(__name__)

SectionKey = tuple[str, str]


def determine_region(section_name: str) -> Region:
    """Classify a section by name prefix. The memory table is not consulted."""
    if section_name.startswith(FLASH_PREFIXES):
        return "FLASH"
    if section_name.startswith(RAM_PREFIXES):
        return "RAM"
    return "OTHER"


def determine_severity(status: DiffStatus, size_diff_pct: float, size_diff_abs: int) -> DiffSeverity:
    """Severity of a flagged entry.

    Added and removed sections are rated on absolute size; everything else
    on the magnitude of the percent change.
    """
    if status in ("added", "removed"):
        return "critical" if size_diff_abs > DIFF_CRITICAL_SECTION_BYTES else "high"

    magnitude = abs(size_diff_pct)
    if magnitude > DIFF_SEVERITY_PCT_CRITICAL:
        return "critical"
    if magnitude > DIFF_SEVERITY_PCT_HIGH:
        return "high"
    if magnitude > DIFF_SEVERITY_PCT_MEDIUM:
        return "medium"
    return "low"


def _index(result: ParsedResult) -> dict[SectionKey, Section]:
    return {(s.name, s.file_path or ""): s for s in result.sections}


def _status(v1: Section | None, v2: Section | None, size_diff: int) -> DiffStatus:
    if v1 is None:
        return "added"
    if v2 is None:
        return "removed"
    if size_diff > 0:
        return "growth"
    if size_diff < 0:
        return "shrink"
    return "same"


def _reasons(
    status: DiffStatus,
    size_v1: int,
    size_v2: int,
    pct: float,
    address_diff: int | None,
    address_shifted: bool,
    options: DiffOptions,
) -> list[str]:
    reasons: list[str] = []
    size_diff = size_v2 - size_v1

    # Flat threshold, independent of the caller's options
    if status == "added" and size_v2 > DIFF_LARGE_SECTION_BYTES:
        reasons.append(f"New section with {format_bytes(size_v2)}")
    if status == "removed" and size_v1 > DIFF_LARGE_SECTION_BYTES:
        reasons.append(f"Removed section had {format_bytes(size_v1)}")

    if status == "growth" and pct > options.anomaly_growth_threshold:
        reasons.append(f"Grew by {pct:.1f}% ({format_bytes(size_diff)})")
    if status == "shrink" and abs(pct) > options.anomaly_shrink_threshold:
        reasons.append(f"Shrunk by {abs(pct):.1f}% ({format_bytes(abs(size_diff))})")

    if address_shifted and address_diff is not None:
        reasons.append(f"Address shifted by {format_bytes(abs(address_diff))}")
    return reasons


def compute_memory_diff(
    analysis_v1: ParsedResult,
    analysis_v2: ParsedResult,
    options: DiffOptions | None = None,
) -> DiffResult:
    """Align two parsed maps by (name, file) and flag notable changes.

    Args:
        analysis_v1: Baseline version.
        analysis_v2: New version.
        options: Growth/shrink percentages and address shift threshold.

    Returns:
        DiffResult with every identity (unchanged ones included) ordered by
        |sizeDiff|, and anomalies ordered by severity.
    """
    options = options or DiffOptions()

    sections_v1 = _index(analysis_v1)
    sections_v2 = _index(analysis_v2)

    entries: list[DiffEntry] = []
    anomalies: list[DiffAnomaly] = []

    for key in dict.fromkeys([*sections_v1, *sections_v2]):
        name, file_path = key
        v1 = sections_v1.get(key)
        v2 = sections_v2.get(key)

        size_v1 = v1.size if v1 else 0
        size_v2 = v2.size if v2 else 0
        size_diff = size_v2 - size_v1
        pct = pct_change(size_v1, size_v2)
        status = _status(v1, v2, size_diff)

        address_v1 = v1.address if v1 else None
        address_v2 = v2.address if v2 else None
        address_diff: int | None = None
        address_shifted = False
        if address_v1 and address_v2:
            address_diff = int(address_v2, 16) - int(address_v1, 16)
            address_shifted = abs(address_diff) > options.address_shift_threshold

        entry = DiffEntry(
            name=name,
            file_path=file_path or None,
            size_v1=size_v1,
            size_v2=size_v2,
            size_diff=size_diff,
            size_diff_pct=round_pct(pct),
            address_v1=address_v1,
            address_v2=address_v2,
            address_diff=address_diff,
            address_shifted=address_shifted,
            status=status,
            region=determine_region(name),
        )
        entries.append(entry)

        reasons = _reasons(status, size_v1, size_v2, pct, address_diff, address_shifted, options)
        if reasons:
            anomalies.append(
                DiffAnomaly(
                    entry=entry,
                    reasons=reasons,
                    severity=determine_severity(status, pct, abs(size_diff)),
                )
            )

    total_v1 = analysis_v1.total_size
    total_v2 = analysis_v2.total_size
    summary = DiffSummary(
        total_sections_v1=len(analysis_v1.sections),
        total_sections_v2=len(analysis_v2.sections),
        sections_added=sum(1 for e in entries if e.status == "added"),
        sections_removed=sum(1 for e in entries if e.status == "removed"),
        sections_growth=sum(1 for e in entries if e.status == "growth"),
        sections_shrink=sum(1 for e in entries if e.status == "shrink"),
        sections_unchanged=sum(1 for e in entries if e.status == "same"),
        total_size_v1=total_v1,
        total_size_v2=total_v2,
        total_size_diff=total_v2 - total_v1,
        total_size_diff_pct=total_pct_change(total_v1, total_v2),
        anomaly_count=len(anomalies),
    )

    entries.sort(key=lambda e: abs(e.size_diff), reverse=True)
    anomalies.sort(key=lambda a: DIFF_SEVERITY_RANK[a.severity], reverse=True)

    log.info(
        "versions_diffed",
        identities=len(entries),
        anomalies=len(anomalies),
        total_size_diff=summary.total_size_diff,
    )

    return DiffResult(
        summary=summary,
        diff=entries,
        anomalies=anomalies,
        compared_at=utc_timestamp(),
        options=options,
    )
