"""Summary comparison of two parsed map files.

Sections are matched by name only. The result carries per-section deltas,
per-object-file rollups, top increase/decrease lists and three independent
anomaly passes (section, file group, .bss pattern).
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from mapdelta.compare.models import (
    CompareAnomaly,
    CompareOptions,
    CompareResult,
    CompareSummary,
    FileGroup,
    SectionDiff,
    SectionStatus,
)
from mapdelta.config.constants import (
    BSS_PREFIX,
    COMPARE_BSS_GROWTH_FACTOR,
    COMPARE_FILE_CHANGE_FACTOR,
    COMPARE_HIGH_FILE_FACTOR,
    COMPARE_HIGH_SECTION_FACTOR,
    COMPARE_LARGE_SECTION_FACTOR,
    COMPARE_SMALL_INCREASE_COUNT,
    FLASH_PREFIXES,
    RAM_PREFIXES,
    UNKNOWN_FILE,
)
from mapdelta.core.formatting import (
    COMPARE_SEVERITY_RANK,
    pct_change,
    round_pct,
    total_pct_change,
    utc_timestamp,
)
from mapdelta.mapfile.models import ParsedResult, Section

log = structlog.get_logger(__name__)


def compare_analyses(
    analysis_a: ParsedResult,
    analysis_b: ParsedResult,
    options: CompareOptions | None = None,
) -> CompareResult:
    """Compare two parsed map files section by section.

    Args:
        analysis_a: Baseline build.
        analysis_b: New build.
        options: Thresholds; defaults apply when omitted.

    Returns:
        CompareResult with sections and file groups ordered by |delta|.
    """
    options = options or CompareOptions()

    section_diffs = diff_sections(analysis_a, analysis_b, include_unchanged=options.include_unchanged)
    file_groups = compute_file_groups(section_diffs)
    summary = _summarize(analysis_a, analysis_b, section_diffs)

    by_delta = sorted(section_diffs, key=lambda d: d.delta, reverse=True)
    top_increases = [d for d in by_delta if d.delta > 0][: options.top_n]
    top_decreases = list(reversed([d for d in by_delta if d.delta < 0]))[: options.top_n]

    anomalies = detect_anomalies(
        section_diffs,
        file_groups,
        threshold_pct=options.anomaly_threshold_pct,
        threshold_bytes=options.anomaly_threshold_bytes,
    )

    log.info(
        "builds_compared",
        sections_changed=len(section_diffs),
        file_groups=len(file_groups),
        anomalies=len(anomalies),
        flash_delta=summary.flash_delta,
        ram_delta=summary.ram_delta,
    )

    return CompareResult(
        summary=summary,
        sections=sorted(section_diffs, key=lambda d: abs(d.delta), reverse=True),
        file_groups=file_groups,
        top_increases=top_increases,
        top_decreases=top_decreases,
        anomalies=anomalies,
        compared_at=utc_timestamp(),
        options=options,
    )


def diff_sections(
    analysis_a: ParsedResult,
    analysis_b: ParsedResult,
    *,
    include_unchanged: bool = False,
) -> list[SectionDiff]:
    """Per-name size deltas in name order (A's names first, then names new in B).

    When a name occurs more than once in a parse, the last occurrence wins.
    """
    sections_a = {s.name: s for s in analysis_a.sections}
    sections_b = {s.name: s for s in analysis_b.sections}

    diffs: list[SectionDiff] = []
    for name in dict.fromkeys([*sections_a, *sections_b]):
        sec_a = sections_a.get(name)
        sec_b = sections_b.get(name)

        size_a = sec_a.size if sec_a else 0
        size_b = sec_b.size if sec_b else 0
        delta = size_b - size_a

        if delta == 0 and not include_unchanged:
            continue

        diffs.append(
            SectionDiff(
                name=name,
                file=_file_of(sec_b) or _file_of(sec_a),
                address_a=sec_a.address if sec_a else None,
                address_b=sec_b.address if sec_b else None,
                size_a=size_a,
                size_b=size_b,
                delta=delta,
                delta_pct=round_pct(pct_change(size_a, size_b)),
                status=_status(size_a, size_b),
            )
        )
    return diffs


def _file_of(section: Section | None) -> str | None:
    return section.file_path if section else None


def _status(size_a: int, size_b: int) -> SectionStatus:
    if size_a == 0:
        return "added"
    if size_b == 0:
        return "removed"
    return "modified"


def compute_file_groups(section_diffs: Iterable[SectionDiff]) -> list[FileGroup]:
    """Roll section diffs up per object file, largest |delta| first.

    Sections without a file are grouped under ``"unknown"``.
    """
    groups: dict[str, FileGroup] = {}
    for diff in section_diffs:
        key = diff.file or UNKNOWN_FILE
        group = groups.setdefault(key, FileGroup(file=key))
        group.size_a += diff.size_a
        group.size_b += diff.size_b
        group.delta += diff.delta
        group.section_count += 1
        group.sections.append(diff.name)

    for group in groups.values():
        group.delta_pct = round_pct(pct_change(group.size_a, group.size_b))

    return sorted(groups.values(), key=lambda g: abs(g.delta), reverse=True)


def _sum_sizes(sections: Iterable[Section], prefixes: tuple[str, ...]) -> int:
    return sum(s.size for s in sections if s.name.startswith(prefixes))


def _summarize(
    analysis_a: ParsedResult,
    analysis_b: ParsedResult,
    section_diffs: list[SectionDiff],
) -> CompareSummary:
    # Totals come from the full parses, not the (possibly filtered) diff list
    flash_a = _sum_sizes(analysis_a.sections, FLASH_PREFIXES)
    flash_b = _sum_sizes(analysis_b.sections, FLASH_PREFIXES)
    ram_a = _sum_sizes(analysis_a.sections, RAM_PREFIXES)
    ram_b = _sum_sizes(analysis_b.sections, RAM_PREFIXES)

    return CompareSummary(
        total_flash_a=flash_a,
        total_flash_b=flash_b,
        total_ram_a=ram_a,
        total_ram_b=ram_b,
        flash_delta=flash_b - flash_a,
        flash_delta_pct=total_pct_change(flash_a, flash_b),
        ram_delta=ram_b - ram_a,
        ram_delta_pct=total_pct_change(ram_a, ram_b),
        total_sections_a=len(analysis_a.sections),
        total_sections_b=len(analysis_b.sections),
        sections_added=sum(1 for d in section_diffs if d.status == "added"),
        sections_removed=sum(1 for d in section_diffs if d.status == "removed"),
        sections_modified=sum(1 for d in section_diffs if d.status == "modified"),
    )


def detect_anomalies(
    section_diffs: list[SectionDiff],
    file_groups: list[FileGroup],
    *,
    threshold_pct: float,
    threshold_bytes: int,
) -> list[CompareAnomaly]:
    """Run the section, file-group and .bss passes.

    Every check in a pass is evaluated; a target collects all of its
    reasons in one anomaly. Output is ordered by severity, then |delta|.
    """
    anomalies = [
        *_section_anomalies(section_diffs, threshold_pct, threshold_bytes),
        *_file_anomalies(section_diffs, file_groups, threshold_bytes),
        *_bss_anomalies(section_diffs, threshold_bytes),
    ]
    anomalies.sort(key=lambda a: (-COMPARE_SEVERITY_RANK[a.severity], -abs(a.delta)))
    return anomalies


def _section_anomalies(
    section_diffs: list[SectionDiff],
    threshold_pct: float,
    threshold_bytes: int,
) -> list[CompareAnomaly]:
    anomalies: list[CompareAnomaly] = []
    large_section = threshold_bytes * COMPARE_LARGE_SECTION_FACTOR

    for diff in section_diffs:
        reasons: list[str] = []

        # Inclusive: a 20% change trips a 20% threshold. Unchanged rows never do.
        if diff.delta and abs(diff.delta_pct) >= threshold_pct:
            reasons.append(f"{abs(diff.delta_pct):.1f}% change exceeds threshold")

        if abs(diff.delta) > threshold_bytes:
            reasons.append(f"{abs(diff.delta)} bytes change exceeds threshold")

        if diff.status == "added" and diff.size_b > large_section:
            reasons.append(f"New section with {diff.size_b} bytes")

        if diff.status == "removed" and diff.size_a > large_section:
            reasons.append(f"Removed section had {diff.size_a} bytes")

        if reasons:
            high = abs(diff.delta) > threshold_bytes * COMPARE_HIGH_SECTION_FACTOR
            anomalies.append(
                CompareAnomaly(
                    type="section",
                    name=diff.name,
                    file=diff.file,
                    severity="high" if high else "medium",
                    reasons=reasons,
                    delta=diff.delta,
                    delta_pct=diff.delta_pct,
                )
            )
    return anomalies


def _file_anomalies(
    section_diffs: list[SectionDiff],
    file_groups: list[FileGroup],
    threshold_bytes: int,
) -> list[CompareAnomaly]:
    anomalies: list[CompareAnomaly] = []

    small_increases: dict[str, int] = {}
    for diff in section_diffs:
        if 0 < diff.delta < threshold_bytes:
            key = diff.file or UNKNOWN_FILE
            small_increases[key] = small_increases.get(key, 0) + 1

    for group in file_groups:
        reasons: list[str] = []

        count = small_increases.get(group.file, 0)
        if count > COMPARE_SMALL_INCREASE_COUNT:
            reasons.append(f"{count} small increases detected (potential fragmentation)")

        if abs(group.delta) > threshold_bytes * COMPARE_FILE_CHANGE_FACTOR:
            reasons.append(f"Total file change of {group.delta} bytes")

        if reasons:
            high = abs(group.delta) > threshold_bytes * COMPARE_HIGH_FILE_FACTOR
            anomalies.append(
                CompareAnomaly(
                    type="file",
                    name=group.file,
                    severity="high" if high else "low",
                    reasons=reasons,
                    delta=group.delta,
                    delta_pct=group.delta_pct,
                    affected_sections=group.section_count,
                )
            )
    return anomalies


def _bss_anomalies(section_diffs: list[SectionDiff], threshold_bytes: int) -> list[CompareAnomaly]:
    bss = [d for d in section_diffs if d.name.startswith(BSS_PREFIX)]
    total = sum(d.delta for d in bss)
    if total <= threshold_bytes * COMPARE_BSS_GROWTH_FACTOR:
        return []
    return [
        CompareAnomaly(
            type="pattern",
            name=".bss sections",
            severity="medium",
            reasons=[f"Significant .bss growth of {total} bytes (check uninitialized globals)"],
            delta=total,
            affected_sections=sum(1 for d in bss if d.delta > 0),
        )
    ]
