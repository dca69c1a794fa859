"""Tests for compare/summary.py module.

Covers:
- compare_analyses() section matching, statuses and ordering
- summary totals
- compute_file_groups()
- detect_anomalies() section, file and .bss passes
- CompareResult.to_dict() shape
"""

from __future__ import annotations

import pytest

from mapdelta.compare import (
    CompareOptions,
    compare_analyses,
    compute_file_groups,
    detect_anomalies,
)
from mapdelta.compare.models import SectionDiff
from mapdelta.mapfile.models import ParsedResult, Section
from mapdelta.mapfile.parser import parse_map_text


def _result(*sections: tuple[str, int] | tuple[str, int, str | None]) -> ParsedResult:
    built = []
    for i, row in enumerate(sections):
        name, size = row[0], row[1]
        file_path = row[2] if len(row) > 2 else None
        built.append(Section(name=name, address=f"0x{i * 0x100:08x}", size=size, file_path=file_path))
    return ParsedResult(sections=built)


def _diff(name: str, size_a: int, size_b: int, file: str | None = None) -> SectionDiff:
    status = "added" if size_a == 0 else "removed" if size_b == 0 else "modified"
    pct = (size_b - size_a) / size_a * 100 if size_a else 100.0
    return SectionDiff(
        name=name,
        file=file,
        address_a=None,
        address_b=None,
        size_a=size_a,
        size_b=size_b,
        delta=size_b - size_a,
        delta_pct=round(pct, 2),
        status=status,
    )


class TestSectionMatching:
    """compare_analyses() matches sections by name."""

    def test_modified_section(self) -> None:
        """A 1000 -> 1200 byte .text is a 20% modification."""
        result = compare_analyses(_result((".text", 1000)), _result((".text", 1200)))

        [diff] = result.sections
        assert diff.delta == 200
        assert diff.delta_pct == 20.0
        assert diff.status == "modified"

    def test_twenty_percent_flagged_at_twenty_percent_threshold(self) -> None:
        options = CompareOptions(anomaly_threshold_pct=20)
        result = compare_analyses(_result((".text", 1000)), _result((".text", 1200)), options)

        [anomaly] = result.anomalies
        assert anomaly.type == "section"
        assert anomaly.reasons == ["20.0% change exceeds threshold"]

    def test_twenty_percent_not_flagged_above_threshold(self) -> None:
        options = CompareOptions(anomaly_threshold_pct=20.5)
        result = compare_analyses(_result((".text", 1000)), _result((".text", 1200)), options)
        assert result.anomalies == []

    def test_added_and_removed(self) -> None:
        result = compare_analyses(
            _result((".text.old", 64, "old.o")),
            _result((".text.new", 32, "new.o")),
        )

        by_name = {d.name: d for d in result.sections}
        assert by_name[".text.new"].status == "added"
        assert by_name[".text.new"].delta_pct == 100.0
        assert by_name[".text.new"].address_a is None
        assert by_name[".text.old"].status == "removed"
        assert by_name[".text.old"].delta_pct == -100.0
        assert by_name[".text.old"].file == "old.o"

    def test_unchanged_dropped_by_default(self) -> None:
        a = _result((".text", 10), (".data", 4))
        b = _result((".text", 10), (".data", 8))

        assert [d.name for d in compare_analyses(a, b).sections] == [".data"]

    def test_unchanged_kept_on_request(self) -> None:
        a = _result((".text", 10), (".data", 4))
        b = _result((".text", 10), (".data", 8))

        result = compare_analyses(a, b, CompareOptions(include_unchanged=True))

        unchanged = next(d for d in result.sections if d.name == ".text")
        assert unchanged.delta == 0
        assert unchanged.delta_pct == 0.0
        assert unchanged.status == "modified"

    def test_last_duplicate_wins(self) -> None:
        """Repeated names collapse to the last occurrence."""
        a = _result((".text", 100, "a.o"), (".text", 40, "b.o"))
        b = _result((".text", 50, "b.o"))

        [diff] = compare_analyses(a, b).sections
        assert diff.size_a == 40
        assert diff.delta == 10

    def test_file_prefers_b(self) -> None:
        a = _result((".text.f", 10, "old.o"))
        b = _result((".text.f", 20, "new.o"))
        assert compare_analyses(a, b).sections[0].file == "new.o"

    def test_self_compare_is_empty(self, map_v1_text: str) -> None:
        analysis = parse_map_text(map_v1_text)

        result = compare_analyses(analysis, analysis)

        assert result.sections == []
        assert result.file_groups == []
        assert result.anomalies == []
        assert result.summary.flash_delta == 0
        assert result.summary.ram_delta == 0

    def test_sections_ordered_by_absolute_delta(self) -> None:
        a = _result((".a", 100), (".b", 100), (".c", 100))
        b = _result((".a", 110), (".b", 40), (".c", 130))
        assert [d.name for d in compare_analyses(a, b).sections] == [".b", ".c", ".a"]


class TestTopLists:
    """topIncreases / topDecreases."""

    def test_increases_and_decreases(self) -> None:
        a = _result((".a", 100), (".b", 100), (".c", 100), (".d", 100))
        b = _result((".a", 150), (".b", 90), (".c", 300), (".d", 20))

        result = compare_analyses(a, b)

        assert [d.name for d in result.top_increases] == [".c", ".a"]
        # Largest shrink first
        assert [d.name for d in result.top_decreases] == [".d", ".b"]

    def test_top_n_limits_both_lists(self) -> None:
        a = _result((".a", 100), (".b", 100), (".c", 100), (".d", 100))
        b = _result((".a", 150), (".b", 90), (".c", 300), (".d", 20))

        result = compare_analyses(a, b, CompareOptions(top_n=1))

        assert [d.name for d in result.top_increases] == [".c"]
        assert [d.name for d in result.top_decreases] == [".d"]


class TestSummary:
    """Flash/RAM totals and status counts."""

    def test_totals_by_prefix(self) -> None:
        a = _result((".text", 1000), (".rodata", 200), (".data", 50), (".bss", 100), (".comment", 999))
        b = _result((".text", 1100), (".rodata", 200), (".bss", 300), (".noinit", 5))

        s = compare_analyses(a, b).summary

        assert (s.total_flash_a, s.total_flash_b) == (1200, 1300)
        assert (s.total_ram_a, s.total_ram_b) == (150, 300)
        assert s.flash_delta == 100
        assert s.flash_delta_pct == 8.33
        assert s.ram_delta == 150
        assert s.ram_delta_pct == 100.0
        assert (s.total_sections_a, s.total_sections_b) == (5, 4)
        assert (s.sections_added, s.sections_removed, s.sections_modified) == (1, 2, 2)

    def test_zero_baseline_pct_is_zero(self) -> None:
        s = compare_analyses(_result((".comment", 1)), _result((".bss", 10))).summary
        assert s.ram_delta == 10
        assert s.ram_delta_pct == 0.0

    def test_firmware_fixture(self, map_v1_text: str, map_v2_text: str) -> None:
        result = compare_analyses(parse_map_text(map_v1_text), parse_map_text(map_v2_text))
        s = result.summary

        assert (s.total_flash_a, s.total_flash_b, s.flash_delta) == (3024, 4816, 1792)
        assert s.flash_delta_pct == 59.26
        assert (s.total_ram_a, s.total_ram_b, s.ram_delta) == (2056, 4104, 2048)
        assert s.ram_delta_pct == 99.61
        assert (s.sections_added, s.sections_removed, s.sections_modified) == (1, 0, 3)

        assert [d.name for d in result.sections] == [".bss", ".text", ".text.main", ".text.crc32"]
        assert [(a.name, a.severity) for a in result.anomalies] == [
            (".bss", "medium"),
            (".text", "medium"),
            (".text.main", "medium"),
            (".text.crc32", "medium"),
        ]


class TestFileGroups:
    """Tests for compute_file_groups()."""

    def test_groups_by_file(self) -> None:
        diffs = [
            _diff(".text.a", 100, 200, "main.o"),
            _diff(".data.a", 10, 5, "main.o"),
            _diff(".text.b", 0, 50, "crc.o"),
            _diff(".bss", 100, 400),
        ]

        groups = compute_file_groups(diffs)

        assert [g.file for g in groups] == ["unknown", "main.o", "crc.o"]
        main = groups[1]
        assert main.to_dict() == {
            "file": "main.o",
            "sizeA": 110,
            "sizeB": 205,
            "delta": 95,
            "deltaPct": 86.36,
            "sectionCount": 2,
            "sections": [".text.a", ".data.a"],
        }
        assert groups[2].delta_pct == 100.0

    def test_empty(self) -> None:
        assert compute_file_groups([]) == []


class TestDetectAnomalies:
    """Tests for detect_anomalies()."""

    def test_section_reasons_accumulate(self) -> None:
        diffs = [_diff(".text.big", 0, 3000, "big.o")]

        [anomaly] = [a for a in detect_anomalies(diffs, [], threshold_pct=20, threshold_bytes=1024)]

        assert anomaly.reasons == [
            "100.0% change exceeds threshold",
            "3000 bytes change exceeds threshold",
            "New section with 3000 bytes",
        ]
        assert anomaly.severity == "medium"
        assert anomaly.to_dict() == {
            "type": "section",
            "name": ".text.big",
            "file": "big.o",
            "severity": "medium",
            "reasons": anomaly.reasons,
            "delta": 3000,
            "deltaPct": 100.0,
        }

    def test_removed_large_section(self) -> None:
        diffs = [_diff(".text.gone", 2100, 0)]
        [anomaly] = detect_anomalies(diffs, [], threshold_pct=1000, threshold_bytes=1024)
        assert anomaly.reasons == [
            "2100 bytes change exceeds threshold",
            "Removed section had 2100 bytes",
        ]

    def test_high_severity_above_ten_times_bytes(self) -> None:
        diffs = [_diff(".text", 1000, 12_000)]
        [anomaly] = detect_anomalies(diffs, [], threshold_pct=20, threshold_bytes=1024)
        assert anomaly.severity == "high"

    def test_small_increases_flag_file(self) -> None:
        """More than five small increases in one file suggests fragmentation."""
        diffs = [_diff(f".text.f{i}", 100, 110, "util.o") for i in range(6)]
        groups = compute_file_groups(diffs)

        anomalies = detect_anomalies(diffs, groups, threshold_pct=50, threshold_bytes=1024)

        [file_anomaly] = [a for a in anomalies if a.type == "file"]
        assert file_anomaly.name == "util.o"
        assert file_anomaly.reasons == ["6 small increases detected (potential fragmentation)"]
        assert file_anomaly.severity == "low"
        assert file_anomaly.to_dict()["affectedSections"] == 6

    def test_small_increases_counted_for_unknown_group(self) -> None:
        diffs = [_diff(f".text.f{i}", 100, 110) for i in range(6)]
        groups = compute_file_groups(diffs)

        anomalies = detect_anomalies(diffs, groups, threshold_pct=50, threshold_bytes=1024)

        assert [a.name for a in anomalies if a.type == "file"] == ["unknown"]

    def test_five_small_increases_not_flagged(self) -> None:
        diffs = [_diff(f".text.f{i}", 100, 110, "util.o") for i in range(5)]
        anomalies = detect_anomalies(diffs, compute_file_groups(diffs), threshold_pct=50, threshold_bytes=1024)
        assert anomalies == []

    def test_large_file_change(self) -> None:
        diffs = [_diff(".text.a", 10_000, 31_000, "dsp.o")]
        groups = compute_file_groups(diffs)

        anomalies = detect_anomalies(diffs, groups, threshold_pct=1000, threshold_bytes=1024)

        [file_anomaly] = [a for a in anomalies if a.type == "file"]
        assert file_anomaly.reasons == ["Total file change of 21000 bytes"]
        assert file_anomaly.severity == "high"  # 21000 > 20 * 1024

    def test_bss_growth_pattern(self) -> None:
        diffs = [
            _diff(".bss.a", 100, 3100),
            _diff(".bss.b", 100, 3200),
            _diff(".bss.c", 500, 400),
        ]

        anomalies = detect_anomalies(diffs, [], threshold_pct=1000, threshold_bytes=1024)

        [pattern] = [a for a in anomalies if a.type == "pattern"]
        assert pattern.to_dict() == {
            "type": "pattern",
            "name": ".bss sections",
            "severity": "medium",
            "reasons": ["Significant .bss growth of 6000 bytes (check uninitialized globals)"],
            "delta": 6000,
            "affectedSections": 2,
        }

    def test_bss_growth_below_threshold(self) -> None:
        diffs = [_diff(".bss.a", 100, 5000)]
        anomalies = detect_anomalies(diffs, [], threshold_pct=1000, threshold_bytes=1024)
        assert [a for a in anomalies if a.type == "pattern"] == []

    def test_sorted_by_severity_then_delta(self) -> None:
        diffs = [
            _diff(".text.small", 100, 200),
            _diff(".text.huge", 1000, 20_000),
            _diff(".text.mid", 100, 400),
        ]
        anomalies = detect_anomalies(diffs, [], threshold_pct=20, threshold_bytes=1024)
        assert [a.name for a in anomalies] == [".text.huge", ".text.mid", ".text.small"]


class TestCompareResultDict:
    """CompareResult.to_dict() shape."""

    def test_top_level_keys(self) -> None:
        options = CompareOptions(top_n=5)
        result = compare_analyses(_result((".text", 1)), _result((".text", 2)), options)

        data = result.to_dict()

        assert set(data) == {
            "summary",
            "sections",
            "fileGroups",
            "topIncreases",
            "topDecreases",
            "anomalies",
            "metadata",
        }
        assert data["metadata"]["optionsUsed"] == {
            "topN": 5,
            "anomalyThresholdPct": 20.0,
            "anomalyThresholdBytes": 1024,
            "includeUnchanged": False,
        }
        assert data["metadata"]["comparedAt"].endswith("Z")
        assert data["sections"][0] == {
            "name": ".text",
            "file": None,
            "addressA": "0x00000000",
            "addressB": "0x00000000",
            "sizeA": 1,
            "sizeB": 2,
            "delta": 1,
            "deltaPct": 100.0,
            "status": "modified",
        }


class TestCompareOptions:
    """CompareOptions validation and construction."""

    def test_accepts_camel_case(self) -> None:
        options = CompareOptions.model_validate({"topN": 3, "anomalyThresholdBytes": 10})
        assert options.top_n == 3
        assert options.anomaly_threshold_bytes == 10

    def test_rejects_negative(self) -> None:
        with pytest.raises(ValueError):
            CompareOptions(top_n=-1)

    def test_from_config_ignores_none(self) -> None:
        from mapdelta.config.models import CompareConfig

        options = CompareOptions.from_config(CompareConfig(top_n=7), top_n=None, anomaly_threshold_pct=5.0)
        assert options.top_n == 7
        assert options.anomaly_threshold_pct == 5.0
