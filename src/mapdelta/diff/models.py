"""Version diff models.

Entries are keyed by (section name, object file), unlike the summary
comparer which keys by name alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mapdelta.config.models import DiffConfig

DiffStatus = Literal["added", "removed", "growth", "shrink", "same"]
DiffSeverity = Literal["critical", "high", "medium", "low"]
Region = Literal["FLASH", "RAM", "OTHER"]


class DiffOptions(BaseModel):
    """Thresholds for a version diff."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    anomaly_growth_threshold: float = Field(default=10.0, ge=0)
    anomaly_shrink_threshold: float = Field(default=10.0, ge=0)
    address_shift_threshold: int = Field(default=0x1000, ge=0)

    @classmethod
    def from_config(cls, config: DiffConfig, **overrides: Any) -> DiffOptions:
        values: dict[str, Any] = config.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True, slots=True)
class DiffEntry:
    """One (name, file) identity across the two versions."""

    name: str
    file_path: str | None
    size_v1: int
    size_v2: int
    size_diff: int
    size_diff_pct: float  # rounded to 2 decimals
    address_v1: str | None
    address_v2: str | None
    address_diff: int | None
    address_shifted: bool
    status: DiffStatus
    region: Region

    @property
    def key(self) -> str:
        return f"{self.name}:{self.file_path or ''}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "filePath": self.file_path,
            "sizeV1": self.size_v1,
            "sizeV2": self.size_v2,
            "sizeDiff": self.size_diff,
            "sizeDiffPct": self.size_diff_pct,
            "addressV1": self.address_v1,
            "addressV2": self.address_v2,
            "addressDiff": self.address_diff,
            "addressShifted": self.address_shifted,
            "status": self.status,
            "region": self.region,
        }


@dataclass(frozen=True, slots=True)
class DiffAnomaly:
    """A DiffEntry that tripped at least one check."""

    entry: DiffEntry
    reasons: list[str]
    severity: DiffSeverity

    def to_dict(self) -> dict[str, Any]:
        d = self.entry.to_dict()
        d["reasons"] = list(self.reasons)
        d["severity"] = self.severity
        return d


@dataclass(frozen=True, slots=True)
class DiffSummary:
    total_sections_v1: int
    total_sections_v2: int
    sections_added: int
    sections_removed: int
    sections_growth: int
    sections_shrink: int
    sections_unchanged: int
    total_size_v1: int
    total_size_v2: int
    total_size_diff: int
    total_size_diff_pct: float
    anomaly_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalSectionsV1": self.total_sections_v1,
            "totalSectionsV2": self.total_sections_v2,
            "sectionsAdded": self.sections_added,
            "sectionsRemoved": self.sections_removed,
            "sectionsGrowth": self.sections_growth,
            "sectionsShrink": self.sections_shrink,
            "sectionsUnchanged": self.sections_unchanged,
            "totalSizeV1": self.total_size_v1,
            "totalSizeV2": self.total_size_v2,
            "totalSizeDiff": self.total_size_diff,
            "totalSizeDiffPct": self.total_size_diff_pct,
            "anomalyCount": self.anomaly_count,
        }


@dataclass
class DiffResult:
    """Full output of compute_memory_diff()."""

    summary: DiffSummary
    diff: list[DiffEntry]
    anomalies: list[DiffAnomaly]
    compared_at: str
    options: DiffOptions

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "diff": [e.to_dict() for e in self.diff],
            "anomalies": [a.to_dict() for a in self.anomalies],
            "metadata": {
                "comparedAt": self.compared_at,
                "options": self.options.to_dict(),
            },
        }
