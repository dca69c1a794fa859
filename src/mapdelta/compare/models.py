"""Summary comparison models.

Options are a frozen pydantic model so they are validated once where a
request enters the system; results are plain dataclasses serialised with
``to_dict()`` into the camelCase shape the dashboard reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mapdelta.config.models import CompareConfig

SectionStatus = Literal["added", "removed", "modified"]
CompareSeverity = Literal["high", "medium", "low"]
AnomalyType = Literal["section", "file", "pattern"]


class CompareOptions(BaseModel):
    """Thresholds for a summary comparison. Absent values take the defaults."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    top_n: int = Field(default=20, ge=0)
    anomaly_threshold_pct: float = Field(default=20.0, ge=0)
    anomaly_threshold_bytes: int = Field(default=1024, ge=0)
    include_unchanged: bool = False

    @classmethod
    def from_config(cls, config: CompareConfig, **overrides: Any) -> CompareOptions:
        """Defaults from configuration, with per-request overrides (None is ignored)."""
        values: dict[str, Any] = config.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True, slots=True)
class SectionDiff:
    """Size change of one section name between build A and build B."""

    name: str
    file: str | None
    address_a: str | None
    address_b: str | None
    size_a: int
    size_b: int
    delta: int
    delta_pct: float  # rounded to 2 decimals
    status: SectionStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "file": self.file,
            "addressA": self.address_a,
            "addressB": self.address_b,
            "sizeA": self.size_a,
            "sizeB": self.size_b,
            "delta": self.delta,
            "deltaPct": self.delta_pct,
            "status": self.status,
        }


@dataclass
class FileGroup:
    """Section diffs rolled up per contributing object file."""

    file: str
    size_a: int = 0
    size_b: int = 0
    delta: int = 0
    delta_pct: float = 0.0
    section_count: int = 0
    sections: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "sizeA": self.size_a,
            "sizeB": self.size_b,
            "delta": self.delta,
            "deltaPct": self.delta_pct,
            "sectionCount": self.section_count,
            "sections": list(self.sections),
        }


@dataclass
class CompareAnomaly:
    """A section, file group or global pattern flagged by the comparer."""

    type: AnomalyType
    name: str
    severity: CompareSeverity
    reasons: list[str]
    delta: int
    file: str | None = None
    delta_pct: float | None = None
    affected_sections: int | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "type": self.type,
            "name": self.name,
        }
        if self.type == "section":
            d["file"] = self.file
        d["severity"] = self.severity
        d["reasons"] = list(self.reasons)
        d["delta"] = self.delta
        if self.type in ("section", "file"):
            d["deltaPct"] = self.delta_pct
        if self.type in ("file", "pattern"):
            d["affectedSections"] = self.affected_sections
        return d


@dataclass(frozen=True, slots=True)
class CompareSummary:
    """Flash/RAM totals per build plus section status counts."""

    total_flash_a: int
    total_flash_b: int
    total_ram_a: int
    total_ram_b: int
    flash_delta: int
    flash_delta_pct: float
    ram_delta: int
    ram_delta_pct: float
    total_sections_a: int
    total_sections_b: int
    sections_added: int
    sections_removed: int
    sections_modified: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalFlashA": self.total_flash_a,
            "totalFlashB": self.total_flash_b,
            "totalRamA": self.total_ram_a,
            "totalRamB": self.total_ram_b,
            "flashDelta": self.flash_delta,
            "flashDeltaPct": self.flash_delta_pct,
            "ramDelta": self.ram_delta,
            "ramDeltaPct": self.ram_delta_pct,
            "totalSectionsA": self.total_sections_a,
            "totalSectionsB": self.total_sections_b,
            "sectionsAdded": self.sections_added,
            "sectionsRemoved": self.sections_removed,
            "sectionsModified": self.sections_modified,
        }


@dataclass
class CompareResult:
    """Full output of compare_analyses()."""

    summary: CompareSummary
    sections: list[SectionDiff]
    file_groups: list[FileGroup]
    top_increases: list[SectionDiff]
    top_decreases: list[SectionDiff]
    anomalies: list[CompareAnomaly]
    compared_at: str
    options: CompareOptions

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "sections": [s.to_dict() for s in self.sections],
            "fileGroups": [g.to_dict() for g in self.file_groups],
            "topIncreases": [s.to_dict() for s in self.top_increases],
            "topDecreases": [s.to_dict() for s in self.top_decreases],
            "anomalies": [a.to_dict() for a in self.anomalies],
            "metadata": {
                "comparedAt": self.compared_at,
                "optionsUsed": self.options.to_dict(),
            },
        }
