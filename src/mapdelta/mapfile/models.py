"""Map file data models.

All models are plain dataclasses. ``to_dict()`` produces the JSON shape the
dashboard consumes, so field names there are camelCase and part of the
contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class MemoryRegion:
    """A named memory bank from the ``Memory Configuration`` table."""

    name: str
    origin: str  # "0x08000000", digits as written in the map
    length: str
    length_bytes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "origin": self.origin,
            "length": self.length,
            "lengthBytes": self.length_bytes,
        }


@dataclass(frozen=True, slots=True)
class Section:
    """One output (sub)section line of the memory map."""

    name: str
    address: str | None
    size: int
    file_path: str | None = None  # basename of the contributing object

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "size": self.size,
            "filePath": self.file_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Section:
        return cls(
            name=data["name"],
            address=data.get("address"),
            size=int(data["size"]),
            file_path=data.get("filePath"),
        )


@dataclass(frozen=True, slots=True)
class AggregatedSection:
    """Sections collapsed into a parent group. File identity is dropped."""

    name: str
    size: int
    subsections: int
    file_path: None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "size": self.size,
            "subsections": self.subsections,
            "filePath": None,
        }


@dataclass
class ParsedResult:
    """Memory regions plus every non-empty section, largest first."""

    memory: dict[str, MemoryRegion] = field(default_factory=dict)
    sections: list[Section] = field(default_factory=list)

    @property
    def total_size(self) -> int:
        return sum(s.size for s in self.sections)

    @property
    def is_empty(self) -> bool:
        """True when nothing was recognised; callers treat this as an invalid file."""
        return not self.sections

    def to_dict(self) -> dict[str, Any]:
        return {
            "memory": {name: region.to_dict() for name, region in self.memory.items()},
            "sections": [s.to_dict() for s in self.sections],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ParsedResult:
        """Rebuild a result from its JSON shape (e.g. a saved /analyze response)."""
        memory = {
            name: MemoryRegion(
                name=name,
                origin=region["origin"],
                length=region["length"],
                length_bytes=int(region["lengthBytes"]),
            )
            for name, region in data.get("memory", {}).items()
        }
        sections = [Section.from_dict(s) for s in data.get("sections", [])]
        return cls(memory=memory, sections=sections)


@dataclass(frozen=True, slots=True)
class MemoryUsage:
    """Used vs available FLASH and RAM for a single parse."""

    total_flash: int
    used_flash: int
    total_ram: int
    used_ram: int

    @property
    def flash_usage_percent(self) -> float:
        return self.used_flash / self.total_flash * 100 if self.total_flash > 0 else 0.0

    @property
    def ram_usage_percent(self) -> float:
        return self.used_ram / self.total_ram * 100 if self.total_ram > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalFlash": self.total_flash,
            "usedFlash": self.used_flash,
            "totalRAM": self.total_ram,
            "usedRAM": self.used_ram,
            "flashUsagePercent": self.flash_usage_percent,
            "ramUsagePercent": self.ram_usage_percent,
        }
