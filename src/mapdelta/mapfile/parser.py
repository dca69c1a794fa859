"""GNU ld map file parser.

Two independent line matchers share one interface:

- ``MemoryLineMatcher`` recognises rows of the ``Memory Configuration``
  table (``FLASH  0x08000000  0x00100000  xr``).
- ``SectionLineMatcher`` recognises section placement lines
  (``.text.main  0x00000778  0x00000c00  build/main.o``).

Parsing is lenient: toolchain versions disagree on column widths and
decorations, and anything that does not match is skipped rather than
reported. A file with no recognisable lines parses to an empty result.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar

import structlog

from mapdelta.core.errors import InputError
from mapdelta.mapfile.models import MemoryRegion, ParsedResult, Section

log = structlog.get_logger(__name__)

# Text between the "Memory Configuration" header and the first blank line
# (or the "Linker script" header when the blank line is missing).
_MEMORY_BLOCK_RE = re.compile(
    r"Memory Configuration\s+(.*?)(?=\n\n|\nLinker script)",
    re.DOTALL,
)

# A section name that ld pushed onto a line of its own because it was wider
# than the name column; the address/size follow on the next line.
_WRAPPED_NAME_RE = re.compile(r"^\s*(\.[A-Za-z0-9_.]+)\s*$")
_WRAPPED_TAIL_RE = re.compile(r"^\s+(0x[0-9a-fA-F]+\s+0x[0-9a-fA-F]+.*)$")

# Output section lines carry the LMA instead of an object file.
_LOAD_ADDRESS_PREFIX = "load address"


class LineKind(Enum):
    """What a classified map line describes."""

    MEMORY = "memory"
    SECTION = "section"


@dataclass(frozen=True, slots=True)
class LineMatch:
    """A classified line and the record built from it."""

    kind: LineKind
    record: MemoryRegion | Section


class LineMatcher:
    """Base for single-line pattern matchers."""

    kind: ClassVar[LineKind]
    pattern: ClassVar[re.Pattern[str]]

    def match(self, line: str) -> MemoryRegion | Section | None:
        m = self.pattern.match(line)
        if m is None:
            return None
        return self._build(m)

    def _build(self, m: re.Match[str]) -> MemoryRegion | Section | None:
        raise NotImplementedError


class MemoryLineMatcher(LineMatcher):
    """``NAME  0xORIGIN  0xLENGTH [attributes]`` with NAME in ``[A-Z_]+``."""

    kind = LineKind.MEMORY
    pattern = re.compile(r"^([A-Z_]+)\s+0x([0-9a-fA-F]+)\s+0x([0-9a-fA-F]+)")

    def _build(self, m: re.Match[str]) -> MemoryRegion:
        name, origin, length = m.groups()
        return MemoryRegion(
            name=name,
            origin=f"0x{origin}",
            length=f"0x{length}",
            length_bytes=int(length, 16),
        )


class SectionLineMatcher(LineMatcher):
    """``.name  0xADDRESS  0xSIZE [object path]``.

    Zero-size placements are matched but produce no record.
    """

    kind = LineKind.SECTION
    pattern = re.compile(
        r"^\s*(\.[A-Za-z0-9_.]+)\s+0x([0-9a-fA-F]+)\s+0x([0-9a-fA-F]+)(?:\s+(.+))?"
    )

    def _build(self, m: re.Match[str]) -> Section | None:
        name, address, size_hex, trailer = m.groups()
        size = int(size_hex, 16)
        if size == 0:
            return None
        return Section(
            name=name,
            address=f"0x{address}",
            size=size,
            file_path=object_basename(trailer),
        )


MEMORY_MATCHER = MemoryLineMatcher()
SECTION_MATCHER = SectionLineMatcher()
_MATCHERS: tuple[LineMatcher, ...] = (SECTION_MATCHER, MEMORY_MATCHER)


def object_basename(trailer: str | None) -> str | None:
    """Reduce the trailing object path of a section line to its basename.

    Both ``/`` and ``\\`` separators are stripped since maps are produced on
    either platform. ``load address 0x...`` trailers name no object.
    """
    if trailer is None:
        return None
    path = trailer.strip()
    if not path or path.startswith(_LOAD_ADDRESS_PREFIX):
        return None
    path = path.rsplit("/", 1)[-1]
    path = path.rsplit("\\", 1)[-1]
    return path or None


def classify_line(line: str) -> LineMatch | None:
    """Classify a single map line as a memory row or a section placement.

    Returns None for every other line, including zero-size placements.
    """
    for matcher in _MATCHERS:
        record = matcher.match(line)
        if record is not None:
            return LineMatch(kind=matcher.kind, record=record)
    return None


def parse_memory_regions(text: str) -> dict[str, MemoryRegion]:
    """Parse the ``Memory Configuration`` table. Empty if the block is absent."""
    block = _MEMORY_BLOCK_RE.search(text)
    if block is None:
        return {}

    regions: dict[str, MemoryRegion] = {}
    for line in block.group(1).split("\n"):
        region = MEMORY_MATCHER.match(line)
        if isinstance(region, MemoryRegion):
            regions[region.name] = region
    return regions


def _join_wrapped(lines: list[str]) -> list[str]:
    """Merge ``.long_name`` / ``0xADDR 0xSIZE obj`` line pairs into one line."""
    joined: list[str] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        name = _WRAPPED_NAME_RE.match(line)
        if name is not None and i + 1 < len(lines):
            tail = _WRAPPED_TAIL_RE.match(lines[i + 1])
            if tail is not None:
                joined.append(f" {name.group(1)} {tail.group(1)}")
                i += 2
                continue
        joined.append(line)
        i += 1
    return joined


def parse_sections(text: str, *, join_wrapped_names: bool = False) -> list[Section]:
    """Collect every non-empty section line, largest first.

    Repeated names (one subsection split across linker passes) stay separate
    entries. The sort is stable, so equal sizes keep file order and repeated
    parses of the same text are identical.
    """
    lines = text.splitlines()
    if join_wrapped_names:
        lines = _join_wrapped(lines)

    sections: list[Section] = []
    for line in lines:
        section = SECTION_MATCHER.match(line)
        if isinstance(section, Section):
            sections.append(section)

    sections.sort(key=lambda s: s.size, reverse=True)
    return sections


def parse_map_text(text: str, *, join_wrapped_names: bool = False) -> ParsedResult:
    """Parse the text of a GCC linker map file.

    Args:
        text: Full map file contents.
        join_wrapped_names: Recover section names that ld wrapped onto their own line.

    Returns:
        ParsedResult with memory regions and sections sorted by size, descending.
        Never raises on malformed content; unmatched lines are ignored.
    """
    normalized = text.replace("\r\n", "\n")
    result = ParsedResult(
        memory=parse_memory_regions(normalized),
        sections=parse_sections(normalized, join_wrapped_names=join_wrapped_names),
    )
    log.debug(
        "map_parsed",
        sections=len(result.sections),
        regions=len(result.memory),
        total_size=result.total_size,
    )
    return result


def parse_map_file(path: Path, *, join_wrapped_names: bool = False) -> ParsedResult:
    """Read and parse a map file from disk.

    Undecodable bytes are replaced rather than rejected.

    Raises:
        InputError: If the file does not exist.
    """
    if not path.is_file():
        raise InputError.file_not_found(str(path))
    text = path.read_text(encoding="utf-8", errors="replace")
    return parse_map_text(text, join_wrapped_names=join_wrapped_names)
