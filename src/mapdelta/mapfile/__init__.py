"""Linker map parsing: memory regions, sections, aggregation and usage."""

from mapdelta.mapfile.aggregate import aggregate_sections, parent_section_name
from mapdelta.mapfile.models import (
    AggregatedSection,
    MemoryRegion,
    MemoryUsage,
    ParsedResult,
    Section,
)
from mapdelta.mapfile.parser import classify_line, parse_map_file, parse_map_text
from mapdelta.mapfile.usage import summarize_usage

__all__ = [
    "AggregatedSection",
    "MemoryRegion",
    "MemoryUsage",
    "ParsedResult",
    "Section",
    "aggregate_sections",
    "classify_line",
    "parent_section_name",
    "parse_map_file",
    "parse_map_text",
    "summarize_usage",
]
