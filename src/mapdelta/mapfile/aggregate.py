"""Collapse detailed subsections into their parent section group."""

from __future__ import annotations

from collections.abc import Iterable

from mapdelta.mapfile.models import AggregatedSection, Section


def parent_section_name(name: str) -> str:
    """Parent group of a dotted section name.

    The name is split on ``.`` and the first two fields kept, so the empty
    field before the leading dot counts: ``.text.main`` and
    ``.text.main.cold`` both map to ``.text``, and ``.text`` maps to itself.
    """
    return ".".join(name.split(".")[:2])


def aggregate_sections(sections: Iterable[Section]) -> list[AggregatedSection]:
    """Sum sizes per parent group and count contributing entries.

    The output is sorted by total size, descending (stable in first-seen
    order). File identity does not survive aggregation.
    """
    sizes: dict[str, int] = {}
    counts: dict[str, int] = {}
    for section in sections:
        parent = parent_section_name(section.name)
        sizes[parent] = sizes.get(parent, 0) + section.size
        counts[parent] = counts.get(parent, 0) + 1

    aggregated = [
        AggregatedSection(name=name, size=size, subsections=counts[name])
        for name, size in sizes.items()
    ]
    aggregated.sort(key=lambda a: a.size, reverse=True)
    return aggregated
