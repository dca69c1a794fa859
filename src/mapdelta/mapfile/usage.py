"""Flash/RAM usage of a single parsed map."""

from __future__ import annotations

from mapdelta.config.constants import (
    FLASH_REGION,
    RAM_REGION,
    USAGE_FLASH_PREFIXES,
    USAGE_RAM_PREFIXES,
)
from mapdelta.mapfile.models import MemoryUsage, ParsedResult


def summarize_usage(result: ParsedResult) -> MemoryUsage:
    """Compute used vs available FLASH and RAM.

    Capacities come from the ``FLASH`` and ``RAM`` memory regions (0 when the
    map names them differently). Usage is attributed by section name prefix;
    ``.data`` counts toward both since its initial image lives in flash.
    """
    used_flash = sum(s.size for s in result.sections if s.name.startswith(USAGE_FLASH_PREFIXES))
    used_ram = sum(s.size for s in result.sections if s.name.startswith(USAGE_RAM_PREFIXES))

    flash = result.memory.get(FLASH_REGION)
    ram = result.memory.get(RAM_REGION)

    return MemoryUsage(
        total_flash=flash.length_bytes if flash else 0,
        used_flash=used_flash,
        total_ram=ram.length_bytes if ram else 0,
        used_ram=used_ram,
    )
