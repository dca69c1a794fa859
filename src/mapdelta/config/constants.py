"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
For configurable values, see models.py.
"""

# =============================================================================
# Section classification
# =============================================================================
# Name prefixes used by both comparers to bucket sections into memory kinds.
# These are a naming heuristic; the parsed MemoryRegion table is not consulted.

FLASH_PREFIXES = (".text", ".rodata")
"""Code and read-only data placed in flash."""

RAM_PREFIXES = (".data", ".bss")
"""Initialized and zero-initialized data placed in RAM."""

BSS_PREFIX = ".bss"
"""Prefix watched by the summary comparer's global growth pattern."""

# Wider prefix sets for single-file usage bars; flash also holds the
# load image of .data and the ARM unwind/init tables.
USAGE_FLASH_PREFIXES = (
    ".text",
    ".rodata",
    ".data",
    ".init_array",
    ".fini_array",
    ".ARM.exidx",
    ".ARM.extab",
    ".preinit_array",
    ".init",
    ".fini",
    ".eh_frame",
)
USAGE_RAM_PREFIXES = (".data", ".bss", ".stack", ".heap")

FLASH_REGION = "FLASH"
RAM_REGION = "RAM"

# =============================================================================
# Version diff fixed thresholds
# =============================================================================
# Unlike every other anomaly threshold these are not derived from the
# caller's options.

DIFF_LARGE_SECTION_BYTES = 1024
"""Added/removed sections larger than this are flagged."""

DIFF_CRITICAL_SECTION_BYTES = 10240
"""Added/removed sections larger than this are critical rather than high."""

DIFF_SEVERITY_PCT_CRITICAL = 50
DIFF_SEVERITY_PCT_HIGH = 25
DIFF_SEVERITY_PCT_MEDIUM = 10

# =============================================================================
# Summary compare multipliers (applied to anomaly_threshold_bytes)
# =============================================================================

COMPARE_LARGE_SECTION_FACTOR = 2
COMPARE_HIGH_SECTION_FACTOR = 10
COMPARE_FILE_CHANGE_FACTOR = 5
COMPARE_HIGH_FILE_FACTOR = 20
COMPARE_BSS_GROWTH_FACTOR = 5
COMPARE_SMALL_INCREASE_COUNT = 5
"""More small increases than this in one file is reported as fragmentation."""

UNKNOWN_FILE = "unknown"
"""File-group key for sections with no contributing object file."""

# =============================================================================
# Cache
# =============================================================================

CACHE_ID_RANDOM_BYTES = 4
"""Random bytes in a cache id (hex encoded after the date stamp)."""
