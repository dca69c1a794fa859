"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages and
provides the sample map files under tests/fixtures/.
"""

import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local mapdelta package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of mapdelta modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("mapdelta"):
        del sys.modules[module_name]

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def map_v1_path() -> Path:
    """Baseline STM32 build: 1 MB FLASH, 128 KB RAM."""
    return FIXTURES_DIR / "firmware_v1.map"


@pytest.fixture
def map_v2_path() -> Path:
    """Next build: main grew, crc.o added, UART rx buffer doubled."""
    return FIXTURES_DIR / "firmware_v2.map"


@pytest.fixture
def map_v1_text(map_v1_path: Path) -> str:
    return map_v1_path.read_text()


@pytest.fixture
def map_v2_text(map_v2_path: Path) -> str:
    return map_v2_path.read_text()


@pytest.fixture
def not_a_map_path() -> Path:
    return FIXTURES_DIR / "not_a_map.txt"
