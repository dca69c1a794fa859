"""CLI test fixtures."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """No global/local YAML and no MAPDELTA__ env vars leak into CLI runs."""
    for key in list(os.environ):
        if key.startswith("MAPDELTA__"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    with patch("mapdelta.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml"):
        yield tmp_path


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()
