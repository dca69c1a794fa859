"""CLI utilities."""

import json
from pathlib import Path
from typing import Any

import click
from rich.console import Console

from mapdelta.config.loader import load_config
from mapdelta.config.models import MapDeltaConfig
from mapdelta.core.errors import MapDeltaError
from mapdelta.ops import AnalysisService


def get_console() -> Console:
    """Console bound to the current stdout (so CliRunner can capture it)."""
    return Console(highlight=False, soft_wrap=True)


def load_cli_config(ctx: click.Context, **overrides: Any) -> MapDeltaConfig:
    """Load configuration using the group's --config option.

    Raises:
        click.ClickException: If the configuration is invalid.
    """
    config_path: Path | None = (ctx.obj or {}).get("config_path")
    try:
        return load_config(config_path, **overrides)
    except MapDeltaError as e:
        raise click.ClickException(str(e)) from e


def make_service(ctx: click.Context) -> AnalysisService:
    return AnalysisService(config=load_cli_config(ctx))


def read_map_text(path: Path) -> str:
    """Read a map file, replacing undecodable bytes."""
    return path.read_text(encoding="utf-8", errors="replace")


def echo_json(payload: dict[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2))


def signed(value: int | float, suffix: str = "") -> str:
    """Render a delta with an explicit sign, e.g. +120 or -3.5%."""
    return f"{value:+}{suffix}" if value else f"0{suffix}"


def delta_style(value: int | float) -> str:
    if value > 0:
        return "red"
    if value < 0:
        return "green"
    return "dim"
