"""mapdelta CLI - analyze and compare GCC linker map files."""

from pathlib import Path

import click

from mapdelta.cli.analyze import analyze_command
from mapdelta.cli.compare import compare_command
from mapdelta.cli.diff import diff_command
from mapdelta.cli.serve import serve_command
from mapdelta.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="mapdelta")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (default: ./mapdelta.yaml, then ~/.config/mapdelta/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """mapdelta - memory usage analysis for GCC linker map files."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(analyze_command, name="analyze")
cli.add_command(compare_command, name="compare")
cli.add_command(diff_command, name="diff")
cli.add_command(serve_command, name="serve")


if __name__ == "__main__":
    cli()
