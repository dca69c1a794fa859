"""mapdelta analyze command - summarize a single map file."""

from pathlib import Path

import click
from rich.table import Table

from mapdelta.cli.utils import echo_json, get_console, make_service, read_map_text
from mapdelta.core.errors import MapDeltaError
from mapdelta.core.formatting import format_bytes
from mapdelta.mapfile import ParsedResult, aggregate_sections, summarize_usage


def _usage_bar(percent: float, width: int = 20) -> str:
    filled = min(width, int(round(percent / 100 * width)))
    color = "red" if percent > 90 else "yellow" if percent > 75 else "green"
    return f"[{color}]{'━' * filled}[/{color}][dim]{'━' * (width - filled)}[/dim]"


def _print_report(result: ParsedResult, *, aggregate: bool, top: int) -> None:
    console = get_console()

    if result.memory:
        regions = Table(title="Memory regions", box=None, padding=(0, 2), pad_edge=False)
        regions.add_column("Region", style="cyan")
        regions.add_column("Origin")
        regions.add_column("Length", justify="right")
        for name, region in result.memory.items():
            regions.add_row(name, region.origin, format_bytes(region.length_bytes))
        console.print(regions)
        console.print()

    usage = summarize_usage(result)
    for label, used, total, pct in (
        ("FLASH", usage.used_flash, usage.total_flash, usage.flash_usage_percent),
        ("RAM", usage.used_ram, usage.total_ram, usage.ram_usage_percent),
    ):
        if total:
            console.print(
                f"{label:<6}{_usage_bar(pct)} {format_bytes(used)} / {format_bytes(total)} ({pct:.1f}%)"
            )
        else:
            console.print(f"{label:<6}{format_bytes(used)} used (no {label} region declared)")
    console.print()

    table = Table(box=None, padding=(0, 2), pad_edge=False)
    table.add_column("Section", style="cyan")
    if aggregate:
        table.add_column("Entries", justify="right")
        table.add_column("Size", justify="right")
        for group in aggregate_sections(result.sections)[:top]:
            table.add_row(group.name, str(group.subsections), format_bytes(group.size))
    else:
        table.add_column("Address")
        table.add_column("Size", justify="right")
        table.add_column("Object", style="dim")
        for section in result.sections[:top]:
            table.add_row(
                section.name,
                section.address or "",
                format_bytes(section.size),
                section.file_path or "",
            )
    console.print(table)

    shown = min(top, len(result.sections))
    console.print(f"\n{shown} of {len(result.sections)} sections, {format_bytes(result.total_size)} total")


@click.command()
@click.argument("map_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--aggregate", is_flag=True, help="Group sections by parent name (.text.foo -> .text)")
@click.option("--top", type=click.IntRange(min=1), default=20, show_default=True, help="Rows to show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def analyze_command(ctx: click.Context, map_file: Path, aggregate: bool, top: int, as_json: bool) -> None:
    """Show memory regions, usage and the largest sections of MAP_FILE."""
    service = make_service(ctx)
    try:
        result = service.analyze(read_map_text(map_file), source=str(map_file))
    except MapDeltaError as e:
        raise click.ClickException(e.message) from e

    if as_json:
        payload = result.to_dict()
        payload["usage"] = summarize_usage(result).to_dict()
        if aggregate:
            payload["aggregated"] = [g.to_dict() for g in aggregate_sections(result.sections)]
        echo_json(payload)
        return

    _print_report(result, aggregate=aggregate, top=top)
