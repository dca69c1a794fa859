"""mapdelta diff command - per-object version diff of two builds."""

from pathlib import Path

import click
from rich.table import Table

from mapdelta.cli.utils import delta_style, echo_json, get_console, make_service, read_map_text, signed
from mapdelta.core.errors import MapDeltaError
from mapdelta.core.formatting import format_bytes
from mapdelta.diff import DiffResult

_SEVERITY_STYLE = {"critical": "bold red", "high": "red", "medium": "yellow", "low": "dim"}


def _print_report(result: DiffResult, top: int) -> None:
    console = get_console()
    s = result.summary

    console.print(
        f"Total {format_bytes(s.total_size_v1)} -> {format_bytes(s.total_size_v2)} "
        f"[{delta_style(s.total_size_diff)}]({signed(s.total_size_diff)} B, "
        f"{signed(s.total_size_diff_pct, '%')})[/]"
    )
    console.print(
        f"{s.sections_added} added, {s.sections_removed} removed, {s.sections_growth} grew, "
        f"{s.sections_shrink} shrank, {s.sections_unchanged} unchanged"
    )
    console.print()

    changed = [e for e in result.diff if e.status != "same"][:top]
    if changed:
        table = Table(box=None, padding=(0, 2), pad_edge=False)
        table.add_column("Section", style="cyan")
        table.add_column("Object", style="dim")
        table.add_column("Region")
        table.add_column("Status")
        table.add_column("Delta", justify="right")
        table.add_column("%", justify="right")
        for e in changed:
            table.add_row(
                e.name,
                e.file_path or "",
                e.region,
                e.status,
                f"[{delta_style(e.size_diff)}]{signed(e.size_diff)}[/]",
                f"{e.size_diff_pct:.2f}",
            )
        console.print(table)
        console.print()

    if not result.anomalies:
        console.print("No anomalies detected")
        return

    for anomaly in result.anomalies:
        style = _SEVERITY_STYLE[anomaly.severity]
        entry = anomaly.entry
        where = f"{entry.name} ({entry.file_path})" if entry.file_path else entry.name
        console.print(f"[{style}]{anomaly.severity.upper():<8}[/] {where}: {'; '.join(anomaly.reasons)}")


@click.command()
@click.argument("map_v1", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("map_v2", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--growth-threshold", type=click.FloatRange(min=0), default=None, help="Growth %% to flag")
@click.option("--shrink-threshold", type=click.FloatRange(min=0), default=None, help="Shrink %% to flag")
@click.option(
    "--address-shift",
    type=click.IntRange(min=0),
    default=None,
    help="Flag sections whose start address moved by more than this many bytes",
)
@click.option("--top", type=click.IntRange(min=1), default=30, show_default=True, help="Rows to show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def diff_command(
    ctx: click.Context,
    map_v1: Path,
    map_v2: Path,
    growth_threshold: float | None,
    shrink_threshold: float | None,
    address_shift: int | None,
    top: int,
    as_json: bool,
) -> None:
    """Diff MAP_V1 (baseline) against MAP_V2 per section and object file."""
    service = make_service(ctx)
    options = service.diff_options(
        anomaly_growth_threshold=growth_threshold,
        anomaly_shrink_threshold=shrink_threshold,
        address_shift_threshold=address_shift,
    )
    try:
        _, result = service.diff(read_map_text(map_v1), read_map_text(map_v2), options, store=False)
    except MapDeltaError as e:
        raise click.ClickException(e.message) from e

    if as_json:
        echo_json(result.to_dict())
        return

    _print_report(result, top)
