"""mapdelta compare command - summary comparison of two builds."""

from pathlib import Path

import click
from rich.table import Table

from mapdelta.cli.utils import delta_style, echo_json, get_console, make_service, read_map_text, signed
from mapdelta.compare import CompareResult
from mapdelta.core.errors import MapDeltaError
from mapdelta.core.formatting import format_bytes, pluralize

_SEVERITY_STYLE = {"high": "bold red", "medium": "yellow", "low": "dim"}


def _print_report(result: CompareResult) -> None:
    console = get_console()
    s = result.summary

    console.print(
        f"FLASH {format_bytes(s.total_flash_a)} -> {format_bytes(s.total_flash_b)} "
        f"[{delta_style(s.flash_delta)}]({signed(s.flash_delta)} B, {signed(s.flash_delta_pct, '%')})[/]"
    )
    console.print(
        f"RAM   {format_bytes(s.total_ram_a)} -> {format_bytes(s.total_ram_b)} "
        f"[{delta_style(s.ram_delta)}]({signed(s.ram_delta)} B, {signed(s.ram_delta_pct, '%')})[/]"
    )
    console.print(
        f"Sections: {s.sections_added} added, {s.sections_removed} removed, "
        f"{s.sections_modified} modified"
    )
    console.print()

    for title, diffs in (("Top increases", result.top_increases), ("Top decreases", result.top_decreases)):
        if not diffs:
            continue
        table = Table(title=title, box=None, padding=(0, 2), pad_edge=False, title_justify="left")
        table.add_column("Section", style="cyan")
        table.add_column("Object", style="dim")
        table.add_column("A", justify="right")
        table.add_column("B", justify="right")
        table.add_column("Delta", justify="right")
        for d in diffs:
            table.add_row(
                d.name,
                d.file or "",
                str(d.size_a),
                str(d.size_b),
                f"[{delta_style(d.delta)}]{signed(d.delta)}[/]",
            )
        console.print(table)
        console.print()

    if not result.anomalies:
        console.print("No anomalies detected")
        return

    console.print(f"[bold]{pluralize(len(result.anomalies), 'anomaly', 'anomalies')}[/bold]")
    for anomaly in result.anomalies:
        style = _SEVERITY_STYLE[anomaly.severity]
        console.print(f"  [{style}]{anomaly.severity.upper():<6}[/] {anomaly.type:<7} {anomaly.name}")
        for reason in anomaly.reasons:
            console.print(f"           {reason}", style="dim")


@click.command()
@click.argument("map_a", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("map_b", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--top-n", type=click.IntRange(min=0), default=None, help="Length of top increase/decrease lists")
@click.option("--threshold-pct", type=click.FloatRange(min=0), default=None, help="Anomaly percent threshold")
@click.option("--threshold-bytes", type=click.IntRange(min=0), default=None, help="Anomaly byte threshold")
@click.option("--include-unchanged", is_flag=True, help="Keep sections whose size did not change")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def compare_command(
    ctx: click.Context,
    map_a: Path,
    map_b: Path,
    top_n: int | None,
    threshold_pct: float | None,
    threshold_bytes: int | None,
    include_unchanged: bool,
    as_json: bool,
) -> None:
    """Compare MAP_A (baseline) against MAP_B section by section."""
    service = make_service(ctx)
    options = service.compare_options(
        top_n=top_n,
        anomaly_threshold_pct=threshold_pct,
        anomaly_threshold_bytes=threshold_bytes,
        include_unchanged=include_unchanged,
    )
    try:
        _, result = service.compare(read_map_text(map_a), read_map_text(map_b), options, store=False)
    except MapDeltaError as e:
        raise click.ClickException(e.message) from e

    if as_json:
        echo_json(result.to_dict())
        return

    _print_report(result)
