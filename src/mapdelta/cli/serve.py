"""mapdelta serve command - run the HTTP API."""

import asyncio

import click

from mapdelta.cli.utils import load_cli_config
from mapdelta.core.formatting import format_duration
from mapdelta.core.logging import configure_logging
from mapdelta.daemon.lifecycle import run_server


@click.command()
@click.option("--host", default=None, help="Bind address (default from config: 127.0.0.1)")
@click.option("--port", type=click.IntRange(0, 65535), default=None, help="Port (default from config: 5000)")
@click.pass_context
def serve_command(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Serve the analyze/compare/diff API until interrupted."""
    server_overrides = {k: v for k, v in (("host", host), ("port", port)) if v is not None}
    config = load_cli_config(ctx, **({"server": server_overrides} if server_overrides else {}))

    if ctx.obj.get("verbose"):
        configure_logging(level="DEBUG")
    else:
        configure_logging(config=config.logging)

    click.echo(f"mapdelta listening on http://{config.server.host}:{config.server.port}")
    click.echo(f"Stored results expire after {format_duration(config.cache.ttl_sec)}")
    asyncio.run(run_server(config))
