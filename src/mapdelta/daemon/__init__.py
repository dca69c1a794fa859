"""mapdelta daemon - HTTP API over the parser, comparers and result cache."""

from mapdelta.daemon.app import create_app
from mapdelta.daemon.lifecycle import run_server

__all__ = ["create_app", "run_server"]
