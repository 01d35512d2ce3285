#!/usr/bin/env python3
"""
meta-hybrid status - Main entry point.

Prints a one-off status snapshot, or serves the status API for a frontend.
"""

from __future__ import annotations

import argparse
import json
import sys
from http.server import ThreadingHTTPServer
from typing import List, Optional

from .config import Config
from .routes import StatusRequestHandler
from .state import StatusState
from ..data.aggregation import StatusAggregator


def build_state(config: Config) -> StatusState:
    """Create the status context for a configuration."""
    return StatusState(StatusAggregator(config))


def print_snapshot(state: StatusState) -> int:
    """Refresh once and print the payload as JSON."""
    ok, detail = state.refresh(blocking=True)
    if not ok:
        print(f"[status] {detail}", file=sys.stderr)
        return 1
    print(json.dumps(state.get_status(), indent=2))
    return 0


def run_server(config: Config, state: StatusState) -> None:
    """Run the status API server."""
    print("[status] Loading initial snapshot...")
    ok, detail = state.refresh(blocking=True)
    print(f"[status] Initial refresh: {detail}")

    StatusRequestHandler.status_state = state
    StatusRequestHandler.url_prefix = config.server.url_prefix
    StatusRequestHandler.config = config.to_dict()

    server = ThreadingHTTPServer((config.server.host, config.server.port), StatusRequestHandler)

    print(f"[status] Serving on http://{config.server.host}:{config.server.port}")
    if config.server.url_prefix:
        print(f"[status] URL prefix: {config.server.url_prefix}")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\n[status] Shutting down...")
    finally:
        server.server_close()


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="meta-hybrid overlay status",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--config", type=str, help="Path to config YAML file")
    parser.add_argument("--once", action="store_true", help="Print one snapshot as JSON and exit")
    parser.add_argument("--host", default=None, help="Bind address (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on (overrides config)")
    parser.add_argument("--url-prefix", default=None, help="Path prefix for reverse proxy setup")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the meta-hybrid-status command."""
    args = parse_args(argv)
    config = Config.load(args.config)

    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.url_prefix is not None:
        config.server.url_prefix = args.url_prefix

    state = build_state(config)
    if args.once:
        return print_snapshot(state)
    run_server(config, state)
    return 0


if __name__ == "__main__":
    sys.exit(main())
