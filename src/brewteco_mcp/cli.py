"""Command line entry point: ``brewteco-mcp [stdio|sse|http]``."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from brewteco_mcp.foundation.config import get_settings
from brewteco_mcp.runtime.observability import configure_logging, get_logger

TRANSPORTS = ("stdio", "sse", "http")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brewteco-mcp",
        description="Expose the Brewteco reports API as MCP tools.",
    )
    parser.add_argument("transport", nargs="?", choices=TRANSPORTS, default="stdio",
                        help="stdio (default), sse push stream, or plain http")
    parser.add_argument("--host", default=None, help="Listen address for sse/http (BREWTECO_HTTP_HOST)")
    parser.add_argument("--port", type=int, default=None, help="Listen port for sse/http (MCP_PORT)")
    parser.add_argument("--log-level", default=None, help="Override BREWTECO_LOG_LEVEL")
    parser.add_argument("--log-format", choices=("console", "json"), default=None,
                        help="Override BREWTECO_LOG_FORMAT")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    settings = get_settings()
    configure_logging(
        format=args.log_format or settings.logging.format,
        level=args.log_level or settings.logging.level,
    )
    get_logger("cli").info(
        "starting", transport=args.transport, api_url=settings.api_url,
        retries=settings.retries, timeout=settings.timeout,
    )

    # Imported late so --help works without the server stack loaded
    from brewteco_mcp.ext.mcp import serve_http, serve_mcp

    if args.transport == "http":
        serve_http(settings, host=args.host, port=args.port)
    else:
        serve_mcp(settings, transport=args.transport, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
