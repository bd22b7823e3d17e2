from __future__ import annotations

import argparse
import asyncio
import logging

from .config import get_settings
from .logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Google Calendar MCP server with email reminders.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Serve the HTTP API and the MCP SSE endpoint.")
    serve_parser.add_argument("--host", default=settings.server.host)
    serve_parser.add_argument("--port", type=int, default=settings.server.port)

    subparsers.add_parser("mcp", help="Run the MCP server over stdio.")
    subparsers.add_parser("reminders", help="Run only the reminder engine until interrupted.")
    subparsers.add_parser("tools", help="Print the registered tool names.")

    return parser


async def _run_reminders_forever() -> None:
    from .services.mcp import reminder_automation

    async with reminder_automation():
        await asyncio.Event().wait()


def main() -> None:
    configure_logging()
    logging.getLogger(__name__).info("gcal-mcp CLI starting")
    parser = build_parser()
    args = parser.parse_args()

    if args.command == "serve":
        from .services.http import run_local_server

        run_local_server(host=args.host, port=args.port)
    elif args.command == "mcp":
        from .services.mcp import run_mcp_server

        run_mcp_server()
    elif args.command == "reminders":
        try:
            asyncio.run(_run_reminders_forever())
        except KeyboardInterrupt:
            logging.getLogger(__name__).info("Interrupted; reminder engine stopped")
    elif args.command == "tools":
        from .api import get_api_functions

        for function in sorted(get_api_functions(), key=lambda item: item.name):
            print(f"{function.name:<24} {function.description}")
    else:  # pragma: no cover - argparse enforces choices
        parser.print_help()


if __name__ == "__main__":
    main()
