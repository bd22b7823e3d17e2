from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastmcp import FastMCP

from ...api import api_state, get_api_functions
from ...config import get_settings

INSTRUCTIONS = (
    "Google Calendar MCP server exposes date, appointment and email tools. "
    "Use them to look up the current date, list, create, move or cancel appointments, "
    "check availability and email participants. Upcoming appointments are reminded by email automatically."
)

logger = logging.getLogger(__name__)


def build_mcp_server() -> FastMCP:
    server = FastMCP(name="Google Calendar MCP", instructions=INSTRUCTIONS)
    for api_function in get_api_functions():
        logger.debug("Registering MCP tool: %s", api_function.name)
        server.tool(
            api_function.func,
            name=api_function.name,
            description=api_function.description,
            tags=set(api_function.tags),
        )
    return server


server = build_mcp_server()


@asynccontextmanager
async def reminder_automation() -> AsyncIterator[None]:
    """Run the reminder engine for the lifetime of the block, if enabled."""

    if get_settings().reminders.enabled:
        await api_state.reminders.start_reminder_automation()
    else:
        logger.info("Reminder automation disabled by configuration")
    try:
        yield
    finally:
        await api_state.reminders.cleanup()
        await api_state.context.aclose()


async def _run_stdio() -> None:
    async with reminder_automation():
        await server.run_stdio_async()


def run_mcp_server() -> None:
    asyncio.run(_run_stdio())
