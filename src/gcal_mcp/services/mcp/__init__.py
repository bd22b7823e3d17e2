"""MCP transport for the registered tools."""

from .server import build_mcp_server, reminder_automation, run_mcp_server, server

__all__ = ["build_mcp_server", "reminder_automation", "run_mcp_server", "server"]
