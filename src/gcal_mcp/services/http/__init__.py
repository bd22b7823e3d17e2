"""HTTP services for the calendar MCP server."""

from .server import app, health, index, invoke_api_function, list_api_functions, run_local_server

__all__ = [
    "app",
    "health",
    "index",
    "invoke_api_function",
    "list_api_functions",
    "run_local_server",
]
