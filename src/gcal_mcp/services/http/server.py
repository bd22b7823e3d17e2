from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ...api import api_state, call_api, get_api_functions
from ...api.meta import describe_function
from ..mcp import reminder_automation, server as mcp_server

logger = logging.getLogger(__name__)

mcp_app = mcp_server.http_app(path="/sse", transport="sse")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    async with mcp_app.lifespan(app):
        async with reminder_automation():
            yield


app = FastAPI(title="Google Calendar MCP", version="1.0.0", lifespan=lifespan)


class ApiCallRequest(BaseModel):
    arguments: Dict[str, Any] = Field(default_factory=dict)


@app.get("/")
async def index() -> JSONResponse:
    return JSONResponse(
        {
            "status": "ok",
            "message": "Google Calendar MCP Server",
            "endpoints": {
                "sse": "/sse",
                "health": "/health",
                "reminders": "/reminders",
                "functions": "/api/functions",
            },
        }
    )


@app.get("/health")
async def health() -> JSONResponse:
    return JSONResponse(
        {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "reminders_running": api_state.reminders.running,
        }
    )


@app.get("/reminders")
async def reminders() -> JSONResponse:
    return JSONResponse(api_state.reminders.status())


@app.get("/api/functions")
async def list_api_functions(category: Optional[str] = None) -> JSONResponse:
    functions = [describe_function(func) for func in get_api_functions(category)]
    return JSONResponse({"functions": functions})


@app.post("/api/functions/{function_name}")
async def invoke_api_function(function_name: str, request: ApiCallRequest) -> JSONResponse:
    try:
        result = await call_api(function_name, **request.arguments)
    except KeyError as exc:
        logger.warning("API function not found: %s", function_name)
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("API function %s failed", function_name)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    logger.debug("API function %s executed successfully", function_name)
    return JSONResponse({"name": function_name, "result": result})


app.mount("/", mcp_app)


def run_local_server(host: str = "127.0.0.1", port: int = 8787) -> None:
    import asyncio
    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    config = Config()
    config.bind = [f"{host}:{port}"]
    asyncio.run(serve(app, config))
