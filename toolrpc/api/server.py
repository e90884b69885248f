"""HTTP transport: exposes a Dispatcher behind a single JSON-RPC endpoint.

Logical errors travel inside the response envelope; the HTTP status is 200
for every dispatched request.
"""

from __future__ import annotations

from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from toolrpc import __version__
from toolrpc.api.rpc.dispatcher import Dispatcher
from toolrpc.api.rpc.envelope import build_response, rpc_error
from toolrpc.utils.exceptions import ErrorCode, sanitize_error_message


def create_app(dispatcher: Dispatcher, *, path: str = "/mcp") -> FastAPI:
    """Create the FastAPI application serving ``dispatcher``."""
    app = FastAPI(
        title="toolrpc",
        description="JSON-RPC tool server",
        version=__version__,
    )
    app.state.dispatcher = dispatcher

    async def rpc_endpoint(request: Request) -> JSONResponse:
        body = await request.body()
        response = await dispatcher.handle_json(body)
        return JSONResponse(status_code=200, content=response)

    app.add_api_route(path, rpc_endpoint, methods=["POST"])
    if path != "/":
        app.add_api_route("/", rpc_endpoint, methods=["POST"])

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"ok": True, "methods": dispatcher.registry.names}

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        sanitized = sanitize_error_message(str(exc))
        logger.exception("Unhandled transport exception: {}", sanitized)
        return JSONResponse(
            status_code=200,
            content=build_response(
                req_id=None,
                ok=False,
                error=rpc_error(ErrorCode.INTERNAL_ERROR, "Internal error"),
            ),
        )

    return app


def run_server(app: FastAPI, host: str = "127.0.0.1", port: int = 8787, log_level: str = "warning") -> None:
    """Run the API server."""
    uvicorn.run(
        app,
        host=host,
        port=port,
        timeout_keep_alive=30,
        timeout_graceful_shutdown=10,
        log_level=log_level,
    )
