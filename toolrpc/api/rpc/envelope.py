"""JSON-RPC 2.0 response envelope builders."""

from __future__ import annotations

from typing import Any

from toolrpc.api.rpc.request_guard import JSONRPC_VERSION


def rpc_error(code: int, message: str) -> dict[str, Any]:
    """Build the ``error`` member of a response."""
    return {"code": int(code), "message": str(message)}


def build_response(
    *,
    req_id: str | int | float | None,
    ok: bool,
    result: Any = None,
    error: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Assemble a response carrying exactly one of ``result`` or ``error``."""
    if ok:
        return {"jsonrpc": JSONRPC_VERSION, "result": result, "id": req_id}
    return {"jsonrpc": JSONRPC_VERSION, "error": error, "id": req_id}
