"""RPC request guard helpers for envelope validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from toolrpc.utils.exceptions import ErrorCode

JSONRPC_VERSION = "2.0"

_MISSING = object()


@dataclass(slots=True)
class RpcRequestGuardResult:
    """Prepared request context after envelope checks."""

    method: str | None
    params: Any
    has_params: bool
    req_id: str | int | float | None
    error: dict[str, Any] | None


def is_valid_request_id(value: Any) -> bool:
    """JSON-RPC ids accepted by this server: strings and numbers (not bools)."""
    if isinstance(value, bool):
        return False
    return isinstance(value, (str, int, float))


def prepare_rpc_request_context(
    *,
    req: Any,
    rpc_error: Callable[[int, str], dict[str, Any]],
) -> RpcRequestGuardResult:
    """Validate envelope shape; on failure the response id must be null."""
    if not isinstance(req, dict):
        return _invalid(rpc_error, "request must be a JSON object")
    if req.get("jsonrpc") != JSONRPC_VERSION:
        return _invalid(rpc_error, f"jsonrpc must be \"{JSONRPC_VERSION}\"")

    method = req.get("method")
    if not isinstance(method, str) or not method:
        return _invalid(rpc_error, "request.method is required")

    req_id = req.get("id", _MISSING)
    if req_id is _MISSING or not is_valid_request_id(req_id):
        return _invalid(rpc_error, "request.id is required")

    params = req.get("params", _MISSING)
    has_params = params is not _MISSING and params is not None
    return RpcRequestGuardResult(
        method=method,
        params=params if has_params else None,
        has_params=has_params,
        req_id=req_id,
        error=None,
    )


def _invalid(rpc_error: Callable[[int, str], dict[str, Any]], reason: str) -> RpcRequestGuardResult:
    return RpcRequestGuardResult(
        method=None,
        params=None,
        has_params=False,
        req_id=None,
        error=rpc_error(ErrorCode.INVALID_REQUEST, f"Invalid Request: {reason}"),
    )
