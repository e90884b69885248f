"""Common RPC error-boundary helpers for dispatch."""

from __future__ import annotations

from typing import Any, Callable

from toolrpc.utils.exceptions import (
    ErrorCode,
    RpcError,
    classify_exception,
    sanitize_error_message,
)


RpcResult = tuple[bool, Any | None, dict[str, Any] | None]


def unknown_method_result(
    *,
    method: str,
    rpc_error: Callable[[int, str], dict[str, Any]],
) -> RpcResult:
    """Build standardized method-not-found response."""
    return False, None, rpc_error(ErrorCode.METHOD_NOT_FOUND, f"Method not found: {method}")


def missing_params_result(
    *,
    method: str,
    missing: list[str],
    rpc_error: Callable[[int, str], dict[str, Any]],
) -> RpcResult:
    """Build invalid-params response enumerating the missing required fields."""
    fields = ", ".join(missing)
    return False, None, rpc_error(
        ErrorCode.INVALID_PARAMS,
        f"Invalid params for {method}: missing required parameter(s): {fields}",
    )


def rpc_error_result(
    *,
    method: str,
    exc: RpcError,
    log_warning: Callable[..., None],
    rpc_error: Callable[[int, str], dict[str, Any]],
) -> RpcResult:
    """Forward a structured action error's code and message verbatim."""
    log_warning("RPC method {} failed with {}: {}", method, exc.code, exc.message)
    return False, None, rpc_error(exc.code, exc.message)


def unhandled_exception_result(
    *,
    method: str,
    exc: BaseException,
    log_exception: Callable[..., None],
    rpc_error: Callable[[int, str], dict[str, Any]],
) -> RpcResult:
    """Map unexpected exceptions to standardized INTERNAL_ERROR responses."""
    _, label = classify_exception(exc)
    sanitized = sanitize_error_message(str(exc)) or type(exc).__name__
    log_exception("RPC method {} failed with [{}]: {}", method, label, sanitized)
    return False, None, rpc_error(ErrorCode.INTERNAL_ERROR, f"Internal error: {sanitized}")
