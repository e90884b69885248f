"""
Exception hierarchy and error handling utilities for toolrpc.

Provides:
- The closed JSON-RPC error code enumeration
- Structured exceptions an action can raise to forward its own code
- Safe error message formatting (no sensitive data leak)
- Exception classification for logging
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import IntEnum
from typing import Any

import httpx


class ErrorCode(IntEnum):
    """Standard JSON-RPC error codes surfaced by the dispatcher."""
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class ToolRpcError(Exception):
    """Base exception for all toolrpc errors."""

    def __init__(
        self,
        message: str,
        code: int = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = int(code)
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class RpcError(ToolRpcError):
    """Structured error whose code and message reach the client verbatim.

    Actions raise this when a more specific outcome than INTERNAL_ERROR should
    be reported, e.g. ``RpcError(-32001, "authentication required")``.
    """

    def __init__(self, code: int, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, code=code, details=details)


class InvalidRequestError(RpcError):
    """Malformed request envelope."""

    def __init__(self, message: str = "Invalid Request"):
        super().__init__(ErrorCode.INVALID_REQUEST, message)


class MethodNotFoundError(RpcError):
    """No descriptor registered under the requested name."""

    def __init__(self, method: Any):
        super().__init__(
            ErrorCode.METHOD_NOT_FOUND,
            f"Method not found: {method}",
            details={"method": method},
        )


class InvalidParamsError(RpcError):
    """Missing or malformed method parameters."""

    def __init__(self, message: str, missing: list[str] | None = None):
        details = {"missing": missing} if missing else {}
        super().__init__(ErrorCode.INVALID_PARAMS, message, details=details)


class InternalError(RpcError):
    """Unexpected failure inside an action."""

    def __init__(self, message: str = "Internal error"):
        super().__init__(ErrorCode.INTERNAL_ERROR, message)


class UpstreamError(ToolRpcError):
    """A third-party API rejected a call or returned an unusable response."""

    def __init__(self, service: str, message: str, status_code: int | None = None):
        super().__init__(
            f"{service} error: {message}",
            code=ErrorCode.INTERNAL_ERROR,
            details={"service": service, "status_code": status_code},
        )
        self.status_code = status_code


class RegistryError(ToolRpcError):
    """Invalid method registration (duplicate, reserved or frozen)."""


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|appid|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"&]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"[a-zA-Z0-9]{32,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: BaseException) -> tuple[ErrorCode | int, str]:
    """
    Classify an exception for logging and response mapping.

    Returns:
        Tuple of (json-rpc code, short label). Only RpcError keeps its own
        code; everything else maps to INTERNAL_ERROR.
    """
    if isinstance(exc, RpcError):
        return exc.code, "structured"
    if isinstance(exc, UpstreamError):
        return ErrorCode.INTERNAL_ERROR, "upstream"
    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorCode.INTERNAL_ERROR, "timeout"
    if isinstance(exc, (ConnectionError, httpx.TransportError)):
        return ErrorCode.INTERNAL_ERROR, "connection"
    if isinstance(exc, json.JSONDecodeError):
        return ErrorCode.INTERNAL_ERROR, "json_parse"
    if isinstance(exc, (ValueError, KeyError, TypeError)):
        return ErrorCode.INTERNAL_ERROR, "value"
    return ErrorCode.INTERNAL_ERROR, "unexpected"
