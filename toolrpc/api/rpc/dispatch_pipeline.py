"""Utilities for sequential RPC handler dispatch pipelines."""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Iterable


RpcResult = tuple[bool, Any | None, dict[str, Any] | None]
HandlerResult = RpcResult | None
DispatchHandler = Callable[[], Awaitable[HandlerResult] | HandlerResult]


async def resolve_maybe_awaitable(outcome: Any) -> Any:
    """Await outcome when a sync-or-async callable returned a coroutine."""
    return await outcome if inspect.isawaitable(outcome) else outcome


async def run_handler_pipeline(handlers: Iterable[DispatchHandler]) -> HandlerResult:
    """Run handlers in order and return the first non-None result."""
    for handler in handlers:
        result = await resolve_maybe_awaitable(handler())
        if result is not None:
            return result
    return None
