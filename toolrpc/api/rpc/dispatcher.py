"""JSON-RPC 2.0 request dispatcher with schema-described methods.

Each request runs through an ordered pipeline:
envelope guard -> initialize/method resolution -> required-params check -> action.
The first stage that produces an outcome short-circuits the rest, and every
outcome (including a malformed request) becomes a well-formed response envelope.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import time
from typing import Any

from loguru import logger

from toolrpc import __version__
from toolrpc.api.rpc.context_models import RpcDispatchContext
from toolrpc.api.rpc.dispatch_pipeline import (
    DispatchHandler,
    RpcResult,
    resolve_maybe_awaitable,
    run_handler_pipeline,
)
from toolrpc.api.rpc.envelope import build_response, rpc_error
from toolrpc.api.rpc.error_boundary import (
    missing_params_result,
    rpc_error_result,
    unhandled_exception_result,
    unknown_method_result,
)
from toolrpc.api.rpc.registry import INITIALIZE_METHOD, MethodRegistry
from toolrpc.api.rpc.request_guard import prepare_rpc_request_context
from toolrpc.utils.exceptions import ErrorCode, RpcError

DEFAULT_PROTOCOL_VERSION = "2024-11-05"


class Dispatcher:
    """
    Dispatches decoded JSON-RPC requests against a frozen method registry.

    ``handle`` keeps all request state in locals, so it is safe to run
    concurrently with itself.
    """

    def __init__(
        self,
        registry: MethodRegistry,
        *,
        protocol_version: str = DEFAULT_PROTOCOL_VERSION,
        server_name: str = "toolrpc",
    ):
        self._registry = registry.freeze()
        self.protocol_version = protocol_version
        self.server_name = server_name

    @property
    def registry(self) -> MethodRegistry:
        return self._registry

    async def handle(self, raw_request: Any) -> dict[str, Any]:
        """Dispatch one decoded request and return its response envelope."""
        guard = prepare_rpc_request_context(req=raw_request, rpc_error=rpc_error)
        if guard.error is not None:
            logger.debug("RPC rejected envelope: {}", guard.error["message"])
            return build_response(req_id=None, ok=False, error=guard.error)

        ctx = RpcDispatchContext(
            method=guard.method,
            params=guard.params,
            has_params=guard.has_params,
            req_id=guard.req_id,
        )
        started = time.perf_counter()
        outcome = await run_handler_pipeline(self._build_handlers(ctx))
        if outcome is None:
            outcome = False, None, rpc_error(ErrorCode.INTERNAL_ERROR, "Internal error: no handler produced a result")
        ok, result, error = outcome
        logger.debug(
            "RPC method={} id={} ok={} in {:.3f}s",
            ctx.method,
            ctx.req_id,
            ok,
            time.perf_counter() - started,
        )
        return build_response(req_id=ctx.req_id, ok=ok, result=result, error=error)

    async def handle_json(self, raw: str | bytes) -> dict[str, Any]:
        """Decode a JSON document and dispatch it; undecodable input is an invalid request."""
        try:
            decoded = json.loads(raw)
        except (ValueError, RecursionError) as e:
            logger.debug("RPC body is not valid JSON: {}", e)
            return build_response(
                req_id=None,
                ok=False,
                error=rpc_error(ErrorCode.INVALID_REQUEST, "Invalid Request: body is not valid JSON"),
            )
        return await self.handle(decoded)

    def discovery_payload(self) -> dict[str, Any]:
        """Capability advertisement returned by ``initialize``."""
        return {
            "protocolVersion": self.protocol_version,
            "serverInfo": {"name": self.server_name, "version": __version__},
            "methods": self._registry.describe(),
        }

    def _build_handlers(self, ctx: RpcDispatchContext) -> tuple[DispatchHandler, ...]:
        return (
            lambda: self._try_handle_initialize(ctx),
            lambda: self._resolve_method(ctx),
            lambda: self._check_params(ctx),
            lambda: self._invoke_action(ctx),
        )

    def _try_handle_initialize(self, ctx: RpcDispatchContext) -> RpcResult | None:
        if ctx.method != INITIALIZE_METHOD:
            return None
        return True, self.discovery_payload(), None

    def _resolve_method(self, ctx: RpcDispatchContext) -> RpcResult | None:
        descriptor = self._registry.get(ctx.method)
        if descriptor is None:
            logger.info("RPC unknown method: {}", ctx.method)
            return unknown_method_result(method=ctx.method, rpc_error=rpc_error)
        ctx.descriptor = descriptor
        return None

    def _check_params(self, ctx: RpcDispatchContext) -> RpcResult | None:
        if ctx.has_params and not isinstance(ctx.params, dict):
            return False, None, rpc_error(
                ErrorCode.INVALID_PARAMS,
                f"Invalid params for {ctx.method}: params must be an object",
            )
        missing = ctx.descriptor.missing_params(ctx.params)
        if missing:
            return missing_params_result(method=ctx.method, missing=missing, rpc_error=rpc_error)
        return None

    async def _invoke_action(self, ctx: RpcDispatchContext) -> RpcResult:
        try:
            result = await resolve_maybe_awaitable(await _call_action(ctx.descriptor.action, ctx.action_params))
        except RpcError as e:
            return rpc_error_result(
                method=ctx.method,
                exc=e,
                log_warning=logger.warning,
                rpc_error=rpc_error,
            )
        except Exception as e:
            return unhandled_exception_result(
                method=ctx.method,
                exc=e,
                log_exception=logger.exception,
                rpc_error=rpc_error,
            )
        return True, result, None


async def _call_action(action: Any, params: dict[str, Any]) -> Any:
    """Call an action; sync callables run in a worker thread so they never block the loop."""
    if inspect.iscoroutinefunction(action) or inspect.iscoroutinefunction(getattr(action, "__call__", None)):
        return await action(params)
    return await asyncio.to_thread(action, params)
