"""Shared upstream HTTP helper for tool actions."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from toolrpc.utils.exceptions import UpstreamError, sanitize_error_message


async def request_json(
    method: str,
    url: str,
    *,
    service: str,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
    **kwargs: Any,
) -> Any:
    """
    Issue one upstream request and decode the JSON body.

    Raises:
        UpstreamError: On a non-2xx status or an undecodable body.
        httpx.TimeoutException / httpx.TransportError: Propagated unchanged.
    """
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        r = await client.request(method, url, **kwargs)
    logger.debug("{} {} {} -> {}", service, method, sanitize_error_message(str(r.request.url)), r.status_code)

    if r.status_code >= 400:
        raise UpstreamError(service, _error_detail(r), status_code=r.status_code)
    if r.status_code == 204 or not r.content:
        return {}
    try:
        return r.json()
    except ValueError as e:
        raise UpstreamError(service, "invalid JSON response", status_code=r.status_code) from e


def _error_detail(r: httpx.Response) -> str:
    """Pull a human-readable message out of common API error bodies."""
    detail = f"HTTP {r.status_code}"
    try:
        body = r.json()
    except ValueError:
        return detail
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return f"{detail}: {err['message']}"
        if body.get("message"):
            return f"{detail}: {body['message']}"
    return detail
