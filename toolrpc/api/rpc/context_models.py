"""Shared dataclass models for RPC dispatch context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from toolrpc.api.rpc.registry import MethodDescriptor


@dataclass(slots=True)
class RpcDispatchContext:
    """Request-scoped state carried through the dispatch pipeline."""

    method: str
    params: Any
    has_params: bool
    req_id: str | int | float
    descriptor: MethodDescriptor | None = None

    @property
    def action_params(self) -> dict[str, Any]:
        return self.params if isinstance(self.params, dict) else {}
