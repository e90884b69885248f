"""Method registry for JSON-RPC dispatch.

The registry is built once at start-up, frozen, and then only read per request.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable

from toolrpc.utils.exceptions import RegistryError

INITIALIZE_METHOD = "initialize"

Action = Callable[[dict[str, Any]], Awaitable[Any] | Any]


@dataclass(frozen=True, slots=True)
class MethodDescriptor:
    """Binds a method name to its parameter schema and implementing action."""

    name: str
    description: str
    action: Action
    parameters: dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})
    required: frozenset[str] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise RegistryError("method name must be a non-empty string")
        object.__setattr__(self, "parameters", copy.deepcopy(self.parameters))
        if self.required is None:
            schema_required = self.parameters.get("required") or []
            object.__setattr__(self, "required", frozenset(schema_required))
        else:
            object.__setattr__(self, "required", frozenset(self.required))

    def missing_params(self, params: dict[str, Any] | None) -> list[str]:
        """Return the sorted required names absent from params."""
        present = params or {}
        return sorted(name for name in self.required if name not in present)

    def to_schema(self) -> dict[str, Any]:
        """Discovery entry advertised by ``initialize``."""
        return {
            "description": self.description,
            "parameters": copy.deepcopy(self.parameters),
            "required": sorted(self.required),
        }


class MethodRegistry:
    """
    Registry of method descriptors.

    Open to extension at registration time, read-only once frozen.
    """

    def __init__(self, descriptors: Iterable[MethodDescriptor] | None = None):
        self._methods: dict[str, MethodDescriptor] = {}
        self._frozen = False
        for descriptor in descriptors or ():
            self.register(descriptor)

    def register(self, descriptor: MethodDescriptor) -> None:
        """Register a descriptor under its name."""
        if self._frozen:
            raise RegistryError(f"registry is frozen; cannot register {descriptor.name}")
        if descriptor.name == INITIALIZE_METHOD:
            raise RegistryError(f"'{INITIALIZE_METHOD}' is reserved")
        if descriptor.name in self._methods:
            raise RegistryError(f"method already registered: {descriptor.name}")
        self._methods[descriptor.name] = descriptor

    def register_all(self, descriptors: Iterable[MethodDescriptor]) -> None:
        for descriptor in descriptors:
            self.register(descriptor)

    def freeze(self) -> "MethodRegistry":
        """Stop accepting registrations."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> MethodDescriptor | None:
        """Get a descriptor by name."""
        return self._methods.get(name)

    def describe(self) -> dict[str, dict[str, Any]]:
        """Get discovery entries for every registered method."""
        return {name: descriptor.to_schema() for name, descriptor in self._methods.items()}

    @property
    def names(self) -> list[str]:
        """Get list of registered method names."""
        return list(self._methods)

    def __len__(self) -> int:
        return len(self._methods)

    def __contains__(self, name: object) -> bool:
        return name in self._methods
