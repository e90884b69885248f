"""JSON-RPC dispatch core."""

from toolrpc.api.rpc.dispatcher import Dispatcher
from toolrpc.api.rpc.registry import MethodDescriptor, MethodRegistry

__all__ = ["Dispatcher", "MethodDescriptor", "MethodRegistry"]
