"""Tool families exposed as RPC methods."""

from toolrpc.tools.outlook import OutlookTools
from toolrpc.tools.token_store import InMemoryTokenStore, TokenStore
from toolrpc.tools.weather import WeatherTools

__all__ = ["OutlookTools", "WeatherTools", "InMemoryTokenStore", "TokenStore"]
