"""toolrpc - JSON-RPC tool servers in the MCP style."""

__version__ = "0.1.0"
__logo__ = "🛠"
