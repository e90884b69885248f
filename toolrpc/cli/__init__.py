"""CLI module for toolrpc."""
