"""Utility helpers for toolrpc."""
