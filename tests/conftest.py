"""Pytest hooks and fixtures."""

import httpx
import pytest

from toolrpc.config.schema import Config


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def make_transport():
    """Build a RecordingTransport from a request -> response handler."""
    return RecordingTransport


@pytest.fixture
def config(tmp_path, monkeypatch) -> Config:
    """Default config isolated from the developer's home directory and env."""
    monkeypatch.setenv("TOOLRPC_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.delenv("OPENWEATHER_API_KEY", raising=False)
    cfg = Config()
    cfg.weather.api_key = "test-key"
    cfg.outlook.tokens = {"alice": "alice-token"}
    cfg.logging.file_enabled = False
    return cfg
