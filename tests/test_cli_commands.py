import json
import sys

import pytest
from loguru import logger
from typer.testing import CliRunner

from toolrpc.cli import commands
from toolrpc.cli.commands import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_loguru():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENWEATHER_API_KEY", raising=False)
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"weather": {"apiKey": "k"}, "logging": {"fileEnabled": False}}))
    return path


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "toolrpc v" in result.stdout


def test_methods_lists_registered_tools(config_file):
    result = runner.invoke(app, ["methods", "--config", str(config_file)])
    assert result.exit_code == 0
    assert "getCurrentWeather" in result.stdout
    assert "sendEmail" in result.stdout


def test_call_initialize_prints_envelope(config_file):
    result = runner.invoke(app, ["call", "initialize", "--id", "5", "--config", str(config_file)])
    assert result.exit_code == 0
    response = json.loads(result.stdout)
    assert response["id"] == 5
    assert "getForecast" in response["result"]["methods"]


def test_call_missing_params_exits_nonzero(config_file):
    result = runner.invoke(
        app, ["call", "getCurrentWeather", "--params", "{}", "--id", "req-2", "--config", str(config_file)]
    )
    assert result.exit_code == 1
    response = json.loads(result.stdout)
    assert response["error"]["code"] == -32602
    assert response["id"] == "req-2"


def test_call_rejects_bad_params_json(config_file):
    result = runner.invoke(app, ["call", "getCurrentWeather", "--params", "{nope", "--config", str(config_file)])
    assert result.exit_code == 2


def test_serve_refuses_busy_port(config_file, monkeypatch):
    monkeypatch.setattr(commands, "is_port_in_use", lambda host, port: True)
    result = runner.invoke(app, ["serve", "--port", "8787", "--config", str(config_file)])
    assert result.exit_code == 1
    assert "already in use" in result.stdout


def test_serve_builds_app_and_runs(config_file, monkeypatch):
    captured = {}
    monkeypatch.setattr(commands, "is_port_in_use", lambda host, port: False)
    monkeypatch.setattr(
        "toolrpc.api.server.run_server",
        lambda server_app, host, port, log_level: captured.update(app=server_app, host=host, port=port),
    )
    result = runner.invoke(app, ["serve", "--host", "127.0.0.1", "--port", "9999", "--config", str(config_file)])
    assert result.exit_code == 0, result.stdout
    assert captured["port"] == 9999
    assert len(captured["app"].state.dispatcher.registry) == 5
