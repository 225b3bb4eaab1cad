"""Tests for the agent-orange command line."""

import json

import pytest
import yaml
from click.testing import CliRunner

from agent_orange.cli import cli


@pytest.fixture
def runner(monkeypatch, tmp_path):
    # basicConfig(force=True) would bind the root handler to CliRunner's stream
    monkeypatch.setattr("agent_orange.cli.setup_logging", lambda *a, **kw: None)
    monkeypatch.setenv("AGENT_ORANGE_STORE__BACKEND", "sqlite")
    monkeypatch.setenv("AGENT_ORANGE_STORE__DB_PATH", str(tmp_path / "data" / "ao.db"))
    return CliRunner()


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "version" in result.output


def test_mode_defaults_to_relay(runner):
    result = runner.invoke(cli, ["mode"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "relay-channel"


def test_mode_set_then_get(runner):
    result = runner.invoke(cli, ["mode", "voice-channel"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "voice-channel"

    result = runner.invoke(cli, ["mode"])
    assert result.output.strip() == "voice-channel"


def test_mode_rejects_unknown_value(runner):
    result = runner.invoke(cli, ["mode", "carrier-pigeon"])
    assert result.exit_code != 0
    assert "Error" in result.output

    assert runner.invoke(cli, ["mode"]).output.strip() == "relay-channel"


def test_pending_with_no_request(runner):
    result = runner.invoke(cli, ["pending"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"status": "none"}


def test_relay_requires_configuration(runner):
    result = runner.invoke(cli, ["relay"])
    assert result.exit_code != 0
    assert "relay is not configured" in result.output


def test_bad_config_file_is_reported(runner, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"web": {"api_key": "short"}}))
    result = runner.invoke(cli, ["--config", str(path), "pending"])
    assert result.exit_code != 0
    assert "too weak" in result.output


def test_missing_config_file_is_reported(runner, tmp_path):
    result = runner.invoke(cli, ["--config", str(tmp_path / "absent.yaml"), "mode"])
    assert result.exit_code != 0
    assert "Config file not found" in result.output
