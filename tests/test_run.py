"""Tests for the command-line entry point."""

from __future__ import annotations

import json

import pytest

from kafkaprobe.config.broker_config import SETTING_KEYS
from kafkaprobe.diagnostics import run


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    for key in SETTING_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def test_offline_run_passes(capsys) -> None:
    exit_code = run.main(["--offline"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Kafka connection test PASSED" in output
    assert "KAFKA_DEFAULT_BROKER_URL=not set" in output


def test_offline_json_run(capsys) -> None:
    exit_code = run.main(["--offline", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["passed"] is True
    assert len(payload["results"]) == 6


def test_partial_sasl_config_fails_before_probing(monkeypatch, capsys) -> None:
    monkeypatch.setenv("KAFKA_DEFAULT_MECHANISM", "PLAIN")
    monkeypatch.setenv("KAFKA_DEFAULT_USERNAME", "alice")
    monkeypatch.setenv("KAFKA_DEFAULT_PASSWORD", "")

    def _unexpected(*args, **kwargs):
        raise AssertionError("probes must not run")

    monkeypatch.setattr(run, "run_probes", _unexpected)

    exit_code = run.main(["--offline"])

    assert exit_code == 1
    assert "Kafka connection test FAILED" in capsys.readouterr().out


def test_unexpected_error_exits_with_failure(monkeypatch) -> None:
    async def _explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(run, "run_probes", _explode)

    assert run.main(["--offline"]) == 1


def test_dotenv_file_is_read_from_working_directory(tmp_path, capsys) -> None:
    (tmp_path / ".env").write_text("KAFKA_DEFAULT_CLIENT_ID=dotenv-client\n", encoding="utf-8")

    exit_code = run.main(["--offline"])

    assert exit_code == 0
    assert "Client ID: dotenv-client" in capsys.readouterr().out


def test_log_file_receives_progress(tmp_path) -> None:
    from kafkaprobe.core import logging as probe_logging

    log_path = tmp_path / "logs" / "probe.log"
    try:
        assert run.main(["--offline", "--log-file", str(log_path)]) == 0
    finally:
        probe_logging.disable_file_logging()

    assert "Admin disconnected" in log_path.read_text(encoding="utf-8")
