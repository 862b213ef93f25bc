"""Tests for ``imagetrust config``."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from imagetrust.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _no_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("IMAGETRUST_CONFIG", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


class TestConfigCommand:

    def test_defaults_json(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["config", "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert "hashicorp" in data["trusted_namespaces"]
        assert data["auto_approve_threshold"] == 80
        assert data["review_threshold"] == 50
        assert data["github_token"] is None

    def test_token_masked(self, runner: CliRunner) -> None:
        result = runner.invoke(
            cli, ["config", "--format", "json"], env={"GITHUB_TOKEN": "ghp_secret"},
        )
        assert json.loads(result.stdout)["github_token"] == "***"
        assert "ghp_secret" not in result.output

    def test_table_output(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["config"])
        assert result.exit_code == 0
        assert "Effective Configuration" in result.output
        assert "recency_days" in result.output

    def test_file_overrides(self, runner: CliRunner, tmp_path: Path) -> None:
        config = tmp_path / "imagetrust.yaml"
        config.write_text("recency_days: 30\ntrusted_namespaces: [acme]\n")
        result = runner.invoke(cli, ["config", "--config", str(config), "--format", "json"])
        data = json.loads(result.stdout)
        assert data["recency_days"] == 30
        assert data["trusted_namespaces"] == ["acme"]

    def test_unknown_key(self, runner: CliRunner, tmp_path: Path) -> None:
        config = tmp_path / "imagetrust.yaml"
        config.write_text("approve_at: 90\n")
        result = runner.invoke(cli, ["config", "--config", str(config)])
        assert result.exit_code == 3
        assert "approve_at" in result.output

    def test_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(
            cli, ["config", "--config", str(tmp_path / "nope.yaml"), "--format", "json"],
        )
        assert result.exit_code == 3
        assert "error" in json.loads(result.stdout)
