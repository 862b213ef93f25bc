"""Tests for ``imagetrust evaluate``.

The evaluator factory is patched to use in-memory fakes, so exit codes
and both output formats are exercised without external tools.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from imagetrust.cli.main import cli
from imagetrust.config import EvaluationConfig
from imagetrust.core.scoring import ImageEvaluator, VulnerabilityCounts
from imagetrust.core.scoring.adoption import AdoptionRegistry
from imagetrust.signals.base import InspectResult, SignatureStatus


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _no_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("IMAGETRUST_CONFIG", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


@pytest.fixture
def healthy(fakes: dict[str, type]) -> Any:
    """Patch the evaluator factory with fully healthy signal sources."""
    inspect = InspectResult(
        created=datetime.now(timezone.utc) - timedelta(days=5),
        digest="sha256:" + "c" * 64,
        layers=6,
        size_bytes=104_857_600,
    )

    def _build(config: EvaluationConfig) -> ImageEvaluator:
        return ImageEvaluator(
            config,
            inspector=fakes["inspector"](inspect),
            scanner=fakes["scanner"](VulnerabilityCounts(medium=2, low=5)),
            verifier=fakes["verifier"](SignatureStatus.VERIFIED),
            adoption=AdoptionRegistry(default=fakes["adoption"](15)),
        )

    with patch("imagetrust.cli.evaluate_cmd.build_evaluator", side_effect=_build) as mock:
        yield mock


@pytest.fixture
def unreachable(fakes: dict[str, type]) -> Any:
    """Patch the evaluator factory with no reachable signal source."""

    def _build(config: EvaluationConfig) -> ImageEvaluator:
        return ImageEvaluator(
            config,
            inspector=fakes["inspector"](),
            scanner=fakes["scanner"](),
            verifier=fakes["verifier"](),
            adoption=AdoptionRegistry(),
        )

    with patch("imagetrust.cli.evaluate_cmd.build_evaluator", side_effect=_build) as mock:
        yield mock


class TestDecisionsAndExitCodes:
    """Each decision maps to its exit code."""

    def test_known_vendor_approved(self, runner: CliRunner, healthy) -> None:
        result = runner.invoke(cli, ["evaluate", "hashicorp/vault:1.15"])
        assert result.exit_code == 0, result.output
        assert "auto-approve" in result.output

    def test_unknown_vendor_needs_review(self, runner: CliRunner, healthy) -> None:
        result = runner.invoke(cli, ["evaluate", "unknown-vendor/app:v1"])
        assert result.exit_code == 1, result.output
        assert "needs-human-review" in result.output

    def test_nothing_reachable_rejected(self, runner: CliRunner, unreachable) -> None:
        result = runner.invoke(cli, ["evaluate", "unknown-vendor/app:v1"])
        assert result.exit_code == 2, result.output
        assert "auto-reject" in result.output


class TestTextOutput:

    def test_report_sections(self, runner: CliRunner, healthy) -> None:
        result = runner.invoke(cli, ["evaluate", "hashicorp/vault:1.15"])
        assert "Image Registry Evaluation Report" in result.output
        assert "Recency" in result.output
        assert "Total Score" in result.output
        assert "100 / 100" in result.output

    def test_unknown_vendor_note(self, runner: CliRunner, healthy) -> None:
        result = runner.invoke(cli, ["evaluate", "unknown-vendor/app:v1"])
        assert "Unknown vendors always require human review" in result.output


class TestJsonOutput:

    def test_document(self, runner: CliRunner, healthy) -> None:
        result = runner.invoke(
            cli, ["evaluate", "quay.io/argoproj/argocd:v2.10.0", "--format", "json"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["image"] == "quay.io/argoproj/argocd:v2.10.0"
        assert data["decision"] == "auto-approve"
        assert data["total_score"] == 100
        assert data["reference"]["namespace"] == "argoproj"
        assert data["vulnerability_summary"]["low"] == 5
        assert data["image_metadata"]["size_mb"] == 100.0
        assert data["scores"]["signature"]["points"] == 10

    def test_degraded_document(self, runner: CliRunner, unreachable) -> None:
        result = runner.invoke(cli, ["evaluate", "hashicorp/vault", "--format", "json"])
        data = json.loads(result.stdout)
        assert data["total_score"] == 50
        assert data["decision"] == "needs-human-review"
        assert data["image_metadata"]["digest"] is None
        assert result.exit_code == 1


class TestErrors:
    """Invocation errors exit with code 3."""

    def test_missing_image(self, runner: CliRunner, healthy) -> None:
        result = runner.invoke(cli, ["evaluate"])
        assert result.exit_code == 3
        assert "image reference is required" in result.output
        healthy.assert_not_called()

    def test_blank_image(self, runner: CliRunner, healthy) -> None:
        result = runner.invoke(cli, ["evaluate", "   "])
        assert result.exit_code == 3

    def test_missing_image_json(self, runner: CliRunner, healthy) -> None:
        result = runner.invoke(cli, ["evaluate", "--format", "json"])
        assert result.exit_code == 3
        assert "error" in json.loads(result.stdout)

    def test_invalid_config_file(
        self, runner: CliRunner, healthy, tmp_path: Path,
    ) -> None:
        config = tmp_path / "imagetrust.yaml"
        config.write_text("auto_approve_threshold: 40\nreview_threshold: 60\n")
        result = runner.invoke(
            cli, ["evaluate", "hashicorp/vault", "--config", str(config)],
        )
        assert result.exit_code == 3
        assert "Thresholds" in result.output

    def test_invalid_timeout(self, runner: CliRunner, healthy) -> None:
        result = runner.invoke(cli, ["evaluate", "hashicorp/vault", "--timeout", "0"])
        assert result.exit_code == 3


class TestConfigOptions:

    def test_config_file_applied(
        self, runner: CliRunner, unreachable, tmp_path: Path,
    ) -> None:
        config = tmp_path / "imagetrust.yaml"
        config.write_text("trusted_namespaces:\n  - acme\n")
        result = runner.invoke(
            cli, ["evaluate", "acme/app:v1", "--config", str(config), "--format", "json"],
        )
        data = json.loads(result.stdout)
        assert data["vendor_known"] is True
        assert data["scores"]["vendor_trust"]["points"] == 30

    def test_config_from_environment(
        self, runner: CliRunner, unreachable, tmp_path: Path,
    ) -> None:
        config = tmp_path / "imagetrust.yaml"
        config.write_text("trusted_namespaces:\n  - acme\n")
        result = runner.invoke(
            cli,
            ["evaluate", "acme/app:v1", "--format", "json"],
            env={"IMAGETRUST_CONFIG": str(config)},
        )
        assert json.loads(result.stdout)["vendor_known"] is True

    def test_timeout_override(self, runner: CliRunner, unreachable) -> None:
        runner.invoke(cli, ["evaluate", "hashicorp/vault", "--timeout", "7.5"])
        config = unreachable.call_args.args[0]
        assert config.timeout == 7.5


class TestUnexpectedFailures:
    """Internal failures exit with the error code, never a decision code."""

    def test_factory_crash_exits_error(self, runner: CliRunner) -> None:
        with patch(
            "imagetrust.cli.evaluate_cmd.build_evaluator",
            side_effect=RuntimeError("boom"),
        ):
            result = runner.invoke(cli, ["evaluate", "hashicorp/vault:1"])
        assert result.exit_code == 3
        assert "boom" in result.output

    def test_evaluation_crash_exits_error_json(self, runner: CliRunner) -> None:
        evaluator = MagicMock()
        evaluator.evaluate_sync.side_effect = RuntimeError("boom")
        with patch("imagetrust.cli.evaluate_cmd.build_evaluator", return_value=evaluator):
            result = runner.invoke(cli, ["evaluate", "hashicorp/vault:1", "--format", "json"])
        assert result.exit_code == 3
        assert "boom" in json.loads(result.stdout)["error"]

    def test_capability_crash_still_decides(self, runner: CliRunner, fakes) -> None:
        def _build(config: EvaluationConfig) -> ImageEvaluator:
            return ImageEvaluator(
                config,
                inspector=fakes["inspector"](),
                scanner=fakes["scanner"](error=RuntimeError("boom")),
                verifier=fakes["verifier"](),
                adoption=AdoptionRegistry(),
            )

        with patch("imagetrust.cli.evaluate_cmd.build_evaluator", side_effect=_build):
            result = runner.invoke(cli, ["evaluate", "hashicorp/vault:1"])
        assert result.exit_code == 1, result.output
        assert "needs-human-review" in result.output
