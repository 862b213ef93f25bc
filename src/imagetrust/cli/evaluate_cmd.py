"""``imagetrust evaluate <image>`` -- Score an image for allowlist admission.

Parses the reference, gathers trust signals (skopeo, trivy, cosign and
the registry's metadata API), and prints the score breakdown and the
admission decision.

Exit Codes:
    0 -- auto-approve.
    1 -- needs-human-review.
    2 -- auto-reject.
    3 -- error: missing image reference or invalid configuration.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace

import click

from imagetrust.config import EvaluationConfig, load_config
from imagetrust.core.scoring import ExitCode, ImageEvaluator, exit_code_for, report_to_dict
from imagetrust.exceptions import ImageTrustError
from imagetrust.signals.cosign import CosignVerifier
from imagetrust.signals.skopeo import SkopeoInspector
from imagetrust.signals.trivy import TrivyScanner

logger = logging.getLogger(__name__)


def build_evaluator(config: EvaluationConfig) -> ImageEvaluator:
    """Create an evaluator wired to the default tool adapters.

    Args:
        config: Validated evaluation configuration.

    Returns:
        An ImageEvaluator using skopeo, trivy and cosign.
    """
    return ImageEvaluator(
        config,
        inspector=SkopeoInspector(timeout=config.timeout),
        scanner=TrivyScanner(timeout=config.timeout),
        verifier=CosignVerifier(
            identity_regexp=config.certificate_identity_regexp,
            issuer_regexp=config.certificate_oidc_issuer_regexp,
            timeout=config.timeout,
        ),
    )


def _fail(message: str, output_format: str) -> None:
    """Report a fatal error and exit with the error code."""
    if output_format == "json":
        click.echo(json.dumps({"error": message}))
    else:
        click.echo(f"Error: {message}", err=True)
    sys.exit(int(ExitCode.ERROR))


@click.command("evaluate")
@click.argument("image", required=False, default="")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False),
    envvar="IMAGETRUST_CONFIG",
    default=None,
    help="YAML configuration file (env: IMAGETRUST_CONFIG).",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Per-signal timeout in seconds (overrides the config file).",
)
def evaluate_command(
    image: str,
    output_format: str,
    config_path: str | None,
    timeout: float | None,
) -> None:
    """Evaluate IMAGE for admission to the approved-registry allowlist.

    Scores vendor trust, recency, adoption, CRITICAL/HIGH CVEs and
    signature presence (0-100) and recommends auto-approve,
    needs-human-review or auto-reject. Unknown vendors never auto-approve.

    Exit code 0 approve, 1 review, 2 reject, 3 error.
    """
    if not image.strip():
        _fail("An image reference is required (e.g. hashicorp/vault:1.15)", output_format)

    try:
        config = load_config(config_path)
        if timeout is not None:
            config = replace(config, timeout=timeout)
        evaluator = build_evaluator(config)
        report = evaluator.evaluate_sync(image)
    except ImageTrustError as exc:
        _fail(str(exc), output_format)
    except Exception as exc:
        logger.debug("Evaluation of %s aborted", image, exc_info=True)
        _fail(f"Evaluation failed: {exc!r}", output_format)

    if output_format == "json":
        click.echo(json.dumps(report_to_dict(report), indent=2))
    else:
        from imagetrust.cli.output import print_report
        print_report(report)

    sys.exit(int(exit_code_for(report.decision)))
