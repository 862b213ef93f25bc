"""Vulnerability counting via ``trivy image``.

Runs a JSON-format trivy scan across all four severities and tallies
vulnerabilities per severity. Counts are unfiltered: every reported
vulnerability is counted once per result target it appears in.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from imagetrust.core.reference import ImageReference
from imagetrust.core.scoring.models import VulnerabilityCounts
from imagetrust.exceptions import SignalSourceError
from imagetrust.signals.base import VulnerabilityScanner
from imagetrust.signals.process import DEFAULT_TIMEOUT, run_tool

logger = logging.getLogger(__name__)

SEVERITIES: tuple[str, ...] = ("CRITICAL", "HIGH", "MEDIUM", "LOW")


def count_vulnerabilities(report: dict[str, Any]) -> VulnerabilityCounts:
    """Tally vulnerabilities by severity in a trivy JSON report.

    Args:
        report: Parsed ``trivy --format json`` output.

    Returns:
        Counts per severity. Severities outside the four scored ones
        (e.g. UNKNOWN) are ignored.
    """
    tally = dict.fromkeys(SEVERITIES, 0)
    for result in report.get("Results") or []:
        if not isinstance(result, dict):
            continue
        for vuln in result.get("Vulnerabilities") or []:
            severity = vuln.get("Severity") if isinstance(vuln, dict) else None
            if severity in tally:
                tally[severity] += 1
    return VulnerabilityCounts(
        critical=tally["CRITICAL"],
        high=tally["HIGH"],
        medium=tally["MEDIUM"],
        low=tally["LOW"],
    )


class TrivyScanner(VulnerabilityScanner):
    """Scan images with trivy."""

    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout

    async def scan(self, ref: ImageReference) -> VulnerabilityCounts | None:
        """Run ``trivy image --format json`` and count findings.

        Raises:
            SignalSourceError: If trivy succeeds but prints invalid JSON.
        """
        output = await run_tool(
            [
                "trivy", "image",
                "--severity", ",".join(SEVERITIES),
                "--format", "json",
                "--quiet",
                ref.canonical,
            ],
            timeout=self._timeout,
        )
        if output is None:
            return None
        if output.returncode != 0:
            logger.warning("trivy scan failed for %s: %s", ref, output.stderr.strip()[:200])
            return None
        try:
            report = json.loads(output.stdout)
        except ValueError as exc:
            raise SignalSourceError(f"trivy returned invalid JSON for {ref}") from exc
        if not isinstance(report, dict) or not report:
            return None
        return count_vulnerabilities(report)
