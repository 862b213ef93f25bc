"""Structured report serialization and process exit codes.

The JSON document layout and the exit codes are consumed by automation
and must stay stable:

Exit Codes:
    0 -- auto-approve
    1 -- needs-human-review
    2 -- auto-reject
    3 -- error (no report produced)
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import IntEnum
from typing import Any

from imagetrust.core.scoring.models import Decision, EvaluationReport


class ExitCode(IntEnum):
    """Process exit codes for each disposition."""

    APPROVE = 0
    REVIEW = 1
    REJECT = 2
    ERROR = 3


_DECISION_EXIT_CODES: dict[Decision, ExitCode] = {
    Decision.AUTO_APPROVE: ExitCode.APPROVE,
    Decision.NEEDS_HUMAN_REVIEW: ExitCode.REVIEW,
    Decision.AUTO_REJECT: ExitCode.REJECT,
}


def exit_code_for(decision: Decision) -> ExitCode:
    """Return the process exit code for a decision."""
    return _DECISION_EXIT_CODES[decision]


def format_timestamp(value: datetime) -> str:
    """Render a datetime as ``YYYY-MM-DDTHH:MM:SSZ`` in UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def report_to_dict(report: EvaluationReport) -> dict[str, Any]:
    """Convert an EvaluationReport to a JSON-serializable dict.

    Args:
        report: The evaluation report.

    Returns:
        Dictionary with stable field names. ``scores`` is keyed by
        criterion in report order.
    """
    meta = report.image_metadata
    return {
        "image": report.raw_reference,
        "timestamp": format_timestamp(report.timestamp),
        "reference": {
            "registry": report.image.registry,
            "namespace": report.image.namespace,
            "repository": report.image.repository,
            "tag": report.image.tag,
            "digest": report.image.digest or None,
        },
        "scores": {
            r.criterion.value: {
                "points": r.points,
                "max": r.max_points,
                "detail": r.detail,
            }
            for r in report.results
        },
        "total_score": report.total_score,
        "max_score": report.max_score,
        "decision": report.decision.value,
        "vendor_known": report.vendor_known,
        "vulnerability_summary": report.vulnerability_counts.as_dict(),
        "image_metadata": {
            "created": format_timestamp(meta.created) if meta.created else None,
            "size_mb": meta.size_mb,
            "layers": meta.layers,
            "digest": meta.digest,
        },
    }
