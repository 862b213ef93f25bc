"""Pure signal evaluators.

Each function maps one gathered signal to an :class:`EvaluatorResult`.
None of them perform I/O: the engine gathers signals first and hands
them over, so every evaluator is deterministic for its inputs. Adoption
scoring is registry-specific and lives in :mod:`.adoption`.

Point schedule:

=====================  =====================================  ======
Criterion              Condition                              Points
=====================  =====================================  ======
Vendor trust           trusted registry or namespace          30
Recency                age <= recency_days / <= stale_days    15 / 5
CVE (critical)         clean / scan unavailable / any found   20 / 10 / 0
CVE (high)             none recorded / any found              10 / 0
Signature              verified / otherwise                   10 / 0
=====================  =====================================  ======
"""

from __future__ import annotations

import math
from datetime import datetime

from imagetrust.config import EvaluationConfig
from imagetrust.core.reference import ImageReference
from imagetrust.core.scoring.models import Criterion, EvaluatorResult, VulnerabilityCounts
from imagetrust.signals.base import InspectResult, SignatureStatus

SECONDS_PER_DAY: int = 86400


def evaluate_vendor(
    ref: ImageReference,
    config: EvaluationConfig,
) -> tuple[EvaluatorResult, bool]:
    """Score vendor identity and report whether the vendor is known.

    A trusted registry supersedes the namespace check. Matching is exact
    and case-sensitive.

    Returns:
        The result and the vendor-known flag used by the guardrail.
    """
    if ref.registry in config.trusted_registries:
        detail = f"Registry {ref.registry} is a trusted vendor registry"
        return EvaluatorResult.award(Criterion.VENDOR, 30, detail), True
    if ref.namespace and ref.namespace in config.trusted_namespaces:
        detail = f"{ref.namespace} is a known trusted vendor"
        return EvaluatorResult.award(Criterion.VENDOR, 30, detail), True

    who = ref.namespace or ref.registry
    detail = f"{who} is NOT a known trusted vendor (unknown vendors require human review)"
    return EvaluatorResult.award(Criterion.VENDOR, 0, detail), False


def age_in_days(created: datetime, now: datetime) -> int:
    """Return whole days elapsed between ``created`` and ``now`` (floored).

    A creation time in the future (clock skew) counts as age 0.
    """
    return max(0, math.floor((now - created).total_seconds() / SECONDS_PER_DAY))


def evaluate_recency(
    inspect: InspectResult | None,
    now: datetime,
    config: EvaluationConfig,
) -> EvaluatorResult:
    """Score how recently the image was published."""
    if inspect is None:
        return EvaluatorResult.award(
            Criterion.RECENCY, 0,
            "Image inspection unavailable (tool missing, failed, or timed out)",
        )
    if inspect.created is None:
        return EvaluatorResult.award(
            Criterion.RECENCY, 0, "Could not determine image creation date",
        )

    days = age_in_days(inspect.created, now)
    if days <= config.recency_days:
        return EvaluatorResult.award(
            Criterion.RECENCY, 15,
            f"Last published {days} days ago (within {config.recency_days}d threshold)",
        )
    if days <= config.stale_days:
        return EvaluatorResult.award(
            Criterion.RECENCY, 5,
            f"Last published {days} days ago "
            f"(older than {config.recency_days}d but within {config.stale_days}d)",
        )
    return EvaluatorResult.award(
        Criterion.RECENCY, 0,
        f"Last published {days} days ago (STALE: over {config.stale_days}d old)",
    )


def evaluate_vulnerabilities(
    counts: VulnerabilityCounts | None,
) -> tuple[EvaluatorResult, EvaluatorResult]:
    """Score the critical and high vulnerability sub-criteria.

    Without a scan the critical sub-score gets partial credit, while the
    high sub-score sees zero recorded HIGH findings and gets full credit.
    Any nonzero count scores 0; magnitude is not considered.

    Returns:
        ``(critical_result, high_result)``.
    """
    if counts is None:
        critical = EvaluatorResult.award(
            Criterion.VULNERABILITY_CRITICAL, 10,
            "Vulnerability scan unavailable, partial score awarded",
        )
        high = EvaluatorResult.award(
            Criterion.VULNERABILITY_HIGH, 10,
            "0 HIGH CVEs recorded (no scan results)",
        )
        return critical, high

    if counts.critical == 0:
        critical = EvaluatorResult.award(
            Criterion.VULNERABILITY_CRITICAL, 20, "0 CRITICAL CVEs found",
        )
    else:
        critical = EvaluatorResult.award(
            Criterion.VULNERABILITY_CRITICAL, 0, f"{counts.critical} CRITICAL CVEs found",
        )

    if counts.high == 0:
        high = EvaluatorResult.award(Criterion.VULNERABILITY_HIGH, 10, "0 HIGH CVEs found")
    else:
        high = EvaluatorResult.award(
            Criterion.VULNERABILITY_HIGH, 0, f"{counts.high} HIGH CVEs found",
        )
    return critical, high


def evaluate_signature(status: SignatureStatus) -> EvaluatorResult:
    """Score signature presence. There is no partial credit."""
    if status is SignatureStatus.VERIFIED:
        return EvaluatorResult.award(
            Criterion.SIGNATURE, 10, "cosign signature verified (Sigstore)",
        )
    if status is SignatureStatus.UNAVAILABLE:
        return EvaluatorResult.award(
            Criterion.SIGNATURE, 0,
            "Signature verification unavailable, treated as unsigned",
        )
    return EvaluatorResult.award(
        Criterion.SIGNATURE, 0,
        "No valid cosign signature found (not signed or verification failed)",
    )
