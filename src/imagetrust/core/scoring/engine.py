"""Evaluation engine: signal gathering, aggregation, and the admission decision.

Scoring Model:
    total = vendor + recency + adoption + cve_critical + cve_high + signature

Decision Rule (in order):
    1. Guardrail: an unknown vendor whose total reaches the auto-approve
       threshold is capped at needs-human-review.
    2. total >= auto_approve_threshold  -> auto-approve
       total >= review_threshold        -> needs-human-review
       otherwise                        -> auto-reject

Signal gathering runs the four I/O-bound capability calls as concurrent
asyncio tasks, each bounded by ``EvaluationConfig.timeout``. A timeout or any
exception raised by a capability degrades that one signal to
"unavailable"; the aggregation only starts once every task has finished.
Cancellation is not caught and propagates to every task.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TypeVar

from imagetrust.config import MAX_SCORE, EvaluationConfig
from imagetrust.core.reference import ImageReference, parse_reference
from imagetrust.core.scoring.adoption import (
    AdoptionData,
    AdoptionRegistry,
    default_adoption_registry,
)
from imagetrust.core.scoring.evaluators import (
    evaluate_recency,
    evaluate_signature,
    evaluate_vendor,
    evaluate_vulnerabilities,
)
from imagetrust.core.scoring.models import (
    Decision,
    EvaluationReport,
    EvaluatorResult,
    ImageMetadata,
    VulnerabilityCounts,
)
from imagetrust.exceptions import InputError, SignalSourceError
from imagetrust.signals.base import (
    ImageInspector,
    InspectResult,
    SignatureStatus,
    SignatureVerifier,
    VulnerabilityScanner,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

BYTES_PER_MB: int = 1024 * 1024


# ---------------------------------------------------------------------------
# Decision and aggregation (pure)
# ---------------------------------------------------------------------------


def decide(total_score: int, vendor_known: bool, config: EvaluationConfig) -> Decision:
    """Map a total score and the vendor-known flag to a disposition.

    Args:
        total_score: Sum of all criterion points.
        vendor_known: Whether vendor trust was established.
        config: Supplies the two thresholds.

    Returns:
        The admission decision. Never AUTO_APPROVE for an unknown vendor.
    """
    if total_score >= config.auto_approve_threshold:
        if not vendor_known:
            return Decision.NEEDS_HUMAN_REVIEW
        return Decision.AUTO_APPROVE
    if total_score >= config.review_threshold:
        return Decision.NEEDS_HUMAN_REVIEW
    return Decision.AUTO_REJECT


def metadata_from_inspect(inspect: InspectResult | None) -> ImageMetadata:
    """Convert an inspection result into report metadata."""
    if inspect is None:
        return ImageMetadata()
    size_mb = None
    if inspect.size_bytes is not None:
        size_mb = round(inspect.size_bytes / BYTES_PER_MB, 2)
    return ImageMetadata(
        created=inspect.created,
        size_mb=size_mb,
        layers=inspect.layers,
        digest=inspect.digest,
    )


def build_report(
    *,
    image: ImageReference,
    raw_reference: str,
    timestamp: datetime,
    results: list[EvaluatorResult],
    vendor_known: bool,
    config: EvaluationConfig,
    vulnerability_counts: VulnerabilityCounts | None = None,
    image_metadata: ImageMetadata | None = None,
) -> EvaluationReport:
    """Aggregate criterion results into an immutable report.

    Raises:
        ValueError: If ``results`` is not one result per criterion in
            criterion order.
    """
    total = sum(r.points for r in results)
    return EvaluationReport(
        image=image,
        raw_reference=raw_reference,
        timestamp=timestamp,
        results=tuple(results),
        total_score=total,
        max_score=MAX_SCORE,
        decision=decide(total, vendor_known, config),
        vendor_known=vendor_known,
        vulnerability_counts=vulnerability_counts or VulnerabilityCounts(),
        image_metadata=image_metadata or ImageMetadata(),
    )


# ---------------------------------------------------------------------------
# Gathered signals
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GatheredSignals:
    """Raw capability outputs for one image, after timeouts are applied."""

    inspect: InspectResult | None
    vulnerabilities: VulnerabilityCounts | None
    signature: SignatureStatus
    adoption: AdoptionData


# ---------------------------------------------------------------------------
# ImageEvaluator
# ---------------------------------------------------------------------------


class ImageEvaluator:
    """Single-image, single-pass trust evaluator.

    The evaluator holds only immutable configuration and stateless
    capability adapters, so one instance may evaluate many images.

    Usage::

        evaluator = ImageEvaluator(config, inspector, scanner, verifier)
        report = evaluator.evaluate_sync("hashicorp/vault:1.15")

    Args:
        config: Trusted sets, thresholds and the per-signal timeout.
        inspector: Image inspection capability.
        scanner: Vulnerability scan capability.
        verifier: Signature verification capability.
        adoption: Host-to-strategy mapping. Defaults to
            :func:`default_adoption_registry` for ``config``.
    """

    def __init__(
        self,
        config: EvaluationConfig,
        inspector: ImageInspector,
        scanner: VulnerabilityScanner,
        verifier: SignatureVerifier,
        adoption: AdoptionRegistry | None = None,
    ) -> None:
        config.validate()
        self._config = config
        self._inspector = inspector
        self._scanner = scanner
        self._verifier = verifier
        self._adoption = adoption or default_adoption_registry(config)

    @property
    def config(self) -> EvaluationConfig:
        """Return the evaluation configuration."""
        return self._config

    async def _bounded(self, name: str, call: Awaitable[T], fallback: T) -> T:
        """Await ``call`` under the configured timeout, or return ``fallback``."""
        try:
            return await asyncio.wait_for(call, timeout=self._config.timeout)
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.0fs, degrading", name, self._config.timeout)
        except SignalSourceError as exc:
            logger.warning("%s returned unusable output, degrading: %s", name, exc)
        except Exception as exc:
            logger.warning("%s failed, degrading: %s", name, exc, exc_info=True)
        return fallback

    async def gather_signals(self, ref: ImageReference) -> GatheredSignals:
        """Run all capability calls concurrently and join on them."""
        strategy = self._adoption.strategy_for(ref.registry)
        inspect, vulnerabilities, signature, adoption = await asyncio.gather(
            self._bounded("image inspection", self._inspector.inspect(ref), None),
            self._bounded("vulnerability scan", self._scanner.scan(ref), None),
            self._bounded(
                "signature verification",
                self._verifier.verify(ref),
                SignatureStatus.UNAVAILABLE,
            ),
            self._bounded(f"{strategy.registry_name} adoption lookup", strategy.fetch(ref), None),
        )
        return GatheredSignals(
            inspect=inspect,
            vulnerabilities=vulnerabilities,
            signature=signature,
            adoption=adoption,
        )

    def score(
        self,
        ref: ImageReference,
        raw_reference: str,
        signals: GatheredSignals,
        now: datetime,
    ) -> EvaluationReport:
        """Apply every evaluator to gathered signals and build the report."""
        vendor, vendor_known = evaluate_vendor(ref, self._config)
        recency = evaluate_recency(signals.inspect, now, self._config)
        adoption = self._adoption.strategy_for(ref.registry).score(ref, signals.adoption)
        critical, high = evaluate_vulnerabilities(signals.vulnerabilities)
        signature = evaluate_signature(signals.signature)

        return build_report(
            image=ref,
            raw_reference=raw_reference,
            timestamp=now,
            results=[vendor, recency, adoption, critical, high, signature],
            vendor_known=vendor_known,
            config=self._config,
            vulnerability_counts=signals.vulnerabilities,
            image_metadata=metadata_from_inspect(signals.inspect),
        )

    async def evaluate(
        self,
        raw_reference: str,
        now: datetime | None = None,
    ) -> EvaluationReport:
        """Evaluate one image reference.

        Args:
            raw_reference: Image reference as requested.
            now: Evaluation time; defaults to the current UTC time.

        Returns:
            The complete evaluation report.

        Raises:
            InputError: If the reference is empty.
        """
        if not raw_reference or not raw_reference.strip():
            raise InputError("An image reference is required")

        ref = parse_reference(raw_reference)
        logger.info(
            "Evaluating %s (registry=%s namespace=%s repository=%s tag=%s)",
            raw_reference, ref.registry, ref.namespace, ref.repository, ref.tag,
        )
        signals = await self.gather_signals(ref)
        report = self.score(ref, raw_reference.strip(), signals, now or datetime.now(timezone.utc))
        logger.info(
            "%s scored %d/%d: %s",
            raw_reference, report.total_score, report.max_score, report.decision.value,
        )
        return report

    def evaluate_sync(
        self,
        raw_reference: str,
        now: datetime | None = None,
    ) -> EvaluationReport:
        """Run :meth:`evaluate` to completion from synchronous code."""
        return asyncio.run(self.evaluate(raw_reference, now))
