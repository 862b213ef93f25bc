"""Scoring data models: criteria, per-criterion results, decisions, reports.

Defines the core data structures of the admission score:

- ``Criterion`` -- the six scored criteria and their point budgets.
- ``EvaluatorResult`` -- points awarded for one criterion, with a reason.
- ``Decision`` -- the three admission dispositions.
- ``VulnerabilityCounts`` / ``ImageMetadata`` -- recorded observations.
- ``EvaluationReport`` -- the complete, immutable outcome of one run.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from imagetrust.core.reference import ImageReference


# ---------------------------------------------------------------------------
# Criterion: what is scored, and how much it can be worth
# ---------------------------------------------------------------------------


class Criterion(Enum):
    """The scored criteria, in report order.

    Each value is the stable key used in serialized reports. Maximum
    points sum to 100:

    - **VENDOR** (30): publisher is a trusted vendor or registry.
    - **RECENCY** (15): image was published recently.
    - **ADOPTION** (15): registry-reported community usage.
    - **VULNERABILITY_CRITICAL** (20): no CRITICAL CVEs.
    - **VULNERABILITY_HIGH** (10): no HIGH CVEs.
    - **SIGNATURE** (10): cosign signature verifies.
    """

    VENDOR = "vendor_trust"
    RECENCY = "recency"
    ADOPTION = "adoption"
    VULNERABILITY_CRITICAL = "cve_critical"
    VULNERABILITY_HIGH = "cve_high"
    SIGNATURE = "signature"

    @property
    def max_points(self) -> int:
        """Return the point budget for this criterion."""
        return _MAX_POINTS[self]

    @property
    def label(self) -> str:
        """Return a human-readable label for text reports."""
        return _LABELS[self]


_MAX_POINTS: dict[Criterion, int] = {
    Criterion.VENDOR: 30,
    Criterion.RECENCY: 15,
    Criterion.ADOPTION: 15,
    Criterion.VULNERABILITY_CRITICAL: 20,
    Criterion.VULNERABILITY_HIGH: 10,
    Criterion.SIGNATURE: 10,
}

_LABELS: dict[Criterion, str] = {
    Criterion.VENDOR: "Vendor Trust",
    Criterion.RECENCY: "Recency",
    Criterion.ADOPTION: "Adoption",
    Criterion.VULNERABILITY_CRITICAL: "CVE (Critical)",
    Criterion.VULNERABILITY_HIGH: "CVE (High)",
    Criterion.SIGNATURE: "Signature",
}


# ---------------------------------------------------------------------------
# Decision
# ---------------------------------------------------------------------------


class Decision(Enum):
    """Admission disposition for an evaluated image."""

    AUTO_APPROVE = "auto-approve"
    NEEDS_HUMAN_REVIEW = "needs-human-review"
    AUTO_REJECT = "auto-reject"


# ---------------------------------------------------------------------------
# EvaluatorResult
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EvaluatorResult:
    """Points awarded for a single criterion.

    Attributes:
        criterion: The criterion scored.
        points: Awarded points, ``0 <= points <= max_points``.
        max_points: The criterion's point budget.
        detail: Human-readable justification, including why a signal
            source was degraded when it was.
    """

    criterion: Criterion
    points: int
    max_points: int
    detail: str

    def __post_init__(self) -> None:
        if not 0 <= self.points <= self.max_points:
            raise ValueError(
                f"{self.criterion.value}: points must be in "
                f"[0, {self.max_points}], got {self.points}"
            )

    @classmethod
    def award(cls, criterion: Criterion, points: int, detail: str) -> EvaluatorResult:
        """Build a result using the criterion's own point budget."""
        return cls(
            criterion=criterion,
            points=points,
            max_points=criterion.max_points,
            detail=detail,
        )


# ---------------------------------------------------------------------------
# Observations recorded alongside the score
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VulnerabilityCounts:
    """Vulnerability counts by severity from a scan."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "critical": self.critical,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
        }


@dataclass(frozen=True)
class ImageMetadata:
    """Image facts gathered during inspection. Any field may be unknown."""

    created: datetime | None = None
    size_mb: float | None = None
    layers: int | None = None
    digest: str | None = None


# ---------------------------------------------------------------------------
# EvaluationReport
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EvaluationReport:
    """Complete outcome of evaluating one image.

    Attributes:
        image: The parsed reference that was evaluated.
        raw_reference: The reference exactly as requested.
        timestamp: Evaluation time (UTC).
        results: One result per criterion, in ``Criterion`` order.
        total_score: Sum of all result points.
        max_score: Always 100.
        decision: The admission disposition.
        vendor_known: Whether the vendor trust check passed.
        vulnerability_counts: Unfiltered scan counts (zeros if no scan).
        image_metadata: Facts from image inspection.
    """

    image: ImageReference
    raw_reference: str
    timestamp: datetime
    results: tuple[EvaluatorResult, ...]
    total_score: int
    max_score: int
    decision: Decision
    vendor_known: bool
    vulnerability_counts: VulnerabilityCounts
    image_metadata: ImageMetadata

    def __post_init__(self) -> None:
        criteria = tuple(r.criterion for r in self.results)
        if criteria != tuple(Criterion):
            raise ValueError(
                f"Report needs exactly one result per criterion in order, got {criteria}"
            )
        if self.total_score != sum(r.points for r in self.results):
            raise ValueError("total_score must equal the sum of result points")

    def result_for(self, criterion: Criterion) -> EvaluatorResult:
        """Return the result recorded for ``criterion``."""
        for result in self.results:
            if result.criterion is criterion:
                return result
        raise KeyError(criterion)
