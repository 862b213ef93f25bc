"""Shared fixtures for imagetrust tests.

Provides in-memory capability fakes so the engine and CLI can be
exercised without skopeo, trivy, cosign or network access.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest

from imagetrust.config import EvaluationConfig
from imagetrust.core.reference import ImageReference
from imagetrust.core.scoring import (
    Criterion,
    EvaluatorResult,
    ImageEvaluator,
    VulnerabilityCounts,
)
from imagetrust.core.scoring.adoption import AdoptionRegistry, AdoptionStrategy
from imagetrust.signals.base import (
    ImageInspector,
    InspectResult,
    SignatureStatus,
    SignatureVerifier,
    VulnerabilityScanner,
)

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeInspector(ImageInspector):
    def __init__(self, result: InspectResult | None = None, delay: float = 0.0) -> None:
        self.result = result
        self.delay = delay
        self.calls: list[ImageReference] = []

    async def inspect(self, ref: ImageReference) -> InspectResult | None:
        self.calls.append(ref)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.result


class FakeScanner(VulnerabilityScanner):
    def __init__(
        self,
        result: VulnerabilityCounts | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.result = result
        self.error = error
        self.delay = delay

    async def scan(self, ref: ImageReference) -> VulnerabilityCounts | None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


class FakeVerifier(SignatureVerifier):
    def __init__(
        self,
        status: SignatureStatus = SignatureStatus.UNAVAILABLE,
        delay: float = 0.0,
    ) -> None:
        self.status = status
        self.delay = delay

    async def verify(self, ref: ImageReference) -> SignatureStatus:
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.status


class FixedAdoption(AdoptionStrategy):
    """Strategy that awards a fixed number of adoption points."""

    def __init__(self, points: int) -> None:
        self.points = points

    @property
    def registry_name(self) -> str:
        return "fixed"

    def score(self, ref, data):
        return EvaluatorResult.award(Criterion.ADOPTION, self.points, "fixed adoption")


@pytest.fixture
def now() -> datetime:
    """A fixed evaluation time."""
    return NOW


@pytest.fixture
def config() -> EvaluationConfig:
    """Default configuration with a short timeout."""
    return EvaluationConfig(timeout=5.0)


@pytest.fixture
def fresh_inspect() -> InspectResult:
    """Inspection result for an image published 10 days before NOW."""
    return InspectResult(
        created=NOW - timedelta(days=10),
        digest="sha256:" + "a" * 64,
        layers=4,
        size_bytes=52_428_800,
    )


@pytest.fixture
def make_evaluator(config: EvaluationConfig) -> Callable[..., ImageEvaluator]:
    """Factory for evaluators wired to fakes.

    Every capability defaults to "unavailable". Pass ``adoption_points``
    to register a fixed adoption strategy as the default.
    """

    def _make(
        *,
        inspector: ImageInspector | None = None,
        scanner: VulnerabilityScanner | None = None,
        verifier: SignatureVerifier | None = None,
        adoption: AdoptionRegistry | None = None,
        adoption_points: int | None = None,
        cfg: EvaluationConfig | None = None,
    ) -> ImageEvaluator:
        if adoption is None and adoption_points is not None:
            adoption = AdoptionRegistry(default=FixedAdoption(adoption_points))
        return ImageEvaluator(
            cfg or config,
            inspector=inspector or FakeInspector(),
            scanner=scanner or FakeScanner(),
            verifier=verifier or FakeVerifier(),
            adoption=adoption or AdoptionRegistry(),
        )

    return _make


@pytest.fixture
def fakes() -> dict[str, type]:
    """Expose the fake capability classes to test modules."""
    return {
        "inspector": FakeInspector,
        "scanner": FakeScanner,
        "verifier": FakeVerifier,
        "adoption": FixedAdoption,
    }
