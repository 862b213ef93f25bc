"""Capability interfaces for external trust-signal sources.

Defines the abstract base classes the evaluation engine consumes
(``ImageInspector``, ``VulnerabilityScanner``, ``SignatureVerifier``)
and the value types they return. Concrete adapters wrap skopeo, trivy
and cosign; tests substitute in-memory fakes.

Every capability reports "unavailable" as a value (``None`` or
``SignatureStatus.UNAVAILABLE``) instead of raising, so that a missing
tool degrades one criterion rather than the whole evaluation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from imagetrust.core.reference import ImageReference

if TYPE_CHECKING:
    from imagetrust.core.scoring.models import VulnerabilityCounts


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InspectResult:
    """Image facts reported by a registry inspection.

    Attributes:
        created: Last-published timestamp (timezone-aware), if reported.
        digest: Manifest digest, if reported.
        layers: Number of layers, if reported.
        size_bytes: Sum of compressed layer sizes, if reported.
    """

    created: datetime | None = None
    digest: str | None = None
    layers: int | None = None
    size_bytes: int | None = None


class SignatureStatus(Enum):
    """Outcome of a signature verification attempt."""

    VERIFIED = "verified"
    NOT_VERIFIED = "not-verified"
    UNAVAILABLE = "unavailable"


# ---------------------------------------------------------------------------
# Capability ABCs
# ---------------------------------------------------------------------------


class ImageInspector(ABC):
    """Reads image metadata from the registry without pulling it."""

    @abstractmethod
    async def inspect(self, ref: ImageReference) -> InspectResult | None:
        """Inspect an image.

        Args:
            ref: The image to inspect.

        Returns:
            An InspectResult, or None if inspection is unavailable.
        """


class VulnerabilityScanner(ABC):
    """Counts known vulnerabilities in an image by severity."""

    @abstractmethod
    async def scan(self, ref: ImageReference) -> VulnerabilityCounts | None:
        """Scan an image.

        Args:
            ref: The image to scan.

        Returns:
            Counts per severity, or None if no scan result is available.
        """


class SignatureVerifier(ABC):
    """Checks whether an image carries a valid signature."""

    @abstractmethod
    async def verify(self, ref: ImageReference) -> SignatureStatus:
        """Verify an image signature.

        Args:
            ref: The image to verify.

        Returns:
            VERIFIED, NOT_VERIFIED, or UNAVAILABLE when verification
            cannot be attempted.
        """
