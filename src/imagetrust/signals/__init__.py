"""External trust-signal sources for image evaluation.

Provides the capability interfaces the evaluation engine consumes and
default adapters for the command-line tools that implement them.

Public API::

    from imagetrust.signals import ImageInspector, VulnerabilityScanner, SignatureVerifier
    from imagetrust.signals.skopeo import SkopeoInspector
    from imagetrust.signals.trivy import TrivyScanner
    from imagetrust.signals.cosign import CosignVerifier
"""

from __future__ import annotations

from imagetrust.signals.base import (
    ImageInspector,
    InspectResult,
    SignatureStatus,
    SignatureVerifier,
    VulnerabilityScanner,
)

__all__ = [
    "ImageInspector",
    "InspectResult",
    "SignatureStatus",
    "SignatureVerifier",
    "VulnerabilityScanner",
]
