"""Signature verification via ``cosign verify``.

Verification is keyless and deliberately permissive by default: any
Sigstore certificate identity and OIDC issuer is accepted, so the check
asserts that a valid signature exists, not who produced it.
"""

from __future__ import annotations

import logging

from imagetrust.core.reference import ImageReference
from imagetrust.signals.base import SignatureStatus, SignatureVerifier
from imagetrust.signals.process import DEFAULT_TIMEOUT, run_tool

logger = logging.getLogger(__name__)


class CosignVerifier(SignatureVerifier):
    """Verify image signatures with cosign."""

    def __init__(
        self,
        *,
        identity_regexp: str = ".*",
        issuer_regexp: str = ".*",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._identity_regexp = identity_regexp
        self._issuer_regexp = issuer_regexp
        self._timeout = timeout

    async def verify(self, ref: ImageReference) -> SignatureStatus:
        output = await run_tool(
            [
                "cosign", "verify",
                f"--certificate-identity-regexp={self._identity_regexp}",
                f"--certificate-oidc-issuer-regexp={self._issuer_regexp}",
                ref.canonical,
            ],
            timeout=self._timeout,
        )
        if output is None:
            return SignatureStatus.UNAVAILABLE
        if output.returncode == 0:
            return SignatureStatus.VERIFIED
        logger.debug("cosign verify rejected %s: %s", ref, output.stderr.strip()[:200])
        return SignatureStatus.NOT_VERIFIED
