"""imagetrust: Trust scoring for container images entering a registry allowlist."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
