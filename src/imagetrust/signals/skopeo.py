"""Image inspection via ``skopeo inspect``.

Reads the manifest and config of a remote image without pulling it and
reports its creation time, digest, layer count and compressed size.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any

from imagetrust.core.reference import ImageReference
from imagetrust.exceptions import SignalSourceError
from imagetrust.signals.base import ImageInspector, InspectResult
from imagetrust.signals.process import DEFAULT_TIMEOUT, run_tool

logger = logging.getLogger(__name__)

# skopeo emits RFC 3339 with up to nanosecond precision.
_TIMESTAMP_PATTERN = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>Z|[+-]\d{2}:?\d{2})?$"
)


def parse_timestamp(value: str) -> datetime | None:
    """Parse an RFC 3339 timestamp into an aware UTC datetime.

    Fractional seconds beyond microseconds are truncated. A missing
    offset is read as UTC.

    Args:
        value: Timestamp string such as ``2024-05-01T12:00:00.123456789Z``.

    Returns:
        The parsed datetime, or None if the string is not a timestamp.
    """
    match = _TIMESTAMP_PATTERN.match(value.strip())
    if not match:
        return None
    text = match.group("base")
    if match.group("frac"):
        text += "." + match.group("frac")[:6].ljust(6, "0")
    tz = match.group("tz")
    if tz and tz != "Z":
        text += tz if ":" in tz else f"{tz[:3]}:{tz[3:]}"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _to_inspect_result(data: dict[str, Any]) -> InspectResult:
    """Convert skopeo's inspect JSON to an InspectResult."""
    created = data.get("Created")
    layers = data.get("Layers")
    layers_data = data.get("LayersData")

    size_bytes: int | None = None
    if isinstance(layers_data, list) and layers_data:
        sizes = [layer.get("Size") for layer in layers_data if isinstance(layer, dict)]
        if sizes and all(isinstance(s, int) for s in sizes):
            size_bytes = sum(sizes)

    return InspectResult(
        created=parse_timestamp(created) if isinstance(created, str) else None,
        digest=data.get("Digest") or None,
        layers=len(layers) if isinstance(layers, list) else None,
        size_bytes=size_bytes,
    )


class SkopeoInspector(ImageInspector):
    """Inspect remote images with skopeo."""

    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout

    async def inspect(self, ref: ImageReference) -> InspectResult | None:
        """Run ``skopeo inspect docker://<ref>``.

        Raises:
            SignalSourceError: If skopeo succeeds but prints invalid JSON.
        """
        output = await run_tool(
            ["skopeo", "inspect", f"docker://{ref.canonical}"],
            timeout=self._timeout,
        )
        if output is None:
            return None
        if output.returncode != 0:
            logger.warning(
                "skopeo inspect failed for %s: %s", ref, output.stderr.strip()[:200]
            )
            return None
        try:
            data = json.loads(output.stdout)
        except ValueError as exc:
            raise SignalSourceError(f"skopeo returned invalid JSON for {ref}") from exc
        if not isinstance(data, dict) or not data:
            return None
        return _to_inspect_result(data)
