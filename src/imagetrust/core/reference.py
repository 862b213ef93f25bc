"""Container image reference parsing.

Decomposes a reference such as ``hashicorp/vault:1.15`` or
``registry.example.com/team/app@sha256:...`` into registry host,
namespace, repository and tag. Parsing never fails: malformed input
yields best-effort fields, and evaluators treat what is missing as
unknown.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_REGISTRY: str = "docker.io"
DEFAULT_TAG: str = "latest"

# Docker Hub serves single-segment official images ("nginx") from here.
OFFICIAL_NAMESPACE: str = "library"


@dataclass(frozen=True)
class ImageReference:
    """A parsed container image reference.

    Attributes:
        registry: Registry host. Never empty.
        namespace: Top-level path segment (the vendor namespace).
        repository: Remaining path below the namespace.
        tag: Image tag, ``latest`` when absent.
        digest: ``sha256:...`` pin, empty when absent.
    """

    registry: str
    namespace: str
    repository: str
    tag: str = DEFAULT_TAG
    digest: str = ""

    @property
    def path(self) -> str:
        """Return ``namespace/repository`` (or just the repository)."""
        if self.namespace:
            return f"{self.namespace}/{self.repository}"
        return self.repository

    @property
    def canonical(self) -> str:
        """Return the fully-qualified reference for external tools."""
        base = f"{self.registry}/{self.path}"
        if self.digest:
            return f"{base}@{self.digest}"
        return f"{base}:{self.tag}"

    def __str__(self) -> str:
        return self.canonical


def _is_registry_host(segment: str) -> bool:
    return "." in segment or ":" in segment or segment == "localhost"


def parse_reference(raw: str) -> ImageReference:
    """Parse an image reference string.

    The first ``/``-separated segment is taken as the registry host when
    the reference has two or more segments and that segment looks like a
    host (contains ``.`` or ``:``, or is ``localhost``), or when the
    reference has three or more segments. Otherwise the registry defaults
    to ``docker.io``.

    Args:
        raw: The reference as supplied by the requester.

    Returns:
        An ImageReference. Fields the input does not supply are defaulted
        or left empty.
    """
    remainder = raw.strip()

    digest = ""
    if "@" in remainder:
        remainder, digest = remainder.split("@", 1)

    segments = [s for s in remainder.split("/") if s]
    if len(segments) >= 3 or (len(segments) == 2 and _is_registry_host(segments[0])):
        registry, path = segments[0], segments[1:]
    else:
        registry, path = DEFAULT_REGISTRY, segments

    tag = ""
    if path and ":" in path[-1]:
        last, tag = path[-1].rsplit(":", 1)
        path = path[:-1] + ([last] if last else [])

    if len(path) >= 2:
        namespace, repository = path[0], "/".join(path[1:])
    elif len(path) == 1:
        namespace = OFFICIAL_NAMESPACE if registry == DEFAULT_REGISTRY else ""
        repository = path[0]
    else:
        namespace, repository = "", ""

    return ImageReference(
        registry=registry or DEFAULT_REGISTRY,
        namespace=namespace,
        repository=repository,
        tag=tag or DEFAULT_TAG,
        digest=digest,
    )
