"""Registry-specific community adoption scoring.

Each public registry exposes different adoption signals, so adoption is
scored by an :class:`AdoptionStrategy` chosen by registry host from an
:class:`AdoptionRegistry`. Strategies split into an async ``fetch`` that
talks to the registry API and a pure ``score`` over what was fetched, so
the engine can bound the I/O with a timeout and still score a missing
response.

Fallback points when the API cannot be reached differ by registry:

- Docker Hub: 0.
- Quay: 5.
- GitHub Packages: 5 (an unreachable API counts as zero versions).
- Curated vendor registries: 15, no API call.
- Unrecognized hosts: 0.

Usage::

    registry = default_adoption_registry(config)
    strategy = registry.strategy_for(ref.registry)
    data = await strategy.fetch(ref)
    result = strategy.score(ref, data)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from imagetrust.config import EvaluationConfig
from imagetrust.core.reference import ImageReference
from imagetrust.core.scoring.models import Criterion, EvaluatorResult
from imagetrust.signals.http_client import DEFAULT_TIMEOUT, fetch_json

AdoptionData = dict[str, Any] | list[Any] | None

DOCKER_HUB_API: str = "https://hub.docker.com/v2/repositories/{namespace}/{repository}/"
QUAY_API: str = "https://quay.io/api/v1/repository/{namespace}/{repository}"
GITHUB_PACKAGES_API: str = (
    "https://api.github.com/orgs/{namespace}/packages/container/{repository}/versions"
)


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _award(points: int, detail: str) -> EvaluatorResult:
    return EvaluatorResult.award(Criterion.ADOPTION, points, detail)


# ---------------------------------------------------------------------------
# Strategy base
# ---------------------------------------------------------------------------


class AdoptionStrategy(ABC):
    """Abstract base class for per-registry adoption scoring."""

    @property
    @abstractmethod
    def registry_name(self) -> str:
        """Human-readable registry name used in result details."""

    async def fetch(self, ref: ImageReference) -> AdoptionData:
        """Fetch adoption metadata for ``ref``.

        The default performs no I/O and returns None.

        Returns:
            Registry-specific data, or an empty/None value when the API
            is unavailable.
        """
        return None

    @abstractmethod
    def score(self, ref: ImageReference, data: AdoptionData) -> EvaluatorResult:
        """Score fetched metadata. Must accept None for "unavailable"."""


# ---------------------------------------------------------------------------
# Concrete strategies
# ---------------------------------------------------------------------------


class DockerHubStrategy(AdoptionStrategy):
    """Pull-count tiers from the Docker Hub repositories API."""

    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout

    @property
    def registry_name(self) -> str:
        return "Docker Hub"

    async def fetch(self, ref: ImageReference) -> AdoptionData:
        url = DOCKER_HUB_API.format(namespace=ref.namespace, repository=ref.repository)
        return await fetch_json(url, timeout=self._timeout)

    def score(self, ref: ImageReference, data: AdoptionData) -> EvaluatorResult:
        if not data or not isinstance(data, dict):
            return _award(0, f"Docker Hub API unavailable for {ref.path}")

        pulls = _as_int(data.get("pull_count"))
        stars = _as_int(data.get("star_count"))
        summary = f"Docker Hub: {pulls} pulls, {stars} stars"
        if pulls >= 1_000_000:
            return _award(15, f"{summary} (highly adopted)")
        if pulls >= 100_000:
            return _award(10, f"{summary} (well adopted)")
        if pulls >= 10_000:
            return _award(5, f"{summary} (moderately adopted)")
        return _award(0, f"{summary} (low adoption)")


class QuayStrategy(AdoptionStrategy):
    """Star and tag counts from the Quay repository API."""

    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout

    @property
    def registry_name(self) -> str:
        return "Quay.io"

    async def fetch(self, ref: ImageReference) -> AdoptionData:
        url = QUAY_API.format(namespace=ref.namespace, repository=ref.repository)
        return await fetch_json(url, timeout=self._timeout)

    def score(self, ref: ImageReference, data: AdoptionData) -> EvaluatorResult:
        if not data or not isinstance(data, dict):
            return _award(5, "Quay.io API unavailable, partial score awarded")

        stars = _as_int(data.get("star_count"))
        tags = data.get("tags")
        tag_count = len(tags) if isinstance(tags, (dict, list)) else 0
        summary = f"Quay.io: {stars} stars, {tag_count} tags"
        if stars >= 10 or tag_count >= 20:
            return _award(15, f"{summary} (well adopted)")
        if stars >= 3 or tag_count >= 5:
            return _award(10, f"{summary} (moderately adopted)")
        return _award(5, f"{summary} (limited adoption data)")


class GitHubPackagesStrategy(AdoptionStrategy):
    """Published version counts from the GitHub Packages API."""

    def __init__(self, *, token: str | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._token = token
        self._timeout = timeout

    @property
    def registry_name(self) -> str:
        return "GHCR"

    async def fetch(self, ref: ImageReference) -> AdoptionData:
        url = GITHUB_PACKAGES_API.format(namespace=ref.namespace, repository=ref.repository)
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return await fetch_json(url, params={"per_page": "100"}, headers=headers,
                                timeout=self._timeout)

    def score(self, ref: ImageReference, data: AdoptionData) -> EvaluatorResult:
        versions = len(data) if isinstance(data, list) else 0
        if versions >= 50:
            return _award(15, f"GHCR: {versions} versions (actively maintained)")
        if versions >= 10:
            return _award(10, f"GHCR: {versions} versions")
        return _award(5, f"GHCR: {versions} versions (limited history)")


class CuratedRegistryStrategy(AdoptionStrategy):
    """Flat full credit for vendor-curated registries."""

    def __init__(self, host: str) -> None:
        self._host = host

    @property
    def registry_name(self) -> str:
        return self._host

    def score(self, ref: ImageReference, data: AdoptionData) -> EvaluatorResult:
        return _award(15, f"{self._host} is a curated vendor registry, adoption verified")


class UnknownRegistryStrategy(AdoptionStrategy):
    """Default for hosts without an adoption heuristic."""

    @property
    def registry_name(self) -> str:
        return "unknown"

    def score(self, ref: ImageReference, data: AdoptionData) -> EvaluatorResult:
        return _award(0, f"Unknown registry type {ref.registry}, cannot assess adoption")


# ---------------------------------------------------------------------------
# Registry of strategies
# ---------------------------------------------------------------------------


class AdoptionRegistry:
    """Maps registry hosts to adoption strategies.

    Hosts without a registered strategy resolve to the default strategy.
    New registries are supported by registering a strategy, not by
    modifying existing ones.
    """

    def __init__(self, default: AdoptionStrategy | None = None) -> None:
        self._strategies: dict[str, AdoptionStrategy] = {}
        self._default = default or UnknownRegistryStrategy()

    def register(self, host: str, strategy: AdoptionStrategy) -> None:
        """Register (or replace) the strategy for ``host``."""
        self._strategies[host] = strategy

    def strategy_for(self, host: str) -> AdoptionStrategy:
        """Return the strategy for ``host``, or the default."""
        return self._strategies.get(host, self._default)

    @property
    def hosts(self) -> list[str]:
        """Return registered hosts in registration order."""
        return list(self._strategies)


def default_adoption_registry(config: EvaluationConfig) -> AdoptionRegistry:
    """Build the standard host-to-strategy mapping for ``config``.

    Curated registries are registered last, so they always get the flat
    curated score even when they shadow a built-in host.
    """
    registry = AdoptionRegistry()
    docker_hub = DockerHubStrategy(timeout=config.timeout)
    for host in ("docker.io", "index.docker.io", "registry-1.docker.io"):
        registry.register(host, docker_hub)
    registry.register("quay.io", QuayStrategy(timeout=config.timeout))
    registry.register(
        "ghcr.io",
        GitHubPackagesStrategy(token=config.github_token, timeout=config.timeout),
    )
    for host in sorted(config.curated_registries):
        registry.register(host, CuratedRegistryStrategy(host))
    return registry
