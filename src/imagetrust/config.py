"""Evaluation configuration: trusted vendors, thresholds, and timeouts.

``EvaluationConfig`` is an immutable value handed explicitly to the
evaluation entry point. Nothing in the scoring core reads ambient state;
the CLI builds a config from defaults, an optional YAML file, and the
``GITHUB_TOKEN`` environment variable, then passes it down.

Example YAML::

    trusted_registries:
      - registry.access.redhat.com
    trusted_namespaces:
      - hashicorp
      - bitnami
    recency_days: 60
    auto_approve_threshold: 85
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from imagetrust.exceptions import ConfigError

DEFAULT_TRUSTED_NAMESPACES: frozenset[str] = frozenset({
    # Red Hat ecosystem
    "redhat", "rhdh-community", "fedora", "openshift", "ubi",
    # HashiCorp
    "hashicorp",
    # Bitnami
    "bitnami", "bitnamilegacy",
    # CNCF projects
    "kyverno", "argoproj", "prometheus", "jetstack", "fluxcd", "envoyproxy",
    # Observability
    "grafana", "aquasecurity",
    # Infrastructure
    "calico", "cilium",
})

# Registries curated by the vendor itself; every image on them is trusted.
DEFAULT_TRUSTED_REGISTRIES: frozenset[str] = frozenset({
    "registry.access.redhat.com",
    "registry.redhat.io",
})

# Registries whose curation process stands in for community adoption.
DEFAULT_CURATED_REGISTRIES: frozenset[str] = frozenset({
    "registry.access.redhat.com",
    "registry.redhat.io",
})

MAX_SCORE: int = 100


@dataclass(frozen=True)
class EvaluationConfig:
    """Immutable configuration for a single image evaluation.

    Attributes:
        trusted_registries: Registry hosts whose whole catalog is trusted.
        trusted_namespaces: Vendor namespaces trusted on any registry.
        curated_registries: Registry hosts awarded full adoption credit
            without an API lookup.
        recency_days: Images published at most this many days ago get
            full recency credit.
        stale_days: Images older than this get no recency credit.
        auto_approve_threshold: Minimum total score for auto-approval.
        review_threshold: Minimum total score for human review; anything
            lower is rejected.
        timeout: Per-signal timeout in seconds for tool and API calls.
        certificate_identity_regexp: Identity pattern passed to cosign.
        certificate_oidc_issuer_regexp: OIDC issuer pattern passed to cosign.
        github_token: Optional token for the GitHub Packages API.
    """

    trusted_registries: frozenset[str] = DEFAULT_TRUSTED_REGISTRIES
    trusted_namespaces: frozenset[str] = DEFAULT_TRUSTED_NAMESPACES
    curated_registries: frozenset[str] = DEFAULT_CURATED_REGISTRIES
    recency_days: int = 90
    stale_days: int = 365
    auto_approve_threshold: int = 80
    review_threshold: int = 50
    timeout: float = 120.0
    certificate_identity_regexp: str = ".*"
    certificate_oidc_issuer_regexp: str = ".*"
    github_token: str | None = field(default=None, repr=False)

    def validate(self) -> None:
        """Raise ConfigError if any value is out of range.

        Rules:
        1. ``0 <= review_threshold <= auto_approve_threshold <= 100``.
        2. ``0 <= recency_days <= stale_days``.
        3. ``timeout > 0``.

        Raises:
            ConfigError: On the first violated rule.
        """
        for name in ("recency_days", "stale_days",
                     "auto_approve_threshold", "review_threshold"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(
                    f"'{name}' must be an integer, got {type(value).__name__}"
                )
        if not 0 <= self.review_threshold <= self.auto_approve_threshold <= MAX_SCORE:
            raise ConfigError(
                "Thresholds must satisfy 0 <= review_threshold <= "
                f"auto_approve_threshold <= {MAX_SCORE}, got "
                f"review={self.review_threshold}, "
                f"approve={self.auto_approve_threshold}"
            )
        if not 0 <= self.recency_days <= self.stale_days:
            raise ConfigError(
                "Recency windows must satisfy 0 <= recency_days <= stale_days, "
                f"got recency={self.recency_days}, stale={self.stale_days}"
            )
        if not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            raise ConfigError(f"'timeout' must be positive, got {self.timeout!r}")


_SET_KEYS = ("trusted_registries", "trusted_namespaces", "curated_registries")


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw YAML value to the type the config field expects."""
    if key in _SET_KEYS:
        if isinstance(value, str) or not isinstance(value, (list, tuple, set)):
            raise ConfigError(f"'{key}' must be a list of strings")
        return frozenset(str(v) for v in value)
    if key == "timeout":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"'timeout' must be a number, got {value!r}")
        return float(value)
    return value


def load_config(path: str | Path | None = None) -> EvaluationConfig:
    """Build an EvaluationConfig from defaults and an optional YAML file.

    Keys in the file override defaults; list keys replace, not extend,
    the default sets. ``github_token`` falls back to ``GITHUB_TOKEN``.

    Args:
        path: Path to a YAML mapping, or None for defaults only.

    Returns:
        A validated configuration.

    Raises:
        ConfigError: If the file is unreadable, not a mapping, has unknown
            keys, or yields invalid values.
    """
    overrides: dict[str, Any] = {}
    if path is not None:
        try:
            data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        known = {f.name for f in fields(EvaluationConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        overrides = {k: _coerce(k, v) for k, v in data.items()}

    config = replace(EvaluationConfig(), **overrides)
    if config.github_token is None and os.environ.get("GITHUB_TOKEN"):
        config = replace(config, github_token=os.environ["GITHUB_TOKEN"])
    config.validate()
    return config


def config_to_dict(config: EvaluationConfig) -> dict[str, Any]:
    """Return a JSON-serializable view of a config with secrets masked."""
    return {
        "trusted_registries": sorted(config.trusted_registries),
        "trusted_namespaces": sorted(config.trusted_namespaces),
        "curated_registries": sorted(config.curated_registries),
        "recency_days": config.recency_days,
        "stale_days": config.stale_days,
        "auto_approve_threshold": config.auto_approve_threshold,
        "review_threshold": config.review_threshold,
        "timeout": config.timeout,
        "certificate_identity_regexp": config.certificate_identity_regexp,
        "certificate_oidc_issuer_regexp": config.certificate_oidc_issuer_regexp,
        "github_token": "***" if config.github_token else None,
    }
