"""Runtime configuration for eks-secrets-sync.

The configuration is an explicit value built once at the start of each run
and passed down to every step; nothing is kept at module level.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from eks_secrets_sync.exceptions import ConfigurationError

# Environment variable names, as set on the Lambda function
ENV_REGION = "AWS_REGION"
ENV_CLUSTER_REGION = "EKSRegion"
ENV_ROLE = "Role"
ENV_CLUSTER_ID = "ClusterId"
ENV_SEGMENTS = "SecretPathSegments"
ENV_DEBUG = "Debug"

DEFAULT_SEGMENTS = 3
_SUPPORTED_SEGMENTS = (2, 3)
_TRUTHY = {"1", "true", "yes", "on"}


def _clean(value: str | None) -> str | None:
    """Return the stripped value, or None if it is unset or blank."""
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Settings for a single synchronization run.

    Attributes:
        cluster_id: Name of the target EKS cluster.
        region: Region of the Secrets Manager secret.
        cluster_region: Explicit region of the cluster, if different.
        role_arn: Role to assume for EKS calls and the cluster token.
        segments: Expected number of identifier path segments (2 or 3).
        debug: Whether icecream debug output is enabled.

    """

    cluster_id: str
    region: str | None = None
    cluster_region: str | None = None
    role_arn: str | None = None
    segments: int = DEFAULT_SEGMENTS
    debug: bool = False

    def __post_init__(self) -> None:
        if not self.cluster_id:
            raise ConfigurationError(f"Target cluster is not configured; set {ENV_CLUSTER_ID}")
        if self.segments not in _SUPPORTED_SEGMENTS:
            raise ConfigurationError(f"Secret path segments must be 2 or 3, got {self.segments}")

    @property
    def effective_cluster_region(self) -> str:
        """The region used for EKS and STS calls.

        Raises:
            ConfigurationError: If neither region is configured.

        """
        region = self.cluster_region or self.region
        if not region:
            raise ConfigurationError(f"No region configured; set {ENV_REGION} or {ENV_CLUSTER_REGION}")
        return region

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SyncConfig":
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            A validated SyncConfig.

        Raises:
            ConfigurationError: If a variable is missing or malformed.

        """
        env = os.environ if environ is None else environ

        raw_segments = _clean(env.get(ENV_SEGMENTS))
        try:
            segments = int(raw_segments) if raw_segments else DEFAULT_SEGMENTS
        except ValueError as err:
            raise ConfigurationError(f"{ENV_SEGMENTS} must be an integer, got '{raw_segments}'") from err

        return cls(
            cluster_id=_clean(env.get(ENV_CLUSTER_ID)) or "",
            region=_clean(env.get(ENV_REGION)),
            cluster_region=_clean(env.get(ENV_CLUSTER_REGION)),
            role_arn=_clean(env.get(ENV_ROLE)),
            segments=segments,
            debug=(_clean(env.get(ENV_DEBUG)) or "").lower() in _TRUTHY,
        )
