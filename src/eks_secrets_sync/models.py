"""Data models for eks-secrets-sync.

This module provides type-safe data structures passed between the resolver,
authenticator and writer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple


class SyncOutcome(str, Enum):
    """Result of a single synchronization run.

    Inherits from str to allow direct use in log messages.
    """

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


class SecretIdentifier(NamedTuple):
    """A parsed Secrets Manager secret identifier.

    Attributes:
        raw: The identifier exactly as received.
        environment: Leading segment of a three-segment identifier, else None.
        namespace: Target Kubernetes namespace.
        name: Target Kubernetes secret name.

    """

    raw: str
    environment: str | None
    namespace: str
    name: str


@dataclass(frozen=True, slots=True)
class SecretRecord:
    """A resolved secret, ready to be written to Kubernetes.

    Attributes:
        name: The name of the Kubernetes secret.
        namespace: The Kubernetes namespace for the secret.
        string_data: Secret payload, keys mapped to trimmed string values.
        labels: Labels taken from ``label/`` tags.
        annotations: Annotations taken from ``annotation/`` tags.
        clusters: Cluster identifiers taken from ``kubernetes.io/cluster/`` tags.
        environment: Environment segment of the identifier, if any.

    """

    name: str
    namespace: str
    string_data: dict[str, str] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    clusters: tuple[str, ...] = ()
    environment: str | None = None

    def targets_cluster(self, cluster_id: str) -> bool:
        """Whether this secret should be synced to the given cluster.

        Secrets without any cluster affiliation tag are synced everywhere.
        """
        return not self.clusters or cluster_id in self.clusters


@dataclass(frozen=True, slots=True)
class ClusterConnection:
    """Connection details for an EKS control plane.

    Attributes:
        cluster_id: The EKS cluster name.
        endpoint: The API server URL.
        ca_data: Decoded certificate authority bundle (PEM bytes).
        token: Short-lived bearer token, never reused across runs.

    """

    cluster_id: str
    endpoint: str
    ca_data: bytes
    token: str = field(repr=False)
