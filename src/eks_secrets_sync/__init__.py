"""eks-secrets-sync: mirror AWS Secrets Manager secrets into EKS.

This package provides a one-shot synchronization, meant to run as an AWS
Lambda function on secret-change events, that writes a Secrets Manager
secret into an EKS cluster as a Kubernetes Secret.

Example usage:
    from eks_secrets_sync import SyncConfig, sync_secret

    config = SyncConfig.from_env()
    sync_secret("prod/app/db-creds", config)
"""

__version__ = "0.1.0"

from eks_secrets_sync.config import SyncConfig
from eks_secrets_sync.exceptions import (
    ClusterAuthError,
    ClusterReadError,
    ClusterWriteError,
    ConfigurationError,
    InvalidIdentifierError,
    PayloadFormatError,
    SyncError,
    VaultAccessError,
)
from eks_secrets_sync.handler import lambda_handler, sync_secret
from eks_secrets_sync.models import ClusterConnection, SecretIdentifier, SecretRecord, SyncOutcome

__all__ = [
    # Version
    "__version__",
    # Entry points
    "lambda_handler",
    "sync_secret",
    # Models
    "SyncConfig",
    "ClusterConnection",
    "SecretIdentifier",
    "SecretRecord",
    "SyncOutcome",
    # Exceptions
    "SyncError",
    "ConfigurationError",
    "InvalidIdentifierError",
    "VaultAccessError",
    "PayloadFormatError",
    "ClusterAuthError",
    "ClusterReadError",
    "ClusterWriteError",
]
