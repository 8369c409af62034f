"""Custom exceptions for eks-secrets-sync.

This module defines the exception hierarchy used throughout the application.
Every failure of a synchronization run is reported as one of these, so the
caller (the Lambda runtime or the CLI) decides whether to abort or retry.
"""


class SyncError(Exception):
    """Base exception for all eks-secrets-sync errors.

    All custom exceptions in this package inherit from this class,
    allowing callers to catch every synchronization failure with a single
    except clause.
    """

    pass


class ConfigurationError(SyncError):
    """Raised when the runtime configuration is missing or invalid.

    This can occur when:
    - The target cluster identifier is not set
    - No region can be resolved for the cluster
    - The secret path segment count is not 2 or 3
    """

    pass


class InvalidIdentifierError(SyncError):
    """Raised when a secret identifier has the wrong number of path segments."""

    pass


class VaultAccessError(SyncError):
    """Raised when a Secrets Manager call fails.

    This can occur when:
    - The secret does not exist
    - The caller lacks secretsmanager:GetSecretValue or DescribeSecret
    - The service endpoint is unreachable
    """

    pass


class PayloadFormatError(SyncError):
    """Raised when the secret payload is not a JSON object of strings."""

    pass


class ClusterAuthError(SyncError):
    """Raised when the cluster descriptor or bearer token cannot be obtained.

    This can occur when:
    - The EKS cluster does not exist in the resolved region
    - The configured role cannot be assumed
    - The certificate authority data is not valid base64
    """

    pass


class ClusterReadError(SyncError):
    """Raised when reading the target secret fails for a reason other than not-found."""

    pass


class ClusterWriteError(SyncError):
    """Raised when creating or replacing the target secret fails."""

    pass
