"""Kubernetes secret create-or-update.

This module writes a SecretRecord to the cluster as a ``v1/Secret``: it is
created when absent and overwritten in place when present.
"""

from typing import Any

import yaml
from icecream import ic
from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import MaxRetryError

from eks_secrets_sync import console
from eks_secrets_sync.exceptions import ClusterReadError, ClusterWriteError
from eks_secrets_sync.models import SecretRecord, SyncOutcome

_NOT_FOUND = 404
_REDACTED = "<redacted>"


def _describe_failure(err: ApiException | MaxRetryError) -> str:
    """Return a short description of a Kubernetes API failure."""
    if isinstance(err, ApiException):
        return f"({err.status}) {err.reason}"
    return f"failed to connect to the Kubernetes cluster: {err.reason}"


def build_secret(record: SecretRecord) -> client.V1Secret:
    """Build a new Secret object from a record.

    Args:
        record: The resolved secret.

    Returns:
        A V1Secret with the record's name, labels, annotations and string data.

    """
    return client.V1Secret(
        api_version="v1",
        kind="Secret",
        metadata=client.V1ObjectMeta(
            name=record.name,
            namespace=record.namespace,
            labels=dict(record.labels),
            annotations=dict(record.annotations),
        ),
        string_data=dict(record.string_data),
    )


def render_manifest(record: SecretRecord, *, redact: bool = True) -> str:
    """Render the Secret that would be written for a record as YAML.

    Args:
        record: The resolved secret.
        redact: Replace every value with a placeholder. Must be passed as a
            keyword argument.

    Returns:
        The manifest as a YAML document.

    """
    with client.ApiClient() as api_client:
        manifest: dict[str, Any] = api_client.sanitize_for_serialization(build_secret(record))
    if redact and "stringData" in manifest:
        manifest["stringData"] = {key: _REDACTED for key in manifest["stringData"]}
    return yaml.safe_dump(manifest, sort_keys=False)


def create_secret(api: client.CoreV1Api, record: SecretRecord) -> SyncOutcome:
    """Create the Secret in the record's namespace.

    Raises:
        ClusterWriteError: If the create call fails.

    """
    try:
        api.create_namespaced_secret(namespace=record.namespace, body=build_secret(record))
    except (ApiException, MaxRetryError) as err:
        raise ClusterWriteError(
            f"Failed to create secret {record.name} in namespace {record.namespace}: {_describe_failure(err)}"
        ) from err

    console.success(f"Successfully created secret {record.name}, namespace {record.namespace}")
    return SyncOutcome.CREATED


def update_secret(api: client.CoreV1Api, record: SecretRecord, existing: client.V1Secret) -> SyncOutcome:
    """Overwrite an existing Secret with the record's content.

    Name, labels, annotations and payload are replaced; the namespace,
    resource version and other server-managed fields of the fetched object
    are kept, so a concurrent modification is rejected by the API server.

    Args:
        api: CoreV1Api bound to the target cluster.
        record: The resolved secret.
        existing: The Secret as read from the cluster.

    Returns:
        SyncOutcome.UPDATED

    Raises:
        ClusterWriteError: If the replace call fails.

    """
    existing.metadata.name = record.name
    existing.metadata.labels = dict(record.labels)
    existing.metadata.annotations = dict(record.annotations)
    # Keys removed from the payload must disappear from the mirror as well
    existing.data = None
    existing.string_data = dict(record.string_data)

    namespace = existing.metadata.namespace
    try:
        api.replace_namespaced_secret(name=record.name, namespace=namespace, body=existing)
    except (ApiException, MaxRetryError) as err:
        raise ClusterWriteError(
            f"Failed to update secret {record.name} in namespace {namespace}: {_describe_failure(err)}"
        ) from err

    console.success(f"Successfully updated secret {record.name}, namespace {namespace}")
    return SyncOutcome.UPDATED


def write_secret(api: client.CoreV1Api, record: SecretRecord) -> SyncOutcome:
    """Create or update the Secret described by a record.

    A not-found answer to the initial read is the signal to create; any
    other read failure is fatal.

    Args:
        api: CoreV1Api bound to the target cluster.
        record: The resolved secret.

    Returns:
        SyncOutcome.CREATED or SyncOutcome.UPDATED.

    Raises:
        ClusterReadError: If the secret cannot be read.
        ClusterWriteError: If the secret cannot be created or updated.

    """
    try:
        existing = api.read_namespaced_secret(name=record.name, namespace=record.namespace)
    except ApiException as err:
        if err.status == _NOT_FOUND:
            console.step(f"Secret {console.highlight(f'{record.namespace}/{record.name}')} not found, creating it")
            return create_secret(api, record)
        raise ClusterReadError(
            f"Failed to read secret {record.name} in namespace {record.namespace}: {_describe_failure(err)}"
        ) from err
    except MaxRetryError as err:
        raise ClusterReadError(
            f"Failed to read secret {record.name} in namespace {record.namespace}: {_describe_failure(err)}"
        ) from err

    ic(existing.metadata.resource_version)
    return update_secret(api, record, existing)
