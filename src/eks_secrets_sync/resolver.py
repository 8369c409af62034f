"""Secret resolution from AWS Secrets Manager.

This module turns a secret identifier into a SecretRecord: it parses the
identifier, fetches the current payload and the tags of the secret, and
maps ``label/``, ``annotation/`` and ``kubernetes.io/cluster/`` tags onto
Kubernetes metadata.
"""

import json
import re
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError, NoRegionError
from icecream import ic

from eks_secrets_sync import console
from eks_secrets_sync.exceptions import (
    ConfigurationError,
    InvalidIdentifierError,
    PayloadFormatError,
    VaultAccessError,
)
from eks_secrets_sync.models import SecretIdentifier, SecretRecord

CURRENT_VERSION_STAGE = "AWSCURRENT"
PATH_SEPARATOR = "/"

_LABEL_TAG = re.compile(r"^label/(.*)")
_ANNOTATION_TAG = re.compile(r"^annotation/(.*)")
_CLUSTER_TAG = re.compile(r"^kubernetes\.io/cluster/(.*)")


def secrets_manager_client(session: Any, region: str | None = None) -> Any:
    """Create a Secrets Manager client from a boto3 session.

    Raises:
        ConfigurationError: If no region is configured anywhere.
        VaultAccessError: If the client cannot be created for another reason.

    """
    try:
        return session.client("secretsmanager", region_name=region)
    except NoRegionError as err:
        raise ConfigurationError("No region configured for Secrets Manager; set AWS_REGION") from err
    except BotoCoreError as err:
        raise VaultAccessError(f"Failed to create Secrets Manager client: {err}") from err


def parse_identifier(raw: str, segments: int = 3) -> SecretIdentifier:
    """Split a secret identifier into its path segments.

    Args:
        raw: Identifier such as ``prod/app/db-creds`` or ``app/db-creds``.
        segments: Number of segments the identifier must have (2 or 3).

    Returns:
        The parsed SecretIdentifier. The last two segments are always the
        namespace and the name, in that order.

    Raises:
        InvalidIdentifierError: If the segment count does not match or a
            segment is empty.

    """
    parts = raw.split(PATH_SEPARATOR)
    if len(parts) != segments:
        raise InvalidIdentifierError(
            f"Secret identifier '{raw}' has {len(parts)} segment(s), expected {segments}"
        )
    if not all(parts):
        raise InvalidIdentifierError(f"Secret identifier '{raw}' contains an empty segment")

    environment = parts[0] if segments == 3 else None
    namespace, name = parts[-2:]
    return SecretIdentifier(raw=raw, environment=environment, namespace=namespace, name=name)


def fetch_payload(secrets_client: Any, secret_id: str) -> dict[str, str]:
    """Fetch the current secret value and decode it into string data.

    A secret without a string value (a binary secret) yields an empty mapping.

    Args:
        secrets_client: boto3 Secrets Manager client.
        secret_id: The secret identifier.

    Returns:
        Mapping of keys to whitespace-trimmed values.

    Raises:
        VaultAccessError: If the GetSecretValue call fails.
        PayloadFormatError: If the value is not a JSON object of strings.

    """
    try:
        response = secrets_client.get_secret_value(SecretId=secret_id, VersionStage=CURRENT_VERSION_STAGE)
    except (BotoCoreError, ClientError) as err:
        raise VaultAccessError(f"Failed to get value of secret '{secret_id}': {err}") from err

    secret_string = response.get("SecretString") or ""
    if not secret_string:
        console.warning(f"Secret {console.highlight(secret_id)} has no string value, syncing empty data")
        return {}

    try:
        document = json.loads(secret_string)
    except json.JSONDecodeError as err:
        raise PayloadFormatError(f"Value of secret '{secret_id}' is not valid JSON: {err.msg}") from err

    if not isinstance(document, dict):
        raise PayloadFormatError(
            f"Value of secret '{secret_id}' must be a JSON object, got {type(document).__name__}"
        )

    string_data: dict[str, str] = {}
    for key, value in document.items():
        if not isinstance(value, str):
            raise PayloadFormatError(
                f"Value of key '{key}' in secret '{secret_id}' must be a string, got {type(value).__name__}"
            )
        string_data[key] = value.strip()

    ic(sorted(string_data))
    return string_data


def fetch_tags(secrets_client: Any, secret_id: str) -> list[dict[str, str]]:
    """Fetch the tags attached to a secret.

    Raises:
        VaultAccessError: If the DescribeSecret call fails.

    """
    try:
        response = secrets_client.describe_secret(SecretId=secret_id)
    except (BotoCoreError, ClientError) as err:
        raise VaultAccessError(f"Failed to describe secret '{secret_id}': {err}") from err

    tags: list[dict[str, str]] = response.get("Tags", [])
    ic(tags)
    return tags


def classify_tags(
    tags: list[dict[str, str]],
) -> tuple[dict[str, str], dict[str, str], list[str]]:
    """Map secret tags onto labels, annotations and cluster affiliations.

    Every tag is checked against all three prefixes; tags matching none
    of them are ignored.

    Args:
        tags: Tags as returned by DescribeSecret.

    Returns:
        A (labels, annotations, clusters) tuple.

    """
    labels: dict[str, str] = {}
    annotations: dict[str, str] = {}
    clusters: list[str] = []

    for tag in tags:
        key = tag.get("Key", "")
        value = tag.get("Value", "")
        if match := _LABEL_TAG.match(key):
            labels[match.group(1)] = value
        if match := _ANNOTATION_TAG.match(key):
            annotations[match.group(1)] = value
        if match := _CLUSTER_TAG.match(key):
            clusters.append(match.group(1))

    return labels, annotations, clusters


def resolve_secret(secrets_client: Any, raw: str, segments: int = 3) -> SecretRecord:
    """Resolve a secret identifier into a SecretRecord.

    The identifier is validated before any call to Secrets Manager is made.

    Args:
        secrets_client: boto3 Secrets Manager client.
        raw: The secret identifier received with the event.
        segments: Expected number of identifier segments.

    Returns:
        The resolved SecretRecord.

    """
    identifier = parse_identifier(raw, segments=segments)
    ic(identifier)

    console.step(f"Fetching secret {console.highlight(raw)} from Secrets Manager")
    string_data = fetch_payload(secrets_client, raw)
    labels, annotations, clusters = classify_tags(fetch_tags(secrets_client, raw))

    return SecretRecord(
        name=identifier.name,
        namespace=identifier.namespace,
        string_data=string_data,
        labels=labels,
        annotations=annotations,
        clusters=tuple(clusters),
        environment=identifier.environment,
    )
