"""Synchronization entry points.

``sync_secret`` runs one synchronization and reports failures as SyncError
subclasses; ``lambda_handler`` is the AWS Lambda entry point wrapping it.
"""

from typing import Any

import boto3
from icecream import ic

from eks_secrets_sync import console
from eks_secrets_sync.authenticator import ClusterClient, connect
from eks_secrets_sync.config import SyncConfig
from eks_secrets_sync.exceptions import InvalidIdentifierError, SyncError
from eks_secrets_sync.models import SyncOutcome
from eks_secrets_sync.resolver import resolve_secret, secrets_manager_client
from eks_secrets_sync.writer import write_secret

# Debug output is opt-in; lambda_handler and the CLI enable it on request
ic.disable()


def sync_secret(
    identifier: str,
    config: SyncConfig,
    session: boto3.session.Session | None = None,
) -> SyncOutcome:
    """Mirror a Secrets Manager secret into the configured cluster.

    The secret is resolved first; the cluster is only contacted once
    resolution succeeds, and the create or update call is the last step.

    Args:
        identifier: Secret identifier, ``[environment/]namespace/name``.
        config: Configuration of the current run.
        session: Base boto3 session. A new one is created if omitted.

    Returns:
        The outcome of the run.

    Raises:
        SyncError: If any step fails.

    """
    console.action(f"Got update event for {console.highlight(identifier)}")

    session = session or boto3.session.Session(region_name=config.region)
    secrets_client = secrets_manager_client(session, config.region)
    record = resolve_secret(secrets_client, identifier, segments=config.segments)

    if not record.targets_cluster(config.cluster_id):
        console.warning(
            f"Secret {console.highlight(identifier)} is not tagged for cluster "
            f"{console.highlight(config.cluster_id)}, skipping"
        )
        ic(record.clusters)
        return SyncOutcome.SKIPPED

    connection = connect(config, session)
    with ClusterClient(connection) as api:
        return write_secret(api, record)


def lambda_handler(event: Any, context: Any) -> None:
    """AWS Lambda entry point.

    Args:
        event: The secret identifier string.
        context: Lambda context object (unused).

    Raises:
        SyncError: If the synchronization fails, so the invocation is
            reported as failed and the event source may redeliver it.

    """
    try:
        if not isinstance(event, str):
            raise InvalidIdentifierError(f"Expected a secret identifier string, got {type(event).__name__}")

        config = SyncConfig.from_env()
        if config.debug:
            ic.enable()
        else:
            ic.disable()

        sync_secret(event, config)
    except SyncError as e:
        console.error(f"ERROR: {e}")
        raise
