#!/usr/bin/env python
"""Command-line interface for eks-secrets-sync.

This module provides a CLI entry point for running a single synchronization
by hand, with the same configuration the Lambda function reads from its
environment.
"""

import os
import sys

import boto3
import click
from icecream import ic

from eks_secrets_sync import __version__, console
from eks_secrets_sync.config import (
    ENV_CLUSTER_ID,
    ENV_CLUSTER_REGION,
    ENV_REGION,
    ENV_ROLE,
    ENV_SEGMENTS,
    SyncConfig,
)
from eks_secrets_sync.exceptions import SyncError
from eks_secrets_sync.handler import sync_secret
from eks_secrets_sync.resolver import parse_identifier, resolve_secret, secrets_manager_client
from eks_secrets_sync.writer import render_manifest


def preview_secret(secret_id: str, config: SyncConfig) -> None:
    """Resolve a secret and print the manifest that would be written.

    The cluster is not contacted and secret values are redacted.

    Args:
        secret_id: The secret identifier.
        config: Configuration of the run.

    """
    session = boto3.session.Session(region_name=config.region)
    secrets_client = secrets_manager_client(session, config.region)
    record = resolve_secret(secrets_client, secret_id, segments=config.segments)
    if not record.targets_cluster(config.cluster_id):
        console.warning(f"Secret is not tagged for cluster {console.highlight(config.cluster_id)}")
    console.plain(render_manifest(record))


@click.command(help="Mirror an AWS Secrets Manager secret into an EKS cluster")
@click.argument("secret_id", required=False)
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option("--cluster", required=False, help=f"target EKS cluster name [env: {ENV_CLUSTER_ID}]")
@click.option("--region", required=False, help=f"Secrets Manager region [env: {ENV_REGION}]")
@click.option("--cluster-region", required=False, help=f"EKS cluster region [env: {ENV_CLUSTER_REGION}]")
@click.option("--role", required=False, help=f"role ARN to assume for the cluster [env: {ENV_ROLE}]")
@click.option(
    "--segments",
    required=False,
    type=click.IntRange(2, 3),
    help=f"number of segments in the secret identifier [env: {ENV_SEGMENTS}]",
)
@click.option("--dry-run", required=False, is_flag=True, help="print the resulting manifest, do not write it")
def cli(
    secret_id: str | None,
    version: bool,
    debug: bool,
    cluster: str | None,
    region: str | None,
    cluster_region: str | None,
    role: str | None,
    segments: int | None,
    dry_run: bool,
) -> None:
    """Process CLI arguments and run the synchronization.

    Args:
        secret_id: Secret identifier, ``[environment/]namespace/name``.
        version: Print version and exit.
        debug: Enable debug output.
        cluster: Target EKS cluster name.
        region: Secrets Manager region.
        cluster_region: EKS cluster region.
        role: Role ARN to assume for cluster access.
        segments: Expected number of identifier segments.
        dry_run: Only print the manifest that would be written.

    """
    if version:
        click.echo(__version__)
        return

    if secret_id is None:
        raise click.UsageError("Missing argument 'SECRET_ID'.")

    env = dict(os.environ)
    overrides = {
        ENV_CLUSTER_ID: cluster,
        ENV_REGION: region,
        ENV_CLUSTER_REGION: cluster_region,
        ENV_ROLE: role,
        ENV_SEGMENTS: str(segments) if segments is not None else None,
    }
    env.update({key: value for key, value in overrides.items() if value is not None})

    try:
        config = SyncConfig.from_env(env)
        if debug or config.debug:
            ic.enable()
        else:
            ic.disable()
        ic(config)

        if dry_run:
            preview_secret(secret_id, config)
            return

        outcome = sync_secret(secret_id, config)
    except SyncError as e:
        console.error(str(e))
        sys.exit(1)

    identifier = parse_identifier(secret_id, segments=config.segments)
    console.summary_panel(
        "Secret Synchronized",
        {
            "Name": identifier.name,
            "Namespace": identifier.namespace,
            "Cluster": config.cluster_id,
            "Result": outcome.value,
        },
    )


if __name__ == "__main__":
    cli()
