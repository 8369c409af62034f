"""Tests for cli.py module."""

from unittest.mock import patch

import pytest
import yaml
from botocore.exceptions import NoRegionError
from click.testing import CliRunner

from eks_secrets_sync import __version__
from eks_secrets_sync.cli import cli
from eks_secrets_sync.exceptions import VaultAccessError
from eks_secrets_sync.models import SyncOutcome

_ENV = {
    "AWS_REGION": "eu-west-1",
    "ClusterId": "test-cluster",
    "EKSRegion": "",
    "Role": "",
    "SecretPathSegments": "",
    "Debug": "",
}


@pytest.fixture
def runner():
    """Click test runner."""
    return CliRunner()


class TestCliVersion:
    """Tests for version command."""

    def test_version_flag(self, runner):
        """Test --version flag prints version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_version_short_flag(self, runner):
        """Test -v flag prints version."""
        result = runner.invoke(cli, ["-v"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestCliHelp:
    """Tests for help output."""

    def test_help_flag(self, runner):
        """Test --help flag shows help text."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Mirror an AWS Secrets Manager secret" in result.output
        for option in ("--cluster", "--region", "--cluster-region", "--role", "--segments", "--dry-run"):
            assert option in result.output

    def test_missing_secret_id(self, runner):
        """Test the secret identifier is required."""
        result = runner.invoke(cli, [], env=_ENV)

        assert result.exit_code == 2
        assert "SECRET_ID" in result.output


class TestCliSync:
    """Tests for running a synchronization."""

    def test_sync_success(self, runner):
        """Test a successful run prints a summary."""
        with patch("eks_secrets_sync.cli.sync_secret") as mock_sync:
            mock_sync.return_value = SyncOutcome.CREATED

            result = runner.invoke(cli, ["prod/app/db-creds"], env=_ENV)

        assert result.exit_code == 0
        assert "Secret Synchronized" in result.output
        assert "db-creds" in result.output
        assert "created" in result.output

        identifier, config = mock_sync.call_args.args
        assert identifier == "prod/app/db-creds"
        assert config.cluster_id == "test-cluster"

    def test_options_override_environment(self, runner):
        """Test command-line options take priority over the environment."""
        with patch("eks_secrets_sync.cli.sync_secret") as mock_sync:
            mock_sync.return_value = SyncOutcome.UPDATED

            result = runner.invoke(
                cli,
                [
                    "app/db-creds",
                    "--cluster",
                    "other-cluster",
                    "--cluster-region",
                    "us-east-1",
                    "--role",
                    "arn:aws:iam::123456789012:role/eks-sync",
                    "--segments",
                    "2",
                ],
                env=_ENV,
            )

        assert result.exit_code == 0
        config = mock_sync.call_args.args[1]
        assert config.cluster_id == "other-cluster"
        assert config.cluster_region == "us-east-1"
        assert config.role_arn == "arn:aws:iam::123456789012:role/eks-sync"
        assert config.segments == 2

    def test_sync_failure_exits_with_error(self, runner):
        """Test a failed run exits with status 1."""
        with patch("eks_secrets_sync.cli.sync_secret") as mock_sync:
            mock_sync.side_effect = VaultAccessError("Failed to get value of secret 'prod/app/db-creds'")

            result = runner.invoke(cli, ["prod/app/db-creds"], env=_ENV)

        assert result.exit_code == 1
        assert "Failed to get value of secret" in result.output

    def test_missing_cluster(self, runner):
        """Test a missing cluster identifier exits with status 1."""
        with patch("eks_secrets_sync.cli.sync_secret") as mock_sync:
            result = runner.invoke(cli, ["prod/app/db-creds"], env={**_ENV, "ClusterId": ""})

        assert result.exit_code == 1
        mock_sync.assert_not_called()

    def test_invalid_segments_option(self, runner):
        """Test out-of-range segment counts are rejected by click."""
        result = runner.invoke(cli, ["prod/app/db-creds", "--segments", "4"], env=_ENV)

        assert result.exit_code == 2

    def test_no_region_exits_with_error(self, runner):
        """Test a run without a Secrets Manager region exits with status 1."""
        with patch("boto3.session.Session") as mock_session:
            mock_session.return_value.client.side_effect = NoRegionError()

            result = runner.invoke(
                cli, ["prod/app/db-creds", "--cluster-region", "us-east-1"], env={**_ENV, "AWS_REGION": ""}
            )

        assert result.exit_code == 1
        assert "No region configured" in result.output


class TestCliDryRun:
    """Tests for dry-run mode."""

    def test_dry_run_prints_redacted_manifest(self, runner, secret_record):
        """Test --dry-run prints the manifest without contacting the cluster."""
        with (
            patch("eks_secrets_sync.cli.boto3"),
            patch("eks_secrets_sync.cli.resolve_secret") as mock_resolve,
            patch("eks_secrets_sync.cli.sync_secret") as mock_sync,
        ):
            mock_resolve.return_value = secret_record

            result = runner.invoke(cli, ["prod/app/db-creds", "--dry-run"], env=_ENV)

        assert result.exit_code == 0
        mock_sync.assert_not_called()
        manifest = yaml.safe_load(result.output)
        assert manifest["metadata"]["name"] == "db-creds"
        assert manifest["stringData"] == {"user": "<redacted>", "pass": "<redacted>"}
        assert "admin" not in result.output
