"""Shared test fixtures for eks-secrets-sync tests."""

import base64
import json
from unittest.mock import MagicMock

import pytest
from kubernetes.client.rest import ApiException

from eks_secrets_sync.config import SyncConfig
from eks_secrets_sync.models import ClusterConnection, SecretRecord


class FakeCoreV1Api:
    """In-memory stand-in for CoreV1Api secret operations.

    Stores written objects by (namespace, name) and bumps the resource
    version on every write, like the API server does.
    """

    def __init__(self) -> None:
        self.secrets: dict[tuple[str, str], object] = {}
        self.calls: list[str] = []
        self._uid = 0

    def read_namespaced_secret(self, name, namespace):
        self.calls.append("read")
        try:
            return self.secrets[(namespace, name)]
        except KeyError:
            raise ApiException(status=404, reason="Not Found") from None

    def create_namespaced_secret(self, namespace, body):
        self.calls.append("create")
        self._uid += 1
        body.metadata.namespace = namespace
        body.metadata.uid = f"uid-{self._uid}"
        body.metadata.resource_version = "1"
        self.secrets[(namespace, body.metadata.name)] = body
        return body

    def replace_namespaced_secret(self, name, namespace, body):
        self.calls.append("replace")
        body.metadata.resource_version = str(int(body.metadata.resource_version) + 1)
        self.secrets[(namespace, name)] = body
        return body


@pytest.fixture
def fake_api():
    """In-memory Kubernetes secret API."""
    return FakeCoreV1Api()


@pytest.fixture
def sync_config():
    """Configuration for a three-segment run against a test cluster."""
    return SyncConfig(cluster_id="test-cluster", region="eu-west-1")


@pytest.fixture
def secret_payload():
    """Secret payload as stored in Secrets Manager."""
    return {"user": " admin ", "pass": "x"}


@pytest.fixture
def secret_tags():
    """Tags attached to the Secrets Manager secret."""
    return [
        {"Key": "label/team", "Value": "infra"},
        {"Key": "annotation/owner", "Value": "alice"},
        {"Key": "cost-center", "Value": "42"},
    ]


@pytest.fixture
def secrets_client(secret_payload, secret_tags):
    """Mock Secrets Manager client."""
    client = MagicMock()
    client.get_secret_value.return_value = {"SecretString": json.dumps(secret_payload)}
    client.describe_secret.return_value = {"Tags": secret_tags}
    return client


@pytest.fixture
def mock_session(secrets_client):
    """Mock boto3 session handing out the mock Secrets Manager client."""
    session = MagicMock()
    session.client.return_value = secrets_client
    return session


@pytest.fixture
def secret_record():
    """A resolved secret record."""
    return SecretRecord(
        name="db-creds",
        namespace="app",
        string_data={"user": "admin", "pass": "x"},
        labels={"team": "infra"},
        annotations={"owner": "alice"},
        environment="prod",
    )


@pytest.fixture
def cluster_connection():
    """Resolved cluster connection details."""
    return ClusterConnection(
        cluster_id="test-cluster",
        endpoint="https://ABCDEF.gr7.eu-west-1.eks.amazonaws.com",
        ca_data=b"-----BEGIN CERTIFICATE-----\nMIIC\n-----END CERTIFICATE-----\n",
        token="k8s-aws-v1.dGVzdA",
    )


@pytest.fixture
def eks_cluster_response(cluster_connection):
    """DescribeCluster response for the test cluster."""
    return {
        "cluster": {
            "name": "test-cluster",
            "endpoint": cluster_connection.endpoint,
            "certificateAuthority": {"data": base64.b64encode(cluster_connection.ca_data).decode()},
        }
    }
