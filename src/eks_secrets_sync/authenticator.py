"""EKS cluster authentication.

This module resolves the control plane of the target EKS cluster and builds
a Kubernetes API client for it, authenticated with a short-lived bearer
token in the aws-iam-authenticator format.
"""

import base64
import contextlib
import os
from tempfile import NamedTemporaryFile

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from botocore.signers import RequestSigner
from icecream import ic
from kubernetes import client

from eks_secrets_sync import console
from eks_secrets_sync.config import SyncConfig
from eks_secrets_sync.exceptions import ClusterAuthError
from eks_secrets_sync.models import ClusterConnection

TOKEN_PREFIX = "k8s-aws-v1."
CLUSTER_ID_HEADER = "x-k8s-aws-id"
# Presigned URL lifetime; EKS rejects tokens older than 15 minutes regardless
TOKEN_EXPIRES_IN = 60
ROLE_SESSION_NAME = "eks-secrets-sync"

_STS_URL = "https://sts.{region}.amazonaws.com/?Action=GetCallerIdentity&Version=2011-06-15"


def cluster_session(config: SyncConfig, session: boto3.session.Session | None = None) -> boto3.session.Session:
    """Return a boto3 session for EKS and STS calls in the cluster region.

    When a role is configured it is assumed first, and the returned session
    carries the temporary credentials of that role.

    Args:
        config: Configuration of the current run.
        session: Base session holding the caller identity.

    Returns:
        A session scoped to the cluster region.

    Raises:
        ClusterAuthError: If the role cannot be assumed.

    """
    region = config.effective_cluster_region
    base = session or boto3.session.Session(region_name=region)
    if not config.role_arn:
        return base

    console.step(f"Assuming role {console.highlight(config.role_arn)}")
    try:
        response = base.client("sts", region_name=region).assume_role(
            RoleArn=config.role_arn,
            RoleSessionName=ROLE_SESSION_NAME,
        )
    except (BotoCoreError, ClientError) as err:
        raise ClusterAuthError(f"Failed to assume role '{config.role_arn}': {err}") from err

    credentials = response["Credentials"]
    return boto3.session.Session(
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials["SessionToken"],
        region_name=region,
    )


def describe_cluster(session: boto3.session.Session, cluster_id: str, region: str) -> tuple[str, bytes]:
    """Fetch the API endpoint and CA bundle of an EKS cluster.

    Args:
        session: Session used for the EKS call.
        cluster_id: Name of the cluster.
        region: Region of the cluster.

    Returns:
        An (endpoint, ca_data) tuple, with the CA bundle base64-decoded.

    Raises:
        ClusterAuthError: If the cluster cannot be described or its CA data
            is not valid base64.

    """
    try:
        response = session.client("eks", region_name=region).describe_cluster(name=cluster_id)
        cluster = response["cluster"]
        endpoint: str = cluster["endpoint"]
        encoded_ca: str = cluster["certificateAuthority"]["data"]
    except (BotoCoreError, ClientError) as err:
        raise ClusterAuthError(f"Failed to describe cluster '{cluster_id}': {err}") from err
    except KeyError as err:
        raise ClusterAuthError(f"Cluster '{cluster_id}' descriptor is missing {err}") from err

    try:
        ca_data = base64.b64decode(encoded_ca, validate=True)
    except ValueError as err:
        raise ClusterAuthError(f"Certificate authority data of cluster '{cluster_id}' is not valid base64") from err

    ic(endpoint)
    return endpoint, ca_data


def get_bearer_token(session: boto3.session.Session, cluster_id: str, region: str) -> str:
    """Generate a bearer token for an EKS cluster.

    The token is a presigned STS GetCallerIdentity URL bound to the cluster
    through the ``x-k8s-aws-id`` header, which the cluster verifies by
    calling STS on our behalf.

    Args:
        session: Session whose identity the token represents.
        cluster_id: Name of the cluster.
        region: Region of the STS endpoint to sign for.

    Returns:
        The token, ready to be sent as ``Authorization: Bearer <token>``.

    Raises:
        ClusterAuthError: If no credentials are available or signing fails.

    """
    credentials = session.get_credentials()
    if credentials is None:
        raise ClusterAuthError("No AWS credentials available to generate a cluster token")

    try:
        sts = session.client("sts", region_name=region)
        signer = RequestSigner(
            sts.meta.service_model.service_id,
            region,
            "sts",
            "v4",
            credentials,
            session.events,
        )
        signed_url = signer.generate_presigned_url(
            {
                "method": "GET",
                "url": _STS_URL.format(region=region),
                "body": {},
                "headers": {CLUSTER_ID_HEADER: cluster_id},
                "context": {},
            },
            region_name=region,
            expires_in=TOKEN_EXPIRES_IN,
            operation_name="",
        )
    except BotoCoreError as err:
        raise ClusterAuthError(f"Failed to sign token for cluster '{cluster_id}': {err}") from err

    encoded = base64.urlsafe_b64encode(signed_url.encode("utf-8")).decode("utf-8")
    return TOKEN_PREFIX + encoded.rstrip("=")


def connect(config: SyncConfig, session: boto3.session.Session | None = None) -> ClusterConnection:
    """Resolve connection details for the configured cluster.

    Args:
        config: Configuration of the current run.
        session: Base session holding the caller identity.

    Returns:
        A ClusterConnection with a freshly generated token.

    Raises:
        ClusterAuthError: If any step of the resolution fails.

    """
    region = config.effective_cluster_region
    console.step(f"Resolving cluster {console.highlight(config.cluster_id)}")
    console.info(f"Using region {console.highlight(region)} for EKS and STS")

    eks_session = cluster_session(config, session)
    endpoint, ca_data = describe_cluster(eks_session, config.cluster_id, region)
    token = get_bearer_token(eks_session, config.cluster_id, region)

    return ClusterConnection(cluster_id=config.cluster_id, endpoint=endpoint, ca_data=ca_data, token=token)


class ClusterClient:
    """Kubernetes API client for a resolved cluster connection.

    Used as a context manager yielding a CoreV1Api. The CA bundle is written
    to a temporary file, since the kubernetes client only accepts a path,
    and removed on exit.

    Attributes:
        connection: The cluster connection the client talks to.

    """

    def __init__(self, connection: ClusterConnection) -> None:
        self.connection: ClusterConnection = connection
        self._ca_file_path: str | None = None
        self._api_client: client.ApiClient | None = None

    def __enter__(self) -> client.CoreV1Api:
        """Build the API client.

        Returns:
            A CoreV1Api bound to the cluster endpoint.

        """
        try:
            with NamedTemporaryFile(suffix=".crt", delete=False) as ca_file:
                self._ca_file_path = ca_file.name
                ca_file.write(self.connection.ca_data)
        except OSError as err:
            self._cleanup_ca_file()
            raise ClusterAuthError(f"Cannot write cluster CA bundle: {err.strerror}") from err

        try:
            configuration = client.Configuration()
            configuration.host = self.connection.endpoint
            configuration.ssl_ca_cert = self._ca_file_path
            configuration.verify_ssl = True
            configuration.api_key = {"authorization": f"Bearer {self.connection.token}"}

            self._api_client = client.ApiClient(configuration)
            return client.CoreV1Api(self._api_client)
        except Exception:
            self._cleanup_ca_file()
            raise

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        """Close the API client and remove the CA bundle."""
        if self._api_client is not None:
            self._api_client.close()
            self._api_client = None
        self._cleanup_ca_file()

    def _cleanup_ca_file(self) -> None:
        """Remove the temporary CA bundle if it exists."""
        if self._ca_file_path and os.path.exists(self._ca_file_path):
            with contextlib.suppress(OSError):
                os.unlink(self._ca_file_path)
        self._ca_file_path = None

    def __repr__(self) -> str:
        return f"ClusterClient(cluster_id={self.connection.cluster_id!r}, endpoint={self.connection.endpoint!r})"
