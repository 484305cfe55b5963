"""AWS client for EC2 key pair, STS and EKS operations."""

import base64
from datetime import datetime, timedelta, timezone
from typing import Any, cast

import boto3
from botocore.exceptions import ClientError
from botocore.signers import RequestSigner

from eksboot.core.exceptions import AWSError
from eksboot.utils.logging import get_logger

logger = get_logger(__name__)

KEY_PAIR_NOT_FOUND = "InvalidKeyPair.NotFound"
TOKEN_PREFIX = "k8s-aws-v1."
TOKEN_EXPIRES_IN = 60
CLUSTER_ID_HEADER = "x-k8s-aws-id"


class AWSClient:
    """AWS client for EC2, STS and EKS operations.

    Every call is made once; throttling and transient failures surface as
    AWSError and retries are left to the caller.
    """

    def __init__(
        self,
        region: str = "us-west-2",
        profile: str | None = None,
        session: boto3.Session | None = None,
    ):
        """Initialize AWS client.

        Args:
            region: AWS region
            profile: AWS profile name (optional)
            session: Existing boto3 session (optional, overrides profile)
        """
        self.region = region
        self.profile = profile

        if session:
            self.session = session
        elif profile:
            self.session = boto3.Session(profile_name=profile, region_name=region)
        else:
            self.session = boto3.Session(region_name=region)

        self.ec2 = self.session.client("ec2")
        self.sts = self.session.client("sts")
        self.eks = self.session.client("eks")

        logger.debug("aws_client_initialized", region=region, profile=profile)

    def describe_key_pairs(self, names: list[str] | None = None) -> list[dict[str, Any]]:
        """Describe EC2 key pairs.

        Args:
            names: Key pair names to look up; all key pairs when None

        Returns:
            List of key pair dictionaries, empty when a named key pair is missing

        Raises:
            AWSError: If key pairs cannot be described
        """
        try:
            logger.debug("describing_key_pairs", names=names)

            if names:
                response = self.ec2.describe_key_pairs(KeyNames=names)
            else:
                response = self.ec2.describe_key_pairs()
            key_pairs = cast(list[dict[str, Any]], response.get("KeyPairs", []))

            logger.debug("key_pairs_described", count=len(key_pairs))
            return key_pairs

        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            if error_code == KEY_PAIR_NOT_FOUND:
                logger.debug("key_pair_not_found", names=names)
                return []

            logger.error("describe_key_pairs_failed", names=names, error_code=error_code)
            raise AWSError(f"Failed to describe EC2 key pairs {names or '*'}: {error_code}") from e

    def import_key_pair(self, name: str, public_key_material: bytes) -> dict[str, Any]:
        """Import an SSH public key as an EC2 key pair.

        Args:
            name: Key pair name
            public_key_material: OpenSSH public key bytes

        Returns:
            ImportKeyPair response

        Raises:
            AWSError: If the import fails
        """
        try:
            logger.debug("importing_key_pair", key_name=name)

            response = self.ec2.import_key_pair(KeyName=name, PublicKeyMaterial=public_key_material)

            logger.info("key_pair_imported", key_name=name, fingerprint=response.get("KeyFingerprint"))
            return cast(dict[str, Any], response)

        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            logger.error("import_key_pair_failed", key_name=name, error_code=error_code)
            raise AWSError(f"Failed to import EC2 key pair {name}: {error_code}") from e

    def delete_key_pair(self, name: str) -> None:
        """Delete an EC2 key pair.

        Args:
            name: Key pair name

        Raises:
            AWSError: If the deletion fails
        """
        try:
            logger.debug("deleting_key_pair", key_name=name)
            self.ec2.delete_key_pair(KeyName=name)
            logger.info("key_pair_deleted", key_name=name)

        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            logger.error("delete_key_pair_failed", key_name=name, error_code=error_code)
            raise AWSError(f"Failed to delete EC2 key pair {name}: {error_code}") from e

    def get_caller_identity_arn(self) -> str:
        """Get the ARN of the calling IAM identity.

        Raises:
            AWSError: If STS GetCallerIdentity fails
        """
        try:
            response = self.sts.get_caller_identity()
            arn = cast(str, response["Arn"])
            logger.debug("caller_identity_retrieved", arn=arn)
            return arn

        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            logger.error("get_caller_identity_failed", error_code=error_code)
            raise AWSError(f"Failed to get caller identity: {error_code}") from e

    def get_eks_cluster_info(self, cluster_name: str) -> dict[str, Any]:
        """Get EKS cluster information.

        Args:
            cluster_name: Name of the EKS cluster

        Returns:
            Cluster information dictionary

        Raises:
            AWSError: If cluster info cannot be retrieved
        """
        try:
            logger.debug("getting_eks_cluster_info", cluster_name=cluster_name)

            response = self.eks.describe_cluster(name=cluster_name)
            cluster_info = cast(dict[str, Any], response["cluster"])

            logger.info("eks_cluster_info_retrieved", cluster_name=cluster_name)
            return cluster_info

        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            logger.error(
                "eks_cluster_info_failed",
                cluster_name=cluster_name,
                error_code=error_code,
            )

            if error_code == "ResourceNotFoundException":
                raise AWSError(f"EKS cluster not found: {cluster_name}") from e
            raise AWSError(f"Failed to get cluster info for {cluster_name}: {error_code}") from e

    def generate_eks_token(self, cluster_name: str) -> dict[str, Any]:
        """Generate a bearer token for the EKS cluster.

        The token is a presigned STS GetCallerIdentity URL bound to the cluster
        name, the same thing ``aws eks get-token`` produces.

        Args:
            cluster_name: Name of the EKS cluster

        Returns:
            Dictionary with ``token`` and ``expiration``

        Raises:
            AWSError: If token generation fails
        """
        logger.debug("generating_eks_token", cluster_name=cluster_name)

        credentials = self.session.get_credentials()
        if credentials is None:
            raise AWSError(f"No AWS credentials available to sign a token for {cluster_name}")

        signer = RequestSigner(
            self.sts.meta.service_model.service_id,
            self.region,
            "sts",
            "v4",
            credentials,
            self.session.events,
        )
        request_params = {
            "method": "GET",
            "url": (
                f"https://sts.{self.region}.amazonaws.com/"
                "?Action=GetCallerIdentity&Version=2011-06-15"
            ),
            "body": {},
            "headers": {CLUSTER_ID_HEADER: cluster_name},
            "context": {},
        }

        try:
            presigned_url = signer.generate_presigned_url(
                request_params,
                region_name=self.region,
                expires_in=TOKEN_EXPIRES_IN,
                operation_name="",
            )
        except Exception as e:
            logger.error("eks_token_generation_failed", cluster_name=cluster_name, error=str(e))
            raise AWSError(f"Failed to generate token for {cluster_name}: {e}") from e

        token_b64 = base64.urlsafe_b64encode(presigned_url.encode("utf-8")).decode("utf-8")
        expiration = datetime.now(timezone.utc) + timedelta(seconds=TOKEN_EXPIRES_IN)

        logger.info("eks_token_generated", cluster_name=cluster_name)
        return {
            "token": TOKEN_PREFIX + token_b64.rstrip("="),
            "expiration": expiration,
        }
