"""AWS adapter implementing the KeyPairRegistry and TokenIssuer interfaces."""

from eksboot.clients.aws_client import AWSClient
from eksboot.core.exceptions import AWSError
from eksboot.core.models import KeyPairRecord
from eksboot.interfaces.exceptions import RegistryError, TokenIssuerError
from eksboot.interfaces.key_registry import KeyPairRegistry
from eksboot.interfaces.token_issuer import TokenIssuer
from eksboot.utils.logging import get_logger

logger = get_logger(__name__)


class AWSAdapter(KeyPairRegistry, TokenIssuer):
    """Adapter wrapping AWSClient to serve EC2 key pairs and EKS tokens.

    This adapter hides AWS-specific implementation details (boto3 response
    shapes, AWSError) behind the registry and token issuer interfaces.
    """

    def __init__(
        self,
        region: str = "us-west-2",
        profile: str | None = None,
        client: AWSClient | None = None,
    ):
        """Initialize AWS adapter.

        Args:
            region: AWS region
            profile: AWS profile name (optional)
            client: Existing AWSClient (optional, overrides region and profile)
        """
        self.client = client or AWSClient(region=region, profile=profile)
        logger.debug("aws_adapter_initialized", region=self.client.region)

    @staticmethod
    def _to_record(key_pair: dict) -> KeyPairRecord:
        return KeyPairRecord(
            name=key_pair["KeyName"],
            fingerprint=key_pair.get("KeyFingerprint", ""),
            key_pair_id=key_pair.get("KeyPairId"),
        )

    def describe(self, name: str | None = None) -> list[KeyPairRecord]:
        """Describe EC2 key pairs, by exact name or all of them."""
        try:
            key_pairs = self.client.describe_key_pairs([name] if name else None)
        except AWSError as e:
            raise RegistryError(f"Failed to describe key pair {name or '*'}: {e}") from e
        return [self._to_record(key_pair) for key_pair in key_pairs]

    def import_key(self, name: str, public_key: bytes) -> KeyPairRecord:
        """Import public key material as an EC2 key pair."""
        try:
            response = self.client.import_key_pair(name, public_key)
        except AWSError as e:
            raise RegistryError(f"Failed to import key pair {name}: {e}") from e
        return self._to_record({**response, "KeyName": response.get("KeyName", name)})

    def delete(self, name: str) -> None:
        """Delete an EC2 key pair."""
        try:
            self.client.delete_key_pair(name)
        except AWSError as e:
            raise RegistryError(f"Failed to delete key pair {name}: {e}") from e

    def issue_token(self, cluster_name: str) -> str:
        """Issue an EKS bearer token signed with this adapter's credentials."""
        try:
            token_info = self.client.generate_eks_token(cluster_name)
        except AWSError as e:
            raise TokenIssuerError(f"Failed to issue token for {cluster_name}: {e}") from e
        return str(token_info["token"])

    def get_caller_arn(self) -> str:
        """ARN of the IAM identity the adapter acts as.

        Raises:
            AWSError: If the identity cannot be retrieved
        """
        return self.client.get_caller_identity_arn()

    def get_cluster_endpoint(self, cluster_name: str) -> tuple[str, str]:
        """API server endpoint and base64 CA bundle of an EKS cluster.

        Raises:
            AWSError: If the cluster cannot be described
        """
        info = self.client.get_eks_cluster_info(cluster_name)
        return info["endpoint"], info["certificateAuthority"]["data"]
