"""Token issuer interface."""

from abc import ABC, abstractmethod


class TokenIssuer(ABC):
    """Capability to issue short-lived bearer tokens for a cluster."""

    @abstractmethod
    def issue_token(self, cluster_name: str) -> str:
        """Issue a bearer token for the named cluster.

        Args:
            cluster_name: Name of the cluster the token authenticates against

        Returns:
            Bearer token string

        Raises:
            TokenIssuerError: If the token cannot be issued
        """
