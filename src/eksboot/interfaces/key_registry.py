"""Key pair registry interface."""

from abc import ABC, abstractmethod

from eksboot.core.models import KeyPairRecord


class KeyPairRegistry(ABC):
    """Abstract interface for a remote registry of named SSH key pairs.

    Implementation Note:
    Concrete implementations should hide provider-specific details
    (boto3 exceptions, response formats, etc.) and raise RegistryError.
    """

    @abstractmethod
    def describe(self, name: str | None = None) -> list[KeyPairRecord]:
        """Describe key pairs.

        Args:
            name: Exact key pair name to look up; all key pairs when None

        Returns:
            Matching records, empty when the named key pair does not exist

        Raises:
            RegistryError: If the registry cannot be queried
        """

    @abstractmethod
    def import_key(self, name: str, public_key: bytes) -> KeyPairRecord:
        """Import public key material under the given name.

        Args:
            name: Key pair name
            public_key: OpenSSH public key bytes

        Returns:
            Record of the imported key pair

        Raises:
            RegistryError: If the import fails
        """

    @abstractmethod
    def delete(self, name: str) -> None:
        """Delete the named key pair.

        Args:
            name: Key pair name

        Raises:
            RegistryError: If the deletion fails
        """
