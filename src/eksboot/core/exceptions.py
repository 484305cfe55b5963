"""Custom exceptions for eksboot."""


class EksbootError(Exception):
    """Base exception for all eksboot errors."""


class ConfigurationError(EksbootError):
    """Configuration-related errors."""


class AWSError(EksbootError):
    """AWS operation failed."""


class KubernetesError(EksbootError):
    """Kubernetes operation failed."""


class KeyMaterialIOError(EksbootError):
    """Local SSH public key could not be read."""


class FingerprintError(EksbootError):
    """SSH public key material is malformed or of an unsupported type."""


class KeyConflictError(EksbootError):
    """A key pair with the derived name exists with a different fingerprint."""

    def __init__(self, key_name: str, expected: str, got: str):
        """Initialize key conflict error.

        Args:
            key_name: Name of the conflicting key pair
            expected: Fingerprint of the local key material
            got: Fingerprint reported by the registry
        """
        super().__init__(
            f"SSH public key {key_name} already exists, but fingerprints don't match "
            f"(expected: {expected!r}, got: {got!r})"
        )
        self.key_name = key_name
        self.expected = expected
        self.got = got


class KeyPairRegistryError(EksbootError):
    """A key pair registry call failed."""


class KeyPairImportError(KeyPairRegistryError):
    """Importing a key pair into the registry failed."""


class KeyPairDeleteError(KeyPairRegistryError):
    """Deleting a key pair from the registry failed."""


class AmbiguousOrMissingKeyError(EksbootError):
    """Describe by name did not return exactly one key pair."""

    def __init__(self, name: str, count: int):
        """Initialize ambiguous or missing key error.

        Args:
            name: Key pair name that was looked up
            count: Number of key pairs found
        """
        super().__init__(
            f"unexpected number of key pairs found for {name!r} (expected: 1, got: {count})"
        )
        self.name = name
        self.count = count


class IdentityParseError(EksbootError):
    """Caller identity ARN could not be parsed."""


class TokenIssuanceError(EksbootError):
    """Bearer token for the cluster could not be issued."""


class ClientConstructionError(EksbootError):
    """Kubernetes API client could not be constructed."""
