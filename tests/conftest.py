"""Pytest configuration and shared fixtures."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519, rsa

from eksboot.core.models import ClusterIdentity, KeyPairRecord
from eksboot.interfaces.exceptions import RegistryError
from eksboot.interfaces.key_registry import KeyPairRegistry
from eksboot.interfaces.token_issuer import TokenIssuer


class FakeKeyPairRegistry(KeyPairRegistry):
    """In-memory key pair registry that records every call."""

    def __init__(self, records: list[KeyPairRecord] | None = None):
        self.records: dict[str, KeyPairRecord] = {r.name: r for r in records or []}
        self.describe_calls: list[str | None] = []
        self.import_calls: list[tuple[str, bytes]] = []
        self.delete_calls: list[str] = []
        self.fingerprint_for_import = "imported-fingerprint"
        self.fail_on: set[str] = set()

    def describe(self, name: str | None = None) -> list[KeyPairRecord]:
        self.describe_calls.append(name)
        if "describe" in self.fail_on:
            raise RegistryError("describe failed")
        if name is None:
            return list(self.records.values())
        return [r for r in self.records.values() if r.name == name]

    def import_key(self, name: str, public_key: bytes) -> KeyPairRecord:
        self.import_calls.append((name, public_key))
        if "import" in self.fail_on:
            raise RegistryError("import failed")
        # Derived names end with the fingerprint, mirror it back like EC2 would
        record = KeyPairRecord(name=name, fingerprint=name.split("-")[-1])
        self.records[name] = record
        return record

    def delete(self, name: str) -> None:
        self.delete_calls.append(name)
        if "delete" in self.fail_on:
            raise RegistryError("delete failed")
        self.records.pop(name, None)


class StaticTokenIssuer(TokenIssuer):
    """Token issuer handing out a fixed token."""

    def __init__(self, token: str = "k8s-aws-v1.static-token"):
        self.token = token
        self.calls: list[str] = []

    def issue_token(self, cluster_name: str) -> str:
        self.calls.append(cluster_name)
        return self.token


@pytest.fixture
def cluster() -> ClusterIdentity:
    """Cluster identity used across tests."""
    return ClusterIdentity(name="prod", region="us-east-1")


@pytest.fixture
def fake_registry() -> FakeKeyPairRegistry:
    """Empty in-memory key pair registry."""
    return FakeKeyPairRegistry()


@pytest.fixture
def token_issuer() -> StaticTokenIssuer:
    """Token issuer returning a fixed token."""
    return StaticTokenIssuer()


@pytest.fixture(scope="session")
def rsa_public_key() -> bytes:
    """OpenSSH encoded RSA public key with a trailing comment."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    openssh = key.public_key().public_bytes(
        serialization.Encoding.OpenSSH, serialization.PublicFormat.OpenSSH
    )
    return openssh + b" alice@laptop\n"


@pytest.fixture(scope="session")
def ed25519_public_key() -> bytes:
    """OpenSSH encoded ED25519 public key."""
    key = ed25519.Ed25519PrivateKey.generate()
    return key.public_key().public_bytes(
        serialization.Encoding.OpenSSH, serialization.PublicFormat.OpenSSH
    )


@pytest.fixture
def public_key_file(tmp_path: Path) -> Path:
    """Public key file whose contents the stub fingerprinter ignores."""
    path = tmp_path / "id_rsa.pub"
    path.write_bytes(b"ssh-rsa AAAAB3NzaC1yc2EAAAADAQABAAABAQ test@host\n")
    return path


@pytest.fixture
def mock_aws_client() -> MagicMock:
    """Mock AWSClient for adapter tests."""
    client = MagicMock()
    client.region = "us-east-1"
    return client


@pytest.fixture
def make_registry():
    """Factory for in-memory registries pre-populated with records."""
    return FakeKeyPairRegistry
