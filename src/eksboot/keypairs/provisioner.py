"""Reconcile a local SSH public key with the EC2 key pair registry.

Key pairs created here are named ``eksctl-<cluster>-<fingerprint>``, which makes
the name deterministic for a given key and lets cleanup recognise key pairs
created by this scheme: their last name segment equals their own fingerprint.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

from eksboot.core.exceptions import (
    AmbiguousOrMissingKeyError,
    KeyConflictError,
    KeyMaterialIOError,
    KeyPairDeleteError,
    KeyPairImportError,
    KeyPairRegistryError,
)
from eksboot.core.models import ClusterIdentity, KeyPairRecord, LocalKeyMaterial, ProvisionedKey
from eksboot.interfaces.exceptions import RegistryError
from eksboot.interfaces.key_registry import KeyPairRegistry
from eksboot.keypairs.fingerprint import compute_fingerprint
from eksboot.utils.logging import get_logger

logger = get_logger(__name__)

KEY_NAME_PREFIX = "eksctl"
KEY_NAME_SEPARATOR = "-"


def key_pair_name(cluster_name: str, fingerprint: str | None = None) -> str:
    """Derive the key pair name for a cluster.

    Args:
        cluster_name: Cluster name
        fingerprint: Key fingerprint; omitted to get the name prefix

    Returns:
        ``eksctl-<cluster>`` or ``eksctl-<cluster>-<fingerprint>``
    """
    parts = [KEY_NAME_PREFIX, cluster_name]
    if fingerprint is not None:
        parts.append(fingerprint)
    return KEY_NAME_SEPARATOR.join(parts)


def expand_path(path: str) -> str:
    """Expand ``~`` and environment variables in a path."""
    return os.path.expandvars(os.path.expanduser(path))


def read_key_material(path: str) -> LocalKeyMaterial:
    """Read an SSH public key file.

    Args:
        path: Path to the public key, already expanded

    Returns:
        LocalKeyMaterial, without bytes when nothing exists at the path

    Raises:
        KeyMaterialIOError: If the path exists but cannot be read
    """
    try:
        raw_bytes = Path(path).read_bytes()
    except FileNotFoundError:
        return LocalKeyMaterial(path=path)
    except OSError as e:
        raise KeyMaterialIOError(f"reading SSH public key file {path!r}: {e}") from e
    return LocalKeyMaterial(path=path, raw_bytes=raw_bytes)


def is_cluster_key(record: KeyPairRecord, cluster_name: str) -> bool:
    """Whether a key pair is named for a cluster and its own fingerprint.

    Comparing the full derived name rejects key pairs of clusters whose names
    merely start with ``<cluster_name>-``.
    """
    return record.name == key_pair_name(cluster_name, record.fingerprint)


class SSHKeyProvisioner:
    """Import, adopt and clean up the SSH key pair of a cluster.

    Callers must not run two passes for the same cluster concurrently: the
    describe-then-import and describe-then-delete sequences are not atomic.
    """

    def __init__(
        self,
        registry: KeyPairRegistry,
        fingerprinter: Callable[[bytes], str] = compute_fingerprint,
    ):
        """Initialize the provisioner.

        Args:
            registry: Key pair registry to reconcile against
            fingerprinter: Function computing the fingerprint of public key bytes
        """
        self.registry = registry
        self.fingerprinter = fingerprinter

    def _describe(self, name: str) -> list[KeyPairRecord]:
        try:
            return self.registry.describe(name)
        except RegistryError as e:
            raise KeyPairRegistryError(f"checking existing key pair {name!r}: {e}") from e

    def load_or_import(self, path: str, cluster: ClusterIdentity) -> ProvisionedKey:
        """Resolve the key pair to launch cluster nodes with.

        When ``path`` names a readable public key file, the key is imported
        under its deterministic name unless a key pair with that name and the
        same fingerprint already exists. When nothing exists at ``path``, the
        expanded path string (``~`` and environment variables resolved) is taken
        as the name of an existing key pair.

        Args:
            path: Public key path, or the name of an existing key pair
            cluster: Cluster the key pair belongs to

        Returns:
            ProvisionedKey naming the key pair to use

        Raises:
            KeyMaterialIOError: If the public key file cannot be read
            FingerprintError: If the file is not a valid public key
            KeyConflictError: If the derived name is taken by a different key
            AmbiguousOrMissingKeyError: If the named key pair does not resolve to exactly one
            KeyPairImportError: If importing the key fails
            KeyPairRegistryError: If the registry cannot be queried
        """
        material = read_key_material(expand_path(path))
        if material.raw_bytes is None:
            return self._adopt_existing(material.path)
        return self._import_if_needed(material.path, material.raw_bytes, cluster)

    def _adopt_existing(self, name: str) -> ProvisionedKey:
        logger.info("ssh_public_key_file_missing_assuming_key_pair", key_name=name)

        existing = self._describe(name)
        if len(existing) != 1:
            raise AmbiguousOrMissingKeyError(name, len(existing))

        record = existing[0]
        logger.info("existing_key_pair_found", key_name=record.name)
        return ProvisionedKey(key_name=record.name, fingerprint=record.fingerprint or None)

    def _import_if_needed(
        self, path: str, raw_bytes: bytes, cluster: ClusterIdentity
    ) -> ProvisionedKey:
        fingerprint = self.fingerprinter(raw_bytes)
        name = key_pair_name(cluster.name, fingerprint)

        existing = self._describe(name)
        if len(existing) > 1:
            raise AmbiguousOrMissingKeyError(name, len(existing))

        if not existing:
            logger.info("importing_ssh_public_key", path=path, key_name=name)
            try:
                self.registry.import_key(name, raw_bytes)
            except RegistryError as e:
                raise KeyPairImportError(f"importing SSH public key as {name!r}: {e}") from e
            return ProvisionedKey(
                key_name=name,
                public_key=raw_bytes,
                fingerprint=fingerprint,
                imported=True,
            )

        record = existing[0]
        if record.fingerprint != fingerprint:
            raise KeyConflictError(name, expected=fingerprint, got=record.fingerprint)

        logger.debug("ssh_public_key_already_exists", key_name=name)
        return ProvisionedKey(key_name=name, public_key=raw_bytes, fingerprint=fingerprint)

    def cleanup_candidate_keys(self, cluster: ClusterIdentity) -> str | None:
        """Delete the key pair this scheme created for a cluster, if unambiguous.

        Only key pairs named exactly ``eksctl-<cluster>-<fingerprint>`` for their
        own fingerprint are candidates. Nothing is deleted unless exactly
        one candidate exists.

        Args:
            cluster: Cluster whose key pair should be removed

        Returns:
            Name of the deleted key pair, or None when nothing was deleted

        Raises:
            KeyPairRegistryError: If key pairs cannot be listed
            KeyPairDeleteError: If the deletion fails
        """
        try:
            records = self.registry.describe()
        except RegistryError as e:
            raise KeyPairRegistryError(f"listing key pairs for cluster {cluster.name!r}: {e}") from e

        candidates = [record.name for record in records if is_cluster_key(record, cluster.name)]
        logger.debug("key_pair_cleanup_candidates", cluster=cluster.name, candidates=candidates)

        if not candidates:
            return None
        if len(candidates) > 1:
            logger.warning(
                "key_pair_cleanup_ambiguous",
                cluster=cluster.name,
                candidates=candidates,
            )
            return None

        name = candidates[0]
        logger.info("deleting_key_pair", key_name=name)
        try:
            self.registry.delete(name)
        except RegistryError as e:
            raise KeyPairDeleteError(f"deleting key pair {name!r}: {e}") from e
        return name
