"""Fingerprints of SSH public keys as EC2 reports them for imported key pairs."""

from __future__ import annotations

import base64
import hashlib

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519, rsa

from eksboot.core.exceptions import FingerprintError


def _colon_hex(digest: bytes) -> str:
    return ":".join(f"{b:02x}" for b in digest)


def compute_fingerprint(public_key: bytes) -> str:
    """Compute the EC2 fingerprint of an OpenSSH public key.

    RSA keys use the MD5 digest of the DER encoded SubjectPublicKeyInfo in
    colon-separated hex (e.g. ``1f:51:ae:...``). ED25519 keys use the base64
    SHA-256 digest of the OpenSSH key blob.

    Args:
        public_key: Contents of an OpenSSH public key file

    Returns:
        Fingerprint string

    Raises:
        FingerprintError: If the bytes are not a supported OpenSSH public key
    """
    try:
        key = serialization.load_ssh_public_key(public_key.strip())
    except (ValueError, UnsupportedAlgorithm) as e:
        raise FingerprintError(f"Invalid SSH public key: {e}") from e

    if isinstance(key, rsa.RSAPublicKey):
        der = key.public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return _colon_hex(hashlib.md5(der).digest())

    if isinstance(key, ed25519.Ed25519PublicKey):
        openssh = key.public_bytes(
            serialization.Encoding.OpenSSH,
            serialization.PublicFormat.OpenSSH,
        )
        blob = base64.b64decode(openssh.split()[1])
        return base64.b64encode(hashlib.sha256(blob).digest()).decode("ascii")

    raise FingerprintError(f"Unsupported SSH public key type: {type(key).__name__}")
