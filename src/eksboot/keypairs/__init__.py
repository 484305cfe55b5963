"""SSH key pair reconciliation."""

from eksboot.keypairs.fingerprint import compute_fingerprint
from eksboot.keypairs.provisioner import SSHKeyProvisioner, key_pair_name

__all__ = ["SSHKeyProvisioner", "compute_fingerprint", "key_pair_name"]
