"""Interfaces for the external collaborators of eksboot."""

from eksboot.interfaces.exceptions import (
    InterfaceError,
    RegistryError,
    TokenIssuerError,
)
from eksboot.interfaces.key_registry import KeyPairRegistry
from eksboot.interfaces.token_issuer import TokenIssuer

__all__ = [
    "InterfaceError",
    "KeyPairRegistry",
    "RegistryError",
    "TokenIssuer",
    "TokenIssuerError",
]
