"""Exceptions for interface implementations."""


class InterfaceError(Exception):
    """Base exception for all interface-related errors."""


class RegistryError(InterfaceError):
    """Exception for key pair registry operations."""


class TokenIssuerError(InterfaceError):
    """Exception for token issuer operations."""
