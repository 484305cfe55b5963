"""Adapters implementing eksboot interfaces."""

from eksboot.adapters.aws_adapter import AWSAdapter

__all__ = ["AWSAdapter"]
