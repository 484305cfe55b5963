"""Client configuration assembly."""

from eksboot.kubeconfig.builder import ClientConfigBuilder
from eksboot.kubeconfig.identity import parse_caller_username

__all__ = ["ClientConfigBuilder", "parse_caller_username"]
