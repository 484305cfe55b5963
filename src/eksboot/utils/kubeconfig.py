"""Kubeconfig file management."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from eksboot.core.exceptions import ConfigurationError
from eksboot.utils.logging import get_logger

if TYPE_CHECKING:
    from eksboot.core.models import ClientConfig

logger = get_logger(__name__)

KUBECONFIG_FILE_MODE = 0o600


def empty_kubeconfig() -> dict[str, Any]:
    """Kubeconfig document with no entries."""
    return {
        "apiVersion": "v1",
        "kind": "Config",
        "preferences": {},
        "clusters": [],
        "contexts": [],
        "users": [],
        "current-context": "",
    }


def _upsert(entries: list[dict[str, Any]], entry: dict[str, Any]) -> None:
    for i, existing in enumerate(entries):
        if existing.get("name") == entry["name"]:
            entries[i] = entry
            return
    entries.append(entry)


class KubeconfigManager:
    """Merge client configurations into a kubeconfig file on disk."""

    def __init__(self, kubeconfig_path: str | Path = "~/.kube/config"):
        """Initialize kubeconfig manager, creating the file when absent.

        Args:
            kubeconfig_path: Path to the kubeconfig file
        """
        self.kubeconfig_path = Path(kubeconfig_path).expanduser()
        if not self.kubeconfig_path.exists():
            self._save(empty_kubeconfig())
            logger.debug("kubeconfig_created", path=str(self.kubeconfig_path))

    def get_kubeconfig_path(self) -> str:
        """Absolute path of the managed kubeconfig file."""
        return str(self.kubeconfig_path.absolute())

    def _load(self) -> dict[str, Any]:
        try:
            with self.kubeconfig_path.open() as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to read kubeconfig {self.kubeconfig_path}: {e}") from e

        if not data:
            return empty_kubeconfig()
        if not isinstance(data, dict):
            raise ConfigurationError(f"Kubeconfig {self.kubeconfig_path} is not a mapping")
        for section in ("clusters", "contexts", "users"):
            data[section] = data.get(section) or []
        return data

    def _save(self, data: dict[str, Any]) -> None:
        # Restrict the mode before writing, the file may carry a bearer token
        try:
            self.kubeconfig_path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(
                self.kubeconfig_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, KUBECONFIG_FILE_MODE
            )
            os.fchmod(fd, KUBECONFIG_FILE_MODE)
            with os.fdopen(fd, "w") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise ConfigurationError(f"Failed to write kubeconfig {self.kubeconfig_path}: {e}") from e

    def merge(self, client_config: ClientConfig, set_current_context: bool = True) -> str:
        """Write the entries of a client configuration into the file.

        Entries with the same names are replaced, everything else is kept.

        Args:
            client_config: Configuration to merge
            set_current_context: Whether to switch current-context to it

        Returns:
            Path to the kubeconfig file
        """
        data = self._load()
        document = client_config.to_kubeconfig_dict()

        for section in ("clusters", "contexts", "users"):
            for entry in document[section]:
                _upsert(data[section], entry)

        if set_current_context:
            data["current-context"] = document["current-context"]

        self._save(data)
        logger.info(
            "kubeconfig_merged",
            path=self.get_kubeconfig_path(),
            context=client_config.context_name,
            current_context=data.get("current-context"),
        )
        return self.get_kubeconfig_path()

    def remove_context(self, context_name: str) -> None:
        """Remove a context together with the cluster and user it references."""
        data = self._load()

        context = next((c for c in data["contexts"] if c.get("name") == context_name), None)
        if context is None:
            logger.debug("kubeconfig_context_not_found", context=context_name)
            return

        cluster_name = context.get("context", {}).get("cluster")
        user_name = context.get("context", {}).get("user")
        data["contexts"] = [c for c in data["contexts"] if c.get("name") != context_name]
        data["clusters"] = [c for c in data["clusters"] if c.get("name") != cluster_name]
        data["users"] = [u for u in data["users"] if u.get("name") != user_name]
        if data.get("current-context") == context_name:
            data["current-context"] = ""

        self._save(data)
        logger.info("kubeconfig_context_removed", context=context_name)

    def list_contexts(self) -> list[str]:
        """Names of all contexts in the file."""
        return [c["name"] for c in self._load()["contexts"]]
