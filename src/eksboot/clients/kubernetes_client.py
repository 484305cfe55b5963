"""Kubernetes client built from an in-memory client configuration."""

from __future__ import annotations

from typing import Any

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.client.models import V1Node

from eksboot.core.exceptions import KubernetesError
from eksboot.utils.logging import get_logger

logger = get_logger(__name__)


class KubernetesClient:
    """Kubernetes client wrapper around a dedicated ApiClient.

    The ApiClient is not installed as the process-wide default, so clients
    for several clusters can coexist.
    """

    def __init__(self, api_client: client.ApiClient):
        """Initialize Kubernetes client.

        Args:
            api_client: Configured kubernetes ApiClient
        """
        self.api_client = api_client
        self.core_v1 = client.CoreV1Api(api_client)

    @classmethod
    def from_config_dict(
        cls, config_dict: dict[str, Any], context: str | None = None
    ) -> KubernetesClient:
        """Create a client from a kubeconfig document held in memory.

        Args:
            config_dict: Kubeconfig document
            context: Context to use (defaults to the document's current-context)

        Returns:
            KubernetesClient bound to the context

        Raises:
            KubernetesError: If the configuration cannot be loaded
        """
        try:
            api_client = config.new_client_from_config_dict(
                config_dict=config_dict,
                context=context,
                persist_config=False,
            )
        except Exception as e:
            logger.error("k8s_client_initialization_failed", context=context, error=str(e))
            raise KubernetesError(f"Failed to initialize Kubernetes client for {context}: {e}") from e

        logger.debug("k8s_client_initialized", context=context)
        return cls(api_client)

    def get_nodes(self) -> list[V1Node]:
        """Get all nodes in the cluster.

        Raises:
            KubernetesError: If nodes cannot be retrieved
        """
        try:
            logger.debug("getting_nodes")
            nodes = self.core_v1.list_node().items

            logger.info("nodes_retrieved", count=len(nodes))
            return nodes

        except ApiException as e:
            logger.error("get_nodes_failed", status=e.status, reason=e.reason)
            raise KubernetesError(f"Failed to get nodes: {e.reason}") from e

    def check_nodes_ready(self) -> list[str]:
        """Names of nodes whose Ready condition is not True.

        Raises:
            KubernetesError: If nodes cannot be retrieved
        """
        unready = []
        for node in self.get_nodes():
            conditions = (node.status.conditions if node.status else None) or []
            ready = any(c.type == "Ready" and c.status == "True" for c in conditions)
            if not ready:
                unready.append(node.metadata.name)

        logger.info("nodes_ready_check", unready_count=len(unready))
        return unready
