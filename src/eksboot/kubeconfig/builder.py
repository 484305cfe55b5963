"""Build client configurations for a freshly created EKS control plane.

A configuration is built once and then decorated with one of two
authentication strategies:

- exec plugin: the consumer runs an authenticator binary at connection time
- embedded token: a short-lived bearer token is issued now and written in

Decorators never touch the configuration they are given. Each returns a deep
copy whose user entry is rebuilt to hold exactly the new strategy.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from eksboot.clients.kubernetes_client import KubernetesClient
from eksboot.core.config import AuthenticatorConfig
from eksboot.core.exceptions import ClientConstructionError, KubernetesError, TokenIssuanceError
from eksboot.core.models import (
    AuthInfo,
    ClientConfig,
    ClusterEndpointInfo,
    ClusterIdentity,
    ContextInfo,
    ExecConfig,
    ExecEnvVar,
)
from eksboot.interfaces.exceptions import TokenIssuerError
from eksboot.interfaces.token_issuer import TokenIssuer
from eksboot.kubeconfig.identity import cluster_endpoint_name, context_name, parse_caller_username
from eksboot.utils.logging import get_logger

logger = get_logger(__name__)

ClientFactory = Callable[[dict[str, Any], str], KubernetesClient]


class ClientConfigBuilder:
    """Assemble and decorate ClientConfig values."""

    def __init__(
        self,
        token_issuer: TokenIssuer | None = None,
        authenticator: AuthenticatorConfig | None = None,
        client_factory: ClientFactory = KubernetesClient.from_config_dict,
    ):
        """Initialize the builder.

        Args:
            token_issuer: Issuer used by the embedded token strategy
            authenticator: Exec plugin settings
            client_factory: Turns a kubeconfig dict and context name into a client
        """
        self.token_issuer = token_issuer
        self.authenticator = authenticator or AuthenticatorConfig()
        self.client_factory = client_factory

    def build(
        self,
        cluster: ClusterIdentity,
        endpoint: str,
        ca_data: str,
        caller_arn: str,
        profile: str | None = None,
    ) -> ClientConfig:
        """Build an unauthenticated client configuration.

        Args:
            cluster: Cluster identity
            endpoint: API server URL
            ca_data: Base64 encoded CA bundle of the API server
            caller_arn: ARN of the IAM identity the configuration is for
            profile: AWS profile the exec plugin should use (optional)

        Returns:
            ClientConfig with one cluster, one context and an empty user

        Raises:
            IdentityParseError: If the caller ARN is malformed
        """
        cluster_name = cluster_endpoint_name(cluster)
        username = parse_caller_username(caller_arn)
        ctx_name = context_name(username, cluster_name)

        logger.debug("building_client_config", cluster_name=cluster_name, context=ctx_name)

        return ClientConfig(
            cluster=cluster,
            cluster_name=cluster_name,
            context_name=ctx_name,
            profile=profile or None,
            clusters={
                cluster_name: ClusterEndpointInfo(
                    server=endpoint,
                    certificate_authority_data=ca_data,
                )
            },
            contexts={ctx_name: ContextInfo(cluster=cluster_name, user=ctx_name)},
            auth_infos={ctx_name: AuthInfo()},
            current_context=ctx_name,
        )

    @staticmethod
    def _with_auth_info(config: ClientConfig, auth_info: AuthInfo) -> ClientConfig:
        decorated = config.model_copy(deep=True)
        decorated.auth_infos[config.context_name] = auth_info
        logger.debug(
            "auth_strategy_attached", context=config.context_name, strategy=auth_info.strategy
        )
        return decorated

    def with_exec_plugin(self, config: ClientConfig) -> ClientConfig:
        """Return a copy of ``config`` authenticating through the exec plugin.

        The plugin is invoked as ``<command> token -i <cluster>``, with the
        configured AWS profile exported when the config carries one.
        """
        env = []
        if config.profile:
            env.append(ExecEnvVar(name=self.authenticator.profile_env_var, value=config.profile))

        exec_config = ExecConfig(
            api_version=self.authenticator.api_version,
            command=self.authenticator.command,
            args=["token", "-i", config.cluster.name],
            env=env,
        )
        return self._with_auth_info(config, AuthInfo(exec=exec_config))

    def with_embedded_token(self, config: ClientConfig) -> ClientConfig:
        """Return a copy of ``config`` carrying a freshly issued bearer token.

        The token expires with the issuer's TTL; refresh it by calling this
        again, the consumer cannot.

        Raises:
            TokenIssuanceError: If no issuer is configured or issuance fails
        """
        cluster_name = config.cluster.name
        if self.token_issuer is None:
            raise TokenIssuanceError(f"no token issuer configured for cluster {cluster_name}")

        try:
            token = self.token_issuer.issue_token(cluster_name)
        except TokenIssuerError as e:
            raise TokenIssuanceError(f"could not get token for cluster {cluster_name}: {e}") from e

        return self._with_auth_info(config, AuthInfo(token=token))

    def to_client(self, config: ClientConfig) -> KubernetesClient:
        """Create a Kubernetes client from the configuration as it is.

        Raises:
            ClientConstructionError: If the client cannot be created
        """
        try:
            return self.client_factory(config.to_kubeconfig_dict(), config.context_name)
        except KubernetesError as e:
            raise ClientConstructionError(
                f"failed to create API client for context {config.context_name}: {e}"
            ) from e

    def to_client_with_embedded_token(self, config: ClientConfig) -> KubernetesClient:
        """Issue a token, embed it and create a Kubernetes client.

        Raises:
            ClientConstructionError: If the token or the client cannot be created
        """
        try:
            decorated = self.with_embedded_token(config)
        except TokenIssuanceError as e:
            raise ClientConstructionError(
                f"creating client config with embedded token for {config.cluster_name}: {e}"
            ) from e
        return self.to_client(decorated)
