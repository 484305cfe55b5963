"""Core data models for eksboot."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ClusterIdentity(BaseModel):
    """Name and region of the cluster being bootstrapped."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="EKS cluster name")
    region: str = Field(..., min_length=1, description="AWS region")


class LocalKeyMaterial(BaseModel):
    """Result of reading an SSH public key from disk.

    ``raw_bytes`` is None when nothing exists at ``path``, in which case the
    path is treated as the name of an existing key pair.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    raw_bytes: bytes | None = None


class KeyPairRecord(BaseModel):
    """Key pair as held by the remote registry."""

    model_config = ConfigDict(frozen=True)

    name: str
    fingerprint: str
    key_pair_id: str | None = None


class ProvisionedKey(BaseModel):
    """Outcome of reconciling local key material with the registry."""

    model_config = ConfigDict(frozen=True)

    key_name: str
    public_key: bytes | None = None
    fingerprint: str | None = None
    imported: bool = False


class ClusterEndpointInfo(BaseModel):
    """API server endpoint of a kubeconfig cluster entry."""

    server: str
    certificate_authority_data: str


class ContextInfo(BaseModel):
    """Binding of a kubeconfig cluster entry to a user entry."""

    cluster: str
    user: str


class ExecEnvVar(BaseModel):
    """Environment variable passed to an exec credential plugin."""

    name: str
    value: str


class ExecConfig(BaseModel):
    """Exec credential plugin invoked by the client at connection time."""

    api_version: str
    command: str
    args: list[str] = Field(default_factory=list)
    env: list[ExecEnvVar] = Field(default_factory=list)

    def to_kubeconfig_dict(self) -> dict[str, Any]:
        """Render as the ``exec`` block of a kubeconfig user."""
        data: dict[str, Any] = {
            "apiVersion": self.api_version,
            "command": self.command,
            "args": list(self.args),
        }
        if self.env:
            data["env"] = [{"name": var.name, "value": var.value} for var in self.env]
        return data


class AuthInfo(BaseModel):
    """Kubeconfig user entry carrying at most one authentication strategy."""

    token: str | None = None
    exec: ExecConfig | None = None

    @property
    def strategy(self) -> str | None:
        """Name of the attached strategy: ``exec``, ``token`` or None."""
        if self.exec is not None:
            return "exec"
        if self.token is not None:
            return "token"
        return None

    def to_kubeconfig_dict(self) -> dict[str, Any]:
        """Render as the ``user`` block of a kubeconfig user."""
        if self.exec is not None:
            return {"exec": self.exec.to_kubeconfig_dict()}
        if self.token is not None:
            return {"token": self.token}
        return {}


class ClientConfig(BaseModel):
    """Client configuration for reaching one cluster's control plane.

    Holds exactly one cluster, one context and one user, all keyed by the
    names derived from the cluster identity and the caller.
    """

    cluster: ClusterIdentity
    cluster_name: str
    context_name: str
    profile: str | None = None
    clusters: dict[str, ClusterEndpointInfo]
    contexts: dict[str, ContextInfo]
    auth_infos: dict[str, AuthInfo]
    current_context: str

    @property
    def auth_info(self) -> AuthInfo:
        """User entry of the current context."""
        return self.auth_infos[self.context_name]

    def to_kubeconfig_dict(self) -> dict[str, Any]:
        """Render as a kubeconfig document.

        Returns:
            Dictionary ready to be dumped as YAML or handed to the kubernetes client
        """
        return {
            "apiVersion": "v1",
            "kind": "Config",
            "preferences": {},
            "clusters": [
                {
                    "name": name,
                    "cluster": {
                        "server": info.server,
                        "certificate-authority-data": info.certificate_authority_data,
                    },
                }
                for name, info in self.clusters.items()
            ],
            "contexts": [
                {"name": name, "context": {"cluster": ctx.cluster, "user": ctx.user}}
                for name, ctx in self.contexts.items()
            ],
            "users": [
                {"name": name, "user": auth.to_kubeconfig_dict()}
                for name, auth in self.auth_infos.items()
            ],
            "current-context": self.current_context,
        }
