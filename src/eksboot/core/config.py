"""Configuration management for eksboot."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from eksboot.core.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = "~/.eksboot/config.yaml"


class AWSConfig(BaseModel):
    """AWS configuration."""

    region: str = "us-west-2"
    profile: str | None = None


class SSHConfig(BaseModel):
    """SSH key configuration."""

    # A path that does not exist is taken as the name of an existing EC2 key pair
    public_key_path: str = "~/.ssh/id_rsa.pub"


class AuthenticatorConfig(BaseModel):
    """Exec credential plugin written into kubeconfigs."""

    command: str = "aws-iam-authenticator"
    api_version: str = "client.authentication.k8s.io/v1beta1"
    profile_env_var: str = "AWS_PROFILE"


class KubeconfigConfig(BaseModel):
    """Kubeconfig output configuration."""

    path: str = "~/.kube/config"
    set_current_context: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"
    output: str = "stderr"


class EksbootConfig(BaseModel):
    """Main eksboot configuration."""

    aws: AWSConfig = Field(default_factory=AWSConfig)
    ssh: SSHConfig = Field(default_factory=SSHConfig)
    authenticator: AuthenticatorConfig = Field(default_factory=AuthenticatorConfig)
    kubeconfig: KubeconfigConfig = Field(default_factory=KubeconfigConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "EksbootConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            EksbootConfig instance

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        config_path = Path(path).expanduser()

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f)
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        try:
            return cls(**(data or {}))
        except Exception as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def load(cls, path: str | Path | None = None) -> "EksbootConfig":
        """Load configuration, falling back to defaults.

        An explicit path must exist. Without one, the default location is read
        when present and defaults are used otherwise.
        """
        if path is not None:
            return cls.from_file(path)
        if Path(DEFAULT_CONFIG_PATH).expanduser().exists():
            return cls.from_file(DEFAULT_CONFIG_PATH)
        return cls()
