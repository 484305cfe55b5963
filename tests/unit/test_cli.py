"""Unit tests for eksboot CLI commands.

Tests cover command parsing, config handling and the calls made on a mocked
AWS adapter. The adapter is patched where the CLI imports it lazily.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import yaml
from click.testing import CliRunner

from eksboot import __version__
from eksboot.cli.main import cli
from eksboot.core.models import KeyPairRecord
from eksboot.interfaces.exceptions import RegistryError
from eksboot.kubeconfig.builder import ClientConfigBuilder


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep the CLI from reconfiguring structlog onto the runner's streams."""
    with patch("eksboot.utils.logging.setup_logging") as mock_setup:
        yield mock_setup


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path, rsa_public_key: bytes) -> Path:
    """Config file pointing at a real public key and a temporary kubeconfig."""
    key_path = tmp_path / "id_rsa.pub"
    key_path.write_bytes(rsa_public_key)

    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        yaml.safe_dump(
            {
                "aws": {"region": "us-east-1"},
                "ssh": {"public_key_path": str(key_path)},
                "kubeconfig": {"path": str(tmp_path / "kube" / "config")},
                "logging": {"level": "WARNING"},
            }
        )
    )
    return config_file


@pytest.fixture
def mock_adapter():
    """Patch the AWS adapter class and return the instance the CLI gets."""
    with patch("eksboot.adapters.aws_adapter.AWSAdapter") as mock_cls:
        adapter = MagicMock()
        adapter.describe.return_value = []
        adapter.get_cluster_endpoint.return_value = ("https://api.prod.example.com", "Y2E=")
        adapter.get_caller_arn.return_value = "arn:aws:iam::111122223333:user/alice"
        adapter.issue_token.return_value = "k8s-aws-v1.abc"
        mock_cls.return_value = adapter
        adapter.cls = mock_cls
        yield adapter


def test_version(cli_runner: CliRunner) -> None:
    """Test --version prints the package version."""
    result = cli_runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_missing_config_file(cli_runner: CliRunner, tmp_path: Path) -> None:
    """Test an explicit config path that does not exist fails cleanly."""
    result = cli_runner.invoke(
        cli, ["--config", str(tmp_path / "missing.yaml"), "ssh-key", "cleanup", "--cluster", "prod"]
    )

    assert result.exit_code == 1
    assert "Configuration file not found" in result.output


def test_logging_configured_from_options(
    cli_runner: CliRunner, config_file: Path, mock_adapter: MagicMock, no_logging_setup: MagicMock
) -> None:
    """Test command line options override the logging config."""
    cli_runner.invoke(
        cli,
        ["--config", str(config_file), "--log-format", "json", "ssh-key", "cleanup", "--cluster", "prod"],
    )

    no_logging_setup.assert_called_once_with(level="WARNING", format="json", output="stderr")


class TestSSHKeyImport:
    """Tests for the ssh-key import command."""

    def test_imports_configured_key(
        self, cli_runner: CliRunner, config_file: Path, mock_adapter: MagicMock
    ) -> None:
        result = cli_runner.invoke(
            cli, ["--config", str(config_file), "ssh-key", "import", "--cluster", "prod"]
        )

        assert result.exit_code == 0, result.output
        assert "Imported SSH public key" in result.output
        mock_adapter.cls.assert_called_once_with(region="us-east-1", profile=None)
        name, _ = mock_adapter.import_key.call_args.args
        assert name.startswith("eksctl-prod-")

    def test_existing_key_pair_name(
        self, cli_runner: CliRunner, config_file: Path, mock_adapter: MagicMock
    ) -> None:
        mock_adapter.describe.return_value = [KeyPairRecord(name="ops-key", fingerprint="aa:bb")]

        result = cli_runner.invoke(
            cli,
            [
                "--config",
                str(config_file),
                "ssh-key",
                "import",
                "--cluster",
                "prod",
                "--region",
                "eu-west-1",
                "--path",
                "ops-key",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Using existing key pair ops-key" in result.output
        mock_adapter.cls.assert_called_once_with(region="eu-west-1", profile=None)
        mock_adapter.describe.assert_called_once_with("ops-key")
        mock_adapter.import_key.assert_not_called()

    def test_registry_failure(
        self, cli_runner: CliRunner, config_file: Path, mock_adapter: MagicMock
    ) -> None:
        mock_adapter.describe.side_effect = RegistryError("throttled")

        result = cli_runner.invoke(
            cli, ["--config", str(config_file), "ssh-key", "import", "--cluster", "prod"]
        )

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "throttled" in result.output


class TestSSHKeyCleanup:
    """Tests for the ssh-key cleanup command."""

    def test_deletes_single_candidate(
        self, cli_runner: CliRunner, config_file: Path, mock_adapter: MagicMock
    ) -> None:
        mock_adapter.describe.return_value = [
            KeyPairRecord(name="eksctl-prod-aa:bb", fingerprint="aa:bb"),
            KeyPairRecord(name="unrelated", fingerprint="cc:dd"),
        ]

        result = cli_runner.invoke(
            cli, ["--config", str(config_file), "ssh-key", "cleanup", "--cluster", "prod"]
        )

        assert result.exit_code == 0, result.output
        assert "Deleted key pair eksctl-prod-aa:bb" in result.output
        mock_adapter.delete.assert_called_once_with("eksctl-prod-aa:bb")

    def test_nothing_to_delete(
        self, cli_runner: CliRunner, config_file: Path, mock_adapter: MagicMock
    ) -> None:
        result = cli_runner.invoke(
            cli, ["--config", str(config_file), "ssh-key", "cleanup", "--cluster", "prod"]
        )

        assert result.exit_code == 0, result.output
        assert "No key pair deleted" in result.output
        mock_adapter.delete.assert_not_called()


class TestKubeconfigWrite:
    """Tests for the kubeconfig write command."""

    def test_writes_exec_plugin_context(
        self, cli_runner: CliRunner, config_file: Path, tmp_path: Path, mock_adapter: MagicMock
    ) -> None:
        result = cli_runner.invoke(
            cli, ["--config", str(config_file), "kubeconfig", "write", "--cluster", "prod"]
        )

        assert result.exit_code == 0, result.output
        document = yaml.safe_load((tmp_path / "kube" / "config").read_text())
        assert document["current-context"] == "alice@prod.us-east-1.eksctl.io"
        assert document["clusters"][0]["cluster"]["server"] == "https://api.prod.example.com"
        user = document["users"][0]["user"]
        assert user["exec"]["command"] == "aws-iam-authenticator"
        assert user["exec"]["args"] == ["token", "-i", "prod"]
        mock_adapter.issue_token.assert_not_called()

    def test_writes_embedded_token(
        self, cli_runner: CliRunner, config_file: Path, tmp_path: Path, mock_adapter: MagicMock
    ) -> None:
        output = tmp_path / "other-config"

        result = cli_runner.invoke(
            cli,
            [
                "--config",
                str(config_file),
                "kubeconfig",
                "write",
                "--cluster",
                "prod",
                "--embed-token",
                "--output",
                str(output),
            ],
        )

        assert result.exit_code == 0, result.output
        document = yaml.safe_load(output.read_text())
        assert document["users"][0]["user"] == {"token": "k8s-aws-v1.abc"}
        mock_adapter.issue_token.assert_called_once_with("prod")

    def test_token_failure(
        self, cli_runner: CliRunner, config_file: Path, mock_adapter: MagicMock
    ) -> None:
        from eksboot.interfaces.exceptions import TokenIssuerError

        mock_adapter.issue_token.side_effect = TokenIssuerError("no credentials")

        result = cli_runner.invoke(
            cli,
            ["--config", str(config_file), "kubeconfig", "write", "--cluster", "prod", "--embed-token"],
        )

        assert result.exit_code == 1
        assert "could not get token for cluster prod" in result.output

    def test_unwritable_output(
        self, cli_runner: CliRunner, config_file: Path, tmp_path: Path, mock_adapter: MagicMock
    ) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")

        result = cli_runner.invoke(
            cli,
            [
                "--config",
                str(config_file),
                "kubeconfig",
                "write",
                "--cluster",
                "prod",
                "--output",
                str(blocker / "config"),
            ],
        )

        assert result.exit_code == 1
        assert "Failed to write kubeconfig" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)


class TestKubeconfigListRemove:
    """Tests for the kubeconfig list and remove commands."""

    def test_list_empty(self, cli_runner: CliRunner, config_file: Path) -> None:
        result = cli_runner.invoke(cli, ["--config", str(config_file), "kubeconfig", "list"])

        assert result.exit_code == 0, result.output
        assert "No contexts found" in result.output

    def test_write_list_remove(
        self, cli_runner: CliRunner, config_file: Path, tmp_path: Path, mock_adapter: MagicMock
    ) -> None:
        base = ["--config", str(config_file), "kubeconfig"]
        cli_runner.invoke(cli, [*base, "write", "--cluster", "prod"])

        listed = cli_runner.invoke(cli, [*base, "list"])
        assert listed.exit_code == 0, listed.output
        assert "alice@prod.us-east-1.eksctl.io" in listed.output

        removed = cli_runner.invoke(cli, [*base, "remove", "alice@prod.us-east-1.eksctl.io"])
        assert removed.exit_code == 0, removed.output

        document = yaml.safe_load((tmp_path / "kube" / "config").read_text())
        assert document["contexts"] == []
        assert document["clusters"] == []
        assert document["users"] == []


class TestNodesCheck:
    """Tests for the nodes check command."""

    def test_all_ready(
        self, cli_runner: CliRunner, config_file: Path, mock_adapter: MagicMock
    ) -> None:
        k8s = MagicMock()
        k8s.check_nodes_ready.return_value = []

        with patch.object(ClientConfigBuilder, "to_client_with_embedded_token", return_value=k8s):
            result = cli_runner.invoke(
                cli, ["--config", str(config_file), "nodes", "check", "--cluster", "prod"]
            )

        assert result.exit_code == 0, result.output
        assert "All nodes ready" in result.output

    def test_unready_nodes(
        self, cli_runner: CliRunner, config_file: Path, mock_adapter: MagicMock
    ) -> None:
        k8s = MagicMock()
        k8s.check_nodes_ready.return_value = ["ip-10-0-0-1"]

        with patch.object(ClientConfigBuilder, "to_client_with_embedded_token", return_value=k8s):
            result = cli_runner.invoke(
                cli, ["--config", str(config_file), "nodes", "check", "--cluster", "prod"]
            )

        assert result.exit_code == 1
        assert "ip-10-0-0-1" in result.output
