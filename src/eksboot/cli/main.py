"""Main CLI entry point for eksboot."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from rich.console import Console
from rich.markup import escape

from eksboot import __version__
from eksboot.core.exceptions import EksbootError

if TYPE_CHECKING:
    from eksboot.adapters.aws_adapter import AWSAdapter
    from eksboot.core.config import EksbootConfig
    from eksboot.core.models import ClusterIdentity

console = Console()


class EksbootContext:
    """Shared context for CLI commands with lazy initialization."""

    def __init__(self, config_path: str | None):
        """Initialize context with config path.

        Args:
            config_path: Path to configuration file (optional)
        """
        self.config_path = config_path
        self._config: EksbootConfig | None = None
        self._adapters: dict[str, AWSAdapter] = {}

    @property
    def config(self) -> EksbootConfig:
        """Get or load config lazily."""
        if self._config is None:
            from eksboot.core.config import EksbootConfig

            self._config = EksbootConfig.load(self.config_path)
        return self._config

    def cluster(self, name: str, region: str | None) -> ClusterIdentity:
        """Cluster identity, defaulting the region from config."""
        from eksboot.core.models import ClusterIdentity

        return ClusterIdentity(name=name, region=region or self.config.aws.region)

    def aws_adapter(self, region: str) -> AWSAdapter:
        """Get or create the AWS adapter for a region."""
        if region not in self._adapters:
            from eksboot.adapters.aws_adapter import AWSAdapter

            self._adapters[region] = AWSAdapter(region=region, profile=self.config.aws.profile)
        return self._adapters[region]


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise SystemExit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(),
    default=None,
    help="Path to configuration file (default: ~/.eksboot/config.yaml when present)",
)
@click.option("--log-level", default=None, help="Override the configured log level")
@click.option("--log-format", type=click.Choice(["json", "console"]), default=None)
@click.pass_context
def cli(
    ctx: click.Context, config: str | None, log_level: str | None, log_format: str | None
) -> None:
    """eksboot - SSH key pairs and kubeconfigs for new EKS clusters."""
    from eksboot.utils.logging import setup_logging

    eksboot_ctx = EksbootContext(config_path=config)
    try:
        logging_config = eksboot_ctx.config.logging
    except EksbootError as e:
        _fail(e)

    setup_logging(
        level=log_level or logging_config.level,
        format=log_format or logging_config.format,
        output=logging_config.output,
    )
    ctx.obj = eksboot_ctx


@cli.group(name="ssh-key")
def ssh_key() -> None:
    """Manage the EC2 key pair of a cluster."""


@ssh_key.command(name="import")
@click.option("--cluster", "cluster_name", required=True, help="Cluster name")
@click.option("--region", default=None, help="AWS region (default from config)")
@click.option("--path", default=None, help="SSH public key path, or an existing key pair name")
@click.pass_context
def ssh_key_import(
    ctx: click.Context, cluster_name: str, region: str | None, path: str | None
) -> None:
    """Import the SSH public key for a cluster unless it is already there."""
    from eksboot.keypairs.provisioner import SSHKeyProvisioner

    eksboot_ctx: EksbootContext = ctx.obj
    try:
        cluster = eksboot_ctx.cluster(cluster_name, region)
        provisioner = SSHKeyProvisioner(eksboot_ctx.aws_adapter(cluster.region))
        key = provisioner.load_or_import(path or eksboot_ctx.config.ssh.public_key_path, cluster)
    except EksbootError as e:
        _fail(e)

    if key.imported:
        console.print(f"[green]✓ Imported SSH public key as {key.key_name}[/green]")
    else:
        console.print(f"[green]✓ Using existing key pair {key.key_name}[/green]")


@ssh_key.command(name="cleanup")
@click.option("--cluster", "cluster_name", required=True, help="Cluster name")
@click.option("--region", default=None, help="AWS region (default from config)")
@click.pass_context
def ssh_key_cleanup(ctx: click.Context, cluster_name: str, region: str | None) -> None:
    """Delete the key pair imported for a cluster when exactly one matches."""
    from eksboot.keypairs.provisioner import SSHKeyProvisioner

    eksboot_ctx: EksbootContext = ctx.obj
    try:
        cluster = eksboot_ctx.cluster(cluster_name, region)
        provisioner = SSHKeyProvisioner(eksboot_ctx.aws_adapter(cluster.region))
        deleted = provisioner.cleanup_candidate_keys(cluster)
    except EksbootError as e:
        _fail(e)

    if deleted:
        console.print(f"[green]✓ Deleted key pair {deleted}[/green]")
    else:
        console.print("[yellow]No key pair deleted[/yellow]")


@cli.group()
def kubeconfig() -> None:
    """Manage kubeconfig entries for a cluster."""


@kubeconfig.command(name="write")
@click.option("--cluster", "cluster_name", required=True, help="Cluster name")
@click.option("--region", default=None, help="AWS region (default from config)")
@click.option("--embed-token", is_flag=True, help="Embed a short-lived token instead of exec auth")
@click.option("--output", default=None, help="Kubeconfig path (default from config)")
@click.pass_context
def kubeconfig_write(
    ctx: click.Context,
    cluster_name: str,
    region: str | None,
    embed_token: bool,
    output: str | None,
) -> None:
    """Write a context for the cluster into a kubeconfig file."""
    from eksboot.kubeconfig.builder import ClientConfigBuilder
    from eksboot.utils.kubeconfig import KubeconfigManager

    eksboot_ctx: EksbootContext = ctx.obj
    config = eksboot_ctx.config
    try:
        cluster = eksboot_ctx.cluster(cluster_name, region)
        adapter = eksboot_ctx.aws_adapter(cluster.region)
        endpoint, ca_data = adapter.get_cluster_endpoint(cluster.name)

        builder = ClientConfigBuilder(token_issuer=adapter, authenticator=config.authenticator)
        client_config = builder.build(
            cluster, endpoint, ca_data, adapter.get_caller_arn(), profile=config.aws.profile
        )
        if embed_token:
            client_config = builder.with_embedded_token(client_config)
        else:
            client_config = builder.with_exec_plugin(client_config)

        manager = KubeconfigManager(output or config.kubeconfig.path)
        path = manager.merge(client_config, set_current_context=config.kubeconfig.set_current_context)
    except EksbootError as e:
        _fail(e)

    console.print(f"[green]✓ Saved context {client_config.context_name} to {path}[/green]")


@kubeconfig.command(name="list")
@click.option("--output", default=None, help="Kubeconfig path (default from config)")
@click.pass_context
def kubeconfig_list(ctx: click.Context, output: str | None) -> None:
    """List contexts in a kubeconfig file."""
    from eksboot.utils.kubeconfig import KubeconfigManager

    eksboot_ctx: EksbootContext = ctx.obj
    try:
        contexts = KubeconfigManager(output or eksboot_ctx.config.kubeconfig.path).list_contexts()
    except EksbootError as e:
        _fail(e)

    if not contexts:
        console.print("[yellow]No contexts found[/yellow]")
        return
    for name in contexts:
        console.print(name)


@kubeconfig.command(name="remove")
@click.argument("context_name")
@click.option("--output", default=None, help="Kubeconfig path (default from config)")
@click.pass_context
def kubeconfig_remove(ctx: click.Context, context_name: str, output: str | None) -> None:
    """Remove a context with the cluster and user it references."""
    from eksboot.utils.kubeconfig import KubeconfigManager

    eksboot_ctx: EksbootContext = ctx.obj
    try:
        KubeconfigManager(output or eksboot_ctx.config.kubeconfig.path).remove_context(context_name)
    except EksbootError as e:
        _fail(e)

    console.print(f"[green]✓ Removed context {context_name}[/green]")


@cli.group()
def nodes() -> None:
    """Inspect cluster nodes."""


@nodes.command(name="check")
@click.option("--cluster", "cluster_name", required=True, help="Cluster name")
@click.option("--region", default=None, help="AWS region (default from config)")
@click.pass_context
def nodes_check(ctx: click.Context, cluster_name: str, region: str | None) -> None:
    """Report nodes that are not Ready."""
    from eksboot.kubeconfig.builder import ClientConfigBuilder

    eksboot_ctx: EksbootContext = ctx.obj
    try:
        cluster = eksboot_ctx.cluster(cluster_name, region)
        adapter = eksboot_ctx.aws_adapter(cluster.region)
        endpoint, ca_data = adapter.get_cluster_endpoint(cluster.name)

        builder = ClientConfigBuilder(token_issuer=adapter)
        client_config = builder.build(cluster, endpoint, ca_data, adapter.get_caller_arn())
        unready = builder.to_client_with_embedded_token(client_config).check_nodes_ready()
    except EksbootError as e:
        _fail(e)

    if unready:
        console.print(f"[red]✗ {len(unready)} node(s) not ready[/red]")
        for name in unready:
            console.print(f"  - {name}")
        raise SystemExit(1)

    console.print("[green]✓ All nodes ready[/green]")


if __name__ == "__main__":
    cli()
