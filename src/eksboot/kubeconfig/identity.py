"""Names derived from the cluster identity and the calling IAM principal."""

from eksboot.core.exceptions import IdentityParseError
from eksboot.core.models import ClusterIdentity

ROOT_ACCOUNT_USERNAME = "iam-root-account"
CLUSTER_DOMAIN = "eksctl.io"


def parse_caller_username(arn: str) -> str:
    """Derive a kubeconfig user name from a caller identity ARN.

    The user name is the last ``/`` separated segment of the ARN, so
    ``arn:aws:iam::111:user/alice`` gives ``alice`` and an assumed role gives
    its session name. An ARN without a path (the account root) gives
    ``iam-root-account``.

    Args:
        arn: Caller identity ARN as returned by STS GetCallerIdentity

    Returns:
        User name

    Raises:
        IdentityParseError: If the ARN is empty or ends with ``/``
    """
    if not arn or not arn.strip():
        raise IdentityParseError("caller identity ARN is empty")

    segments = arn.strip().split("/")
    if len(segments) == 1:
        return ROOT_ACCOUNT_USERNAME

    username = segments[-1]
    if not username:
        raise IdentityParseError(f"caller identity ARN {arn!r} has an empty final path segment")
    return username


def cluster_endpoint_name(cluster: ClusterIdentity) -> str:
    """Kubeconfig cluster name, ``<name>.<region>.eksctl.io``."""
    return f"{cluster.name}.{cluster.region}.{CLUSTER_DOMAIN}"


def context_name(username: str, cluster_name: str) -> str:
    """Kubeconfig context name, ``<user>@<cluster>``."""
    return f"{username}@{cluster_name}"
