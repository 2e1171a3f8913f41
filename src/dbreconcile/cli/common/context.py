"""Application context management for the CLI."""

from dataclasses import dataclass, replace

from databricks.sdk import WorkspaceClient

from dbreconcile.cli.common.exits import die
from dbreconcile.core.adapters.users import UsersAdapter
from dbreconcile.core.auth import get_client
from dbreconcile.core.config import ReconcilerConfig
from dbreconcile.core.errors import AuthError
from dbreconcile.core.reconciler import ResourceReconciler
from dbreconcile.core.resources import ResourceKind


@dataclass
class ResourceAppContext:
    """Application context holding the Databricks client and one reconciler."""

    profile: str | None
    client: WorkspaceClient
    kind: ResourceKind
    reconciler: ResourceReconciler


@dataclass
class UsersAppContext:
    """Application context holding the Databricks client and users adapter."""

    profile: str | None
    client: WorkspaceClient
    adapter: UsersAdapter


def _client_or_exit(profile: str | None, resource: str) -> WorkspaceClient:
    try:
        return get_client(profile, resource=resource)
    except AuthError as exc:
        die(str(exc), code=1)


def build_resource_context(
    kind: ResourceKind,
    profile: str | None,
    *,
    wait_timeout: float | None = None,
) -> ResourceAppContext:
    """Build the context for lifecycle commands of one resource kind.

    Args:
        kind: Resource kind the commands operate on.
        profile: Optional Databricks profile name to use for authentication.
        wait_timeout: Overrides the configured stabilization timeout.
    """
    client = _client_or_exit(profile, kind.type_name)
    config = ReconcilerConfig.from_env()
    if wait_timeout is not None:
        config = replace(config, wait_timeout=wait_timeout)
    return ResourceAppContext(
        profile=profile,
        client=client,
        kind=kind,
        reconciler=kind.reconciler(client, config),
    )


def build_users_context(profile: str | None) -> UsersAppContext:
    """Build the context for the users data source commands."""
    client = _client_or_exit(profile, "databricks_users")
    return UsersAppContext(profile=profile, client=client, adapter=UsersAdapter(client))
