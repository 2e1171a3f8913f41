"""Commands for the users data source."""

import typer
from databricks.sdk.errors import DatabricksError, PermissionDenied

from dbreconcile.cli.common.context import UsersAppContext, build_users_context
from dbreconcile.cli.common.exits import die, exit_from_exc, warn_exit
from dbreconcile.cli.common.options import ProfileOpt
from dbreconcile.cli.common.output import out
from dbreconcile.core.datasources import find_users

users_app = typer.Typer(
    help="Look up workspace users.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@users_app.callback()
def _init(ctx: typer.Context, profile: str | None = ProfileOpt):
    """Initialize users context."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    ctx.obj = build_users_context(profile)


@users_app.command("list")
def list_(
    ctx: typer.Context,
    display_name_contains: str | None = typer.Option(
        None, "--display-name-contains", help="Substring of the display name"
    ),
    user_name_contains: str | None = typer.Option(
        None, "--user-name-contains", help="Substring of the user name (email)"
    ),
):
    """List users whose display name and/or user name contain a substring."""
    appctx: UsersAppContext = ctx.obj

    try:
        with out.status("Loading users..."):
            users = find_users(
                appctx.adapter,
                display_name_contains=display_name_contains,
                user_name_contains=user_name_contains,
            )
    except ValueError as e:
        die(str(e), code=2)
    except PermissionDenied as exc:
        exit_from_exc(exc, message="No permission to list users.", code=1)
    except DatabricksError as exc:
        exit_from_exc(exc, message=f"Failed to list users: {exc}", code=1)

    if not users:
        warn_exit("No users found.", code=0)

    out.header("Users")
    out.info(f"Users: {len(users)}")
    out.users_table(users, title="Users")
