"""CLI application for reconciling Databricks Unity Catalog resources."""

import typer

from dbreconcile.cli.commands.resources import build_resource_app
from dbreconcile.cli.commands.users import users_app
from dbreconcile.cli.common.logs import configure_logging
from dbreconcile.cli.common.options import VerboseOpt
from dbreconcile.core.resources import CATALOG, FUNCTION

app = typer.Typer(
    help="dbreconcile - declarative Databricks Unity Catalog resources",
    no_args_is_help=True,
)


@app.callback()
def _main(verbose: bool = VerboseOpt):
    """Configure logging for every command."""
    configure_logging(verbose)


app.add_typer(
    build_resource_app(FUNCTION, "Manage Unity Catalog functions."),
    name="functions",
)
app.add_typer(
    build_resource_app(CATALOG, "Manage Unity Catalog catalogs."),
    name="catalogs",
)
app.add_typer(users_app, name="users")


if __name__ == "__main__":
    app()
