"""Common CLI options for the CLI."""

import typer

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    help="Databricks CLI profile (from ~/.databrickscfg)",
)

SpecOpt = typer.Option(
    ...,
    "--spec",
    "-f",
    help="JSON file with the desired state",
    exists=True,
    dir_okay=False,
    readable=True,
)

JsonOpt = typer.Option(
    False,
    "--json",
    help="Print the resulting state as JSON instead of a table",
)

TimeoutOpt = typer.Option(
    None,
    "--timeout",
    help="Seconds to wait for a new object to become available "
    "(default: DBRECONCILE_WAIT_TIMEOUT or 300)",
    min=0,
)

YesOpt = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt")

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log API calls and poll attempts",
)
