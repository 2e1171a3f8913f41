"""Lifecycle commands (create/read/update/delete/import) for managed resources.

One Typer sub-application is built per resource kind; all of them share the
same commands and differ only in the schema and adapter they are bound to.
"""

from __future__ import annotations

import json
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable

import typer

from dbreconcile.cli.common.context import ResourceAppContext, build_resource_context
from dbreconcile.cli.common.exits import die, exit_from_exc, ok_exit, warn_exit
from dbreconcile.cli.common.options import (
    JsonOpt,
    ProfileOpt,
    SpecOpt,
    TimeoutOpt,
    YesOpt,
)
from dbreconcile.cli.common.output import out
from dbreconcile.core.convert import state_from_mapping, to_payload
from dbreconcile.core.models import ResourceSchema
from dbreconcile.core.reconciler import ReconcileResult
from dbreconcile.core.resources import ResourceKind


def _load_spec_or_exit(path: Path, schema: ResourceSchema) -> Any:
    """Read a JSON desired-state file and convert input errors into exit code 2."""
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        exit_from_exc(exc, message=f"Could not read spec '{path}': {exc}", code=2)
    if not isinstance(data, dict):
        die("Spec must be a JSON object.", code=2)

    state, diags = state_from_mapping(schema, data)
    if diags.has_error():
        out.diagnostics(diags)
        raise typer.Exit(2)
    return state


def _seed(schema: ResourceSchema, handle: str) -> Any:
    return schema.state_type(**{schema.handle_field: handle})


def _run_cancellable(
    fn: Callable[..., ReconcileResult], *args: Any, message: str
) -> ReconcileResult:
    """Run a waiting operation in a worker so Ctrl-C cancels it cooperatively."""
    cancel = threading.Event()
    with ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(fn, *args, cancel=cancel)
        try:
            with out.status(message):
                return future.result()
        except KeyboardInterrupt:
            cancel.set()
            out.warn("Cancelling...")
            return future.result()


def _report(
    result: ReconcileResult, schema: ResourceSchema, *, done: str, as_json: bool
) -> None:
    """Print diagnostics and the resulting state; exit 1 on errors."""
    out.diagnostics(result.diagnostics)
    if result.state is not None:
        payload, _ = to_payload(result.state, schema, include_read_only=True)
        if as_json:
            typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        else:
            out.state_table(payload, title=schema.type_name)
    if not result.ok:
        raise typer.Exit(1)
    out.success(done)


def build_resource_app(kind: ResourceKind, help_text: str) -> typer.Typer:
    """Build the lifecycle sub-application for one resource kind."""
    schema = kind.schema
    noun = schema.type_name.removeprefix("databricks_")

    app = typer.Typer(
        help=help_text,
        no_args_is_help=False,
        invoke_without_command=True,
    )

    @app.callback()
    def _init(
        ctx: typer.Context,
        profile: str | None = ProfileOpt,
        timeout: float | None = TimeoutOpt,
    ):
        """Initialize the resource context."""
        if ctx.invoked_subcommand is None:
            typer.echo(ctx.get_help())
            raise typer.Exit(0)
        ctx.obj = build_resource_context(kind, profile, wait_timeout=timeout)

    @app.command()
    def create(
        ctx: typer.Context,
        spec: Path = SpecOpt,
        as_json: bool = JsonOpt,
    ):
        """Create the object described by a desired-state file."""
        appctx: ResourceAppContext = ctx.obj
        desired = _load_spec_or_exit(spec, schema)
        result = _run_cancellable(
            appctx.reconciler.create, desired, message=f"Creating {noun}..."
        )
        _report(result, schema, done=f"{noun} created", as_json=as_json)

    @app.command()
    def read(
        ctx: typer.Context,
        handle: str = typer.Argument(..., help=f"{noun} {schema.handle_field}"),
        as_json: bool = JsonOpt,
    ):
        """Show the current remote state of an object."""
        appctx: ResourceAppContext = ctx.obj
        with out.status(f"Reading {noun}..."):
            result = appctx.reconciler.read(_seed(schema, handle))
        if result.removed:
            warn_exit(f"{noun} {handle} does not exist.", code=0)
        _report(result, schema, done=f"{noun} read", as_json=as_json)

    @app.command()
    def update(
        ctx: typer.Context,
        spec: Path = SpecOpt,
        as_json: bool = JsonOpt,
    ):
        """Apply the mutable attributes of a desired-state file."""
        appctx: ResourceAppContext = ctx.obj
        desired = _load_spec_or_exit(spec, schema)
        handle = schema.handle_of(desired)
        if not handle:
            die(
                f"Spec must identify the {noun} "
                f"({', '.join(schema.handle_parts)}).",
                code=2,
            )

        with out.status(f"Reading {noun}..."):
            prior = appctx.reconciler.read(desired)
        if prior.removed:
            die(f"{noun} {handle} does not exist; create it first.", code=1)
        if not prior.ok:
            _report(prior, schema, done="", as_json=as_json)

        with out.status(f"Updating {noun}..."):
            result = appctx.reconciler.update(desired, prior.state)
        _report(result, schema, done=f"{noun} updated", as_json=as_json)

    @app.command()
    def delete(
        ctx: typer.Context,
        handle: str = typer.Argument(..., help=f"{noun} {schema.handle_field}"),
        yes: bool = YesOpt,
    ):
        """Delete an object. Deleting an absent object succeeds."""
        appctx: ResourceAppContext = ctx.obj
        if not yes and not out.confirm(f"Delete {noun} {handle}?"):
            ok_exit("Cancelled")

        with out.status(f"Deleting {noun}..."):
            result = appctx.reconciler.delete(_seed(schema, handle))
        _report(result, schema, done=f"{noun} {handle} deleted", as_json=False)

    @app.command("import")
    def import_(
        ctx: typer.Context,
        handle: str = typer.Argument(..., help=f"{noun} {schema.handle_field}"),
        as_json: bool = JsonOpt,
    ):
        """Seed state for an existing object from its identity."""
        appctx: ResourceAppContext = ctx.obj
        with out.status(f"Importing {noun}..."):
            result = appctx.reconciler.import_state(handle)
        _report(result, schema, done=f"{noun} imported", as_json=as_json)

    return app
