"""Conversion between desired-state dataclasses and API payloads.

Both directions work on JSON-shaped mappings (the same shape the Databricks
SDK produces with `as_dict()` and accepts with `from_dict()`), so the
reconciler never has to know about SDK request or response classes.

Mismatches are reported as diagnostics; nothing here raises on bad input.
"""

from __future__ import annotations

import dataclasses
import typing
from collections.abc import Mapping
from enum import Enum
from functools import lru_cache
from typing import Any, Iterable

from dbreconcile.core.diagnostics import Diagnostics
from dbreconcile.core.errors import ConversionError
from dbreconcile.core.models import ResourceSchema


def _plain(value: Any) -> Any:
    """Return a JSON-shaped copy of value (enums by value, mappings as dicts)."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


@lru_cache(maxsize=None)
def _accepted_types(state_type: type) -> dict[str, tuple[type, ...]]:
    """Map each attribute of state_type to the Python types it accepts."""
    hints = typing.get_type_hints(state_type)
    accepted: dict[str, tuple[type, ...]] = {}
    for name, hint in hints.items():
        members = [a for a in typing.get_args(hint) if a is not type(None)] or [hint]
        types: list[type] = []
        for member in members:
            origin = typing.get_origin(member) or member
            if origin is Mapping or (
                isinstance(origin, type) and issubclass(origin, Mapping)
            ):
                types.append(Mapping)
            elif isinstance(origin, type):
                types.append(origin)
        accepted[name] = tuple(types)
    return accepted


def _matches(value: Any, types: tuple[type, ...]) -> bool:
    if not types:
        return True
    # bool is an int subclass; keep the two apart
    if isinstance(value, bool):
        return bool in types
    return isinstance(value, types)


def to_payload(
    state: Any,
    schema: ResourceSchema,
    *,
    only: Iterable[str] | None = None,
    require: bool = False,
    include_read_only: bool = False,
) -> tuple[dict[str, Any], Diagnostics]:
    """
    Convert a desired state into an API payload.

    Args:
        state: Desired-state dataclass instance for the schema's kind.
        schema: Attribute roles for the resource kind.
        only: Restrict the payload to these attributes.
        require: Report every unset required attribute as an error.
        include_read_only: Keep server-computed attributes (for display).

    Returns:
        The payload (unset attributes omitted) and the conversion diagnostics.
    """
    diags = Diagnostics()
    selected = set(only) if only is not None else None
    payload: dict[str, Any] = {}

    for name in schema.attribute_names():
        value = getattr(state, name)
        if require and name in schema.required and value is None:
            diags.add_exception(
                ConversionError(
                    f"missing required attribute '{name}'",
                    f"{schema.type_name} requires '{name}' to be set",
                )
            )
            continue
        if name in schema.read_only and not include_read_only:
            continue
        if selected is not None and name not in selected:
            continue
        if value is None:
            continue
        payload[name] = _plain(value)

    return payload, diags


def apply_payload(
    state: Any,
    payload: Mapping[str, Any],
    schema: ResourceSchema,
    *,
    strict: bool = False,
) -> tuple[Any, Diagnostics]:
    """
    Overlay an API payload onto a desired state.

    Attributes present in the payload replace those of `state`; attributes
    absent from it (or null) are left untouched. Keys the schema does not
    declare are ignored unless `strict` is set, in which case they are
    reported as errors (used when loading operator-supplied specs).

    Returns:
        A new state instance and the conversion diagnostics.
    """
    diags = Diagnostics()
    accepted = _accepted_types(schema.state_type)
    updates: dict[str, Any] = {}

    for key, raw in payload.items():
        if key not in accepted:
            if strict:
                diags.add_exception(
                    ConversionError(
                        f"unknown attribute '{key}'",
                        f"{schema.type_name} has no attribute '{key}'",
                    )
                )
            continue
        if raw is None:
            continue
        value = _plain(raw)
        if not _matches(value, accepted[key]):
            diags.add_exception(
                ConversionError(
                    f"invalid value for attribute '{key}'",
                    f"expected {', '.join(t.__name__ for t in accepted[key])}, "
                    f"got {type(value).__name__}",
                )
            )
            continue
        updates[key] = value

    return dataclasses.replace(state, **updates), diags


def state_from_mapping(
    schema: ResourceSchema, data: Mapping[str, Any]
) -> tuple[Any, Diagnostics]:
    """Build a desired state from an operator-supplied mapping."""
    return apply_payload(schema.state_type(), data, schema, strict=True)
