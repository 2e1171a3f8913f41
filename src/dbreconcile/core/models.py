"""Core domain models for managed Unity Catalog resources.

These models describe the desired state of one remote object per resource
kind, in a simple immutable form keyed by the same attribute names the
Databricks REST API uses. They are intentionally free of Databricks SDK types
and CLI concerns; nested structures (function parameters, properties) are kept
as plain JSON-shaped mappings.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping


@dataclass(frozen=True)
class FunctionState:
    """Desired (and observed) state of a Unity Catalog function."""

    name: str | None = None
    catalog_name: str | None = None
    schema_name: str | None = None
    input_params: Mapping[str, Any] | None = None
    data_type: str | None = None
    full_data_type: str | None = None
    return_params: Mapping[str, Any] | None = None
    routine_body: str | None = None
    routine_definition: str | None = None
    routine_dependencies: Mapping[str, Any] | None = None
    parameter_style: str | None = None
    is_deterministic: bool | None = None
    sql_data_access: str | None = None
    is_null_call: bool | None = None
    security_type: str | None = None
    specific_name: str | None = None
    external_language: str | None = None
    external_name: str | None = None
    sql_path: str | None = None
    comment: str | None = None
    owner: str | None = None
    properties: str | None = None
    # computed by the server
    full_name: str | None = None
    function_id: str | None = None
    metastore_id: str | None = None
    created_at: int | None = None
    created_by: str | None = None
    updated_at: int | None = None
    updated_by: str | None = None


@dataclass(frozen=True)
class CatalogState:
    """Desired (and observed) state of a Unity Catalog catalog."""

    name: str | None = None
    comment: str | None = None
    owner: str | None = None
    properties: Mapping[str, str] | None = None
    options: Mapping[str, str] | None = None
    storage_root: str | None = None
    provider_name: str | None = None
    share_name: str | None = None
    connection_name: str | None = None
    # computed by the server
    full_name: str | None = None
    metastore_id: str | None = None
    catalog_type: str | None = None
    created_at: int | None = None
    created_by: str | None = None
    updated_at: int | None = None
    updated_by: str | None = None


@dataclass(frozen=True)
class UserInfo:
    """Lightweight representation of a workspace user."""

    id: str
    user_name: str | None = None
    display_name: str | None = None
    active: bool | None = None


@dataclass(frozen=True)
class ResourceSchema:
    """
    Attribute roles for one resource kind.

    Attributes:
        type_name: Provider-qualified resource type (e.g. `databricks_function`).
        state_type: The dataclass holding desired state for this kind.
        required: Attributes that must be set on create.
        read_only: Attributes only ever populated from API responses.
        identity: Attributes that cannot change once the object exists.
        mutable: Attributes sent on update.
        handle_field: Attribute holding the canonical remote identity.
        handle_parts: Attributes joined with `.` when the handle is not yet known.
    """

    type_name: str
    state_type: type
    required: frozenset[str]
    read_only: frozenset[str]
    identity: frozenset[str]
    mutable: frozenset[str]
    handle_field: str
    handle_parts: tuple[str, ...]

    def attribute_names(self) -> list[str]:
        """Return declared attribute names in definition order."""
        return [f.name for f in fields(self.state_type)]

    def handle_of(self, state: Any) -> str | None:
        """Return the remote identity for a state, deriving it when needed."""
        handle = getattr(state, self.handle_field, None)
        if handle:
            return handle
        parts = [getattr(state, p, None) for p in self.handle_parts]
        if not all(parts):
            return None
        return ".".join(parts)


FUNCTION_SCHEMA = ResourceSchema(
    type_name="databricks_function",
    state_type=FunctionState,
    required=frozenset(
        {
            "name",
            "catalog_name",
            "schema_name",
            "input_params",
            "data_type",
            "routine_body",
            "routine_definition",
        }
    ),
    read_only=frozenset(
        {
            "full_name",
            "function_id",
            "metastore_id",
            "created_at",
            "created_by",
            "updated_at",
            "updated_by",
        }
    ),
    identity=frozenset({"name", "catalog_name", "schema_name"}),
    mutable=frozenset({"owner"}),
    handle_field="full_name",
    handle_parts=("catalog_name", "schema_name", "name"),
)

CATALOG_SCHEMA = ResourceSchema(
    type_name="databricks_catalog",
    state_type=CatalogState,
    required=frozenset({"name"}),
    read_only=frozenset(
        {
            "full_name",
            "metastore_id",
            "catalog_type",
            "created_at",
            "created_by",
            "updated_at",
            "updated_by",
        }
    ),
    identity=frozenset(
        {"name", "storage_root", "provider_name", "share_name", "connection_name"}
    ),
    mutable=frozenset({"comment", "owner", "properties", "options"}),
    handle_field="name",
    handle_parts=("name",),
)
