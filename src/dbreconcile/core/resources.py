"""Managed resource kinds and their reconciler wiring.

Each kind pairs a ResourceSchema with the adapter for its SDK service. The
function kind is created asynchronously by the metastore and therefore waits
for the new object to become queryable; catalogs are consistent on return.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from databricks.sdk import WorkspaceClient

from dbreconcile.core.adapters.catalogs import CatalogsAdapter
from dbreconcile.core.adapters.functions import FunctionsAdapter
from dbreconcile.core.api import ResourceApi
from dbreconcile.core.config import ReconcilerConfig
from dbreconcile.core.models import CATALOG_SCHEMA, FUNCTION_SCHEMA, ResourceSchema
from dbreconcile.core.reconciler import ResourceReconciler


@dataclass(frozen=True)
class ResourceKind:
    """A managed resource kind: its schema, adapter factory and wait policy."""

    schema: ResourceSchema
    adapter_factory: Callable[[WorkspaceClient], ResourceApi]
    wait_for_ready: bool = False

    @property
    def type_name(self) -> str:
        return self.schema.type_name

    def reconciler(
        self, client: WorkspaceClient, config: ReconcilerConfig | None = None
    ) -> ResourceReconciler:
        """Build a reconciler bound to a workspace client."""
        return ResourceReconciler(
            self.adapter_factory(client),
            self.schema,
            config,
            wait_for_ready=self.wait_for_ready,
        )


FUNCTION = ResourceKind(
    schema=FUNCTION_SCHEMA,
    adapter_factory=FunctionsAdapter,
    wait_for_ready=True,
)

CATALOG = ResourceKind(
    schema=CATALOG_SCHEMA,
    adapter_factory=CatalogsAdapter,
)

RESOURCE_KINDS: dict[str, ResourceKind] = {
    kind.type_name: kind for kind in (FUNCTION, CATALOG)
}


def get_kind(type_name: str) -> ResourceKind:
    """Look up a resource kind by type name (`databricks_` prefix optional)."""
    key = type_name
    if not key.startswith("databricks_"):
        key = f"databricks_{key}"
    try:
        return RESOURCE_KINDS[key]
    except KeyError:
        known = ", ".join(sorted(RESOURCE_KINDS))
        raise ValueError(
            f"Unknown resource type '{type_name}'. Known: {known}"
        ) from None
