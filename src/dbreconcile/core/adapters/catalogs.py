from __future__ import annotations

from typing import Any, Mapping

from databricks.sdk import WorkspaceClient

from dbreconcile.core.api import ApiResult, call_api

# catalogs.create() does not take an owner; ownership is applied by update
_CREATE_ONLY_SKIPPED = ("owner",)


class CatalogsAdapter:
    """Adapter around Databricks SDK Unity Catalog Catalogs APIs."""

    def __init__(self, client: WorkspaceClient, *, force_delete: bool = False) -> None:
        self.client = client
        self.force_delete = force_delete

    def create(self, payload: Mapping[str, Any]) -> ApiResult:
        """Create a catalog. The payload keys map 1:1 onto SDK keyword arguments."""
        kwargs = {k: v for k, v in payload.items() if k not in _CREATE_ONLY_SKIPPED}
        return call_api(self.client.catalogs.create, **kwargs)

    def get(self, handle: str) -> ApiResult:
        """Get a catalog by name."""
        return call_api(self.client.catalogs.get, handle)

    def update(self, handle: str, payload: Mapping[str, Any]) -> ApiResult:
        """Update comment/owner/properties/options of a catalog."""
        return call_api(self.client.catalogs.update, handle, **dict(payload))

    def delete(self, handle: str) -> ApiResult:
        """Delete a catalog (optionally forced, dropping its schemas)."""
        return call_api(self.client.catalogs.delete, handle, force=self.force_delete)
