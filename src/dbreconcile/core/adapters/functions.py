from __future__ import annotations

from typing import Any, Mapping

from databricks.sdk import WorkspaceClient
from databricks.sdk.service.catalog import CreateFunction

from dbreconcile.core.api import ApiResult, call_api


class FunctionsAdapter:
    """Adapter around Databricks SDK Unity Catalog Functions APIs."""

    def __init__(self, client: WorkspaceClient) -> None:
        self.client = client

    def create(self, payload: Mapping[str, Any]) -> ApiResult:
        """Create a function from a CreateFunction-shaped payload."""
        try:
            function_info = CreateFunction.from_dict(dict(payload))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            # nested attributes such as input_params are only shape-checked here
            return ApiResult.failed(f"invalid function definition: {exc}")
        return call_api(self.client.functions.create, function_info=function_info)

    def get(self, handle: str) -> ApiResult:
        """Get a function by full name (catalog.schema.function)."""
        return call_api(self.client.functions.get, handle)

    def update(self, handle: str, payload: Mapping[str, Any]) -> ApiResult:
        """Update a function. Only ownership can change in place."""
        return call_api(self.client.functions.update, handle, **dict(payload))

    def delete(self, handle: str) -> ApiResult:
        """Delete a function by full name."""
        return call_api(self.client.functions.delete, handle)
