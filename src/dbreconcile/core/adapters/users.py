from __future__ import annotations

from databricks.sdk import WorkspaceClient

from dbreconcile.core.models import UserInfo


class UsersAdapter:
    """Adapter around Databricks SDK SCIM Users APIs."""

    _ATTRIBUTES = "id,userName,displayName,active"

    def __init__(self, client: WorkspaceClient) -> None:
        self.client = client

    def list_users(self, scim_filter: str | None = None) -> list[UserInfo]:
        """List users, optionally narrowed with a SCIM filter expression."""
        out: list[UserInfo] = []
        for u in self.client.users.list(
            filter=scim_filter, attributes=self._ATTRIBUTES
        ):
            user_id = getattr(u, "id", None)
            if not user_id:
                continue
            out.append(
                UserInfo(
                    id=user_id,
                    user_name=getattr(u, "user_name", None),
                    display_name=getattr(u, "display_name", None),
                    active=getattr(u, "active", None),
                )
            )
        return out
