"""Read-only data sources.

Data sources only ever read: they resolve a query to a list of remote objects
and have no lifecycle of their own.
"""

from __future__ import annotations

from typing import Protocol

from dbreconcile.core.models import UserInfo


class UsersLookup(Protocol):
    """Interface for listing users with a SCIM filter."""

    def list_users(self, scim_filter: str | None = None) -> list[UserInfo]:
        """Return users matching the filter."""
        ...


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_user_filter(
    display_name_contains: str | None = None,
    user_name_contains: str | None = None,
) -> str:
    """
    Build a SCIM filter expression for user lookups.

    Both criteria are substring matches (`co`) and are combined with `and`.
    At least one must be provided.
    """
    clauses = []
    if display_name_contains:
        clauses.append(f"displayName co {_quote(display_name_contains)}")
    if user_name_contains:
        clauses.append(f"userName co {_quote(user_name_contains)}")
    if not clauses:
        raise ValueError(
            "Provide at least one of display_name_contains or user_name_contains."
        )
    return " and ".join(clauses)


def find_users(
    adapter: UsersLookup,
    *,
    display_name_contains: str | None = None,
    user_name_contains: str | None = None,
) -> list[UserInfo]:
    """
    Find workspace users by substring of display name and/or user name.

    Results are sorted by user name so repeated reads are stable.
    """
    scim_filter = build_user_filter(display_name_contains, user_name_contains)
    users = adapter.list_users(scim_filter)
    return sorted(users, key=lambda u: ((u.user_name or "").lower(), u.id))
