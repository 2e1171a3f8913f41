"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from dbreconcile.cli.common.tui_style import QUESTIONARY_STYLE_CONFIRM
from dbreconcile.core.diagnostics import Diagnostics, Severity

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def _q(self, message: str) -> str:
        """Prefix Questionary prompts consistently."""
        return f"[dbreconcile] {message}"

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation using a standardized Questionary prompt.

        Args:
            message: Confirmation question shown to the user.
            default: Default answer if the user just presses enter.

        Returns:
            True if the user confirms, False otherwise.
        """
        console.print("[meta]Use y/n then Enter[/]")
        prompt = questionary.confirm(
            self._q(message),
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        )
        return bool(prompt.ask())

    def diagnostics(self, diags: Diagnostics) -> None:
        """Print every diagnostic as an error or warning line."""
        for d in diags:
            line = f"{d.summary}: {d.detail}" if d.detail else d.summary
            if d.kind is not None:
                line = f"{line} [meta]({d.kind.value})[/]"
            if d.severity == Severity.ERROR:
                self.error(line)
            else:
                self.warn(line)

    def state_table(self, state: Mapping[str, Any], title: str = "State") -> None:
        """Render one resource state as an attribute/value table."""
        t = Table(title=title, show_lines=False)
        t.add_column("Attribute", style="ok", no_wrap=True)
        t.add_column("Value")

        for k, v in state.items():
            t.add_row(k, str(v))

        console.print(t)

    def users_table(self, users: Iterable[Any], title: str = "Users") -> None:
        """
        Expects objects with .id .user_name .display_name .active
        (like dbreconcile.core.models.UserInfo)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("User ID", style="ok", no_wrap=True)
        t.add_column("User name")
        t.add_column("Display name", style="meta")
        t.add_column("Active")

        for u in users:
            active = getattr(u, "active", None)
            t.add_row(
                str(u.id),
                str(getattr(u, "user_name", "") or ""),
                str(getattr(u, "display_name", "") or ""),
                "" if active is None else ("yes" if active else "no"),
            )

        console.print(t)


out = Out()
