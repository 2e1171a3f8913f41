"""Diagnostics returned by reconciliation operations.

A diagnostic is a warning or error entry handed back to the caller instead of
raising. Operations append to a Diagnostics list and stop as soon as it
carries an error, mirroring how a provider host consumes them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator

from dbreconcile.core.errors import ErrorKind, ReconcileError


class Severity(str, Enum):
    """Severity of a diagnostic entry."""

    ERROR = "ERROR"
    WARNING = "WARNING"


@dataclass(frozen=True)
class Diagnostic:
    """A single warning or error entry."""

    severity: Severity
    summary: str
    detail: str = ""
    kind: ErrorKind | None = None

    @classmethod
    def from_error(cls, exc: ReconcileError) -> "Diagnostic":
        """Build an error diagnostic from a reconciliation error."""
        return cls(
            severity=Severity.ERROR,
            summary=exc.summary,
            detail=exc.detail,
            kind=exc.kind,
        )


@dataclass
class Diagnostics:
    """Ordered collection of diagnostics for one operation."""

    entries: list[Diagnostic] = field(default_factory=list)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def add_error(
        self, summary: str, detail: str = "", kind: ErrorKind | None = None
    ) -> None:
        self.entries.append(Diagnostic(Severity.ERROR, summary, detail, kind))

    def add_warning(self, summary: str, detail: str = "") -> None:
        self.entries.append(Diagnostic(Severity.WARNING, summary, detail))

    def add_exception(self, exc: ReconcileError) -> None:
        self.entries.append(Diagnostic.from_error(exc))

    def extend(self, other: Iterable[Diagnostic]) -> None:
        self.entries.extend(other)

    def has_error(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.entries)

    def errors(self) -> list[Diagnostic]:
        return [d for d in self.entries if d.severity == Severity.ERROR]

    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.entries if d.severity == Severity.WARNING]

    def kinds(self) -> list[ErrorKind]:
        """Return the error kinds present, in order of appearance."""
        return [d.kind for d in self.entries if d.kind is not None]
