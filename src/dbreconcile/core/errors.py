"""Error taxonomy for resource reconciliation.

Every failure the reconciler can report is a subclass of ReconcileError and
carries an ErrorKind. The reconciler never lets these escape an operation:
they are caught at the operation boundary and turned into diagnostics.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """
    Discriminant for reconciliation failures.

    Values:
        CREATE: The create call was rejected by the remote API.
        READ: Fetching the remote object failed for a reason other than absence.
        UPDATE: The update call was rejected by the remote API.
        DELETE: Deleting the remote object failed (absence is not a failure).
        NOT_FOUND: The remote object does not exist.
        STABILIZATION_TIMEOUT: The object never became queryable in time.
        POLL_FATAL: A poll attempt failed in a way that cannot recover.
        CANCELLED: The caller cancelled the operation while it was waiting.
        CONVERSION: Desired state and API payload could not be mapped.
        AUTH: The workspace client could not be configured.
    """

    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    NOT_FOUND = "NOT_FOUND"
    STABILIZATION_TIMEOUT = "STABILIZATION_TIMEOUT"
    POLL_FATAL = "POLL_FATAL"
    CANCELLED = "CANCELLED"
    CONVERSION = "CONVERSION"
    AUTH = "AUTH"


class ReconcileError(RuntimeError):
    """Base class for all reconciliation failures."""

    kind: ErrorKind = ErrorKind.READ

    def __init__(self, summary: str, detail: str = "") -> None:
        super().__init__(f"{summary}: {detail}" if detail else summary)
        self.summary = summary
        self.detail = detail


class CreateError(ReconcileError):
    """Raised when the remote API rejects a create request."""

    kind = ErrorKind.CREATE


class ReadError(ReconcileError):
    """Raised when a remote object cannot be fetched."""

    kind = ErrorKind.READ


class UpdateError(ReconcileError):
    """Raised when the remote API rejects an update request."""

    kind = ErrorKind.UPDATE


class DeleteError(ReconcileError):
    """Raised when a remote object cannot be deleted."""

    kind = ErrorKind.DELETE


class NotFound(ReconcileError):
    """Raised when the remote object is absent."""

    kind = ErrorKind.NOT_FOUND


class StabilizationTimeout(ReconcileError):
    """Raised when an object never became ready before the deadline."""

    kind = ErrorKind.STABILIZATION_TIMEOUT


class PollFatalError(ReconcileError):
    """Raised when a poll attempt signals the object can never become ready."""

    kind = ErrorKind.POLL_FATAL


class WaitCancelled(ReconcileError):
    """Raised when the caller cancels a stabilization wait."""

    kind = ErrorKind.CANCELLED


class ConversionError(ReconcileError):
    """Raised when a state cannot be mapped onto an API payload."""

    kind = ErrorKind.CONVERSION


class AuthError(ReconcileError):
    """Raised when Databricks authentication fails."""

    kind = ErrorKind.AUTH
