"""Outbound API contract used by the reconciler.

Every adapter call returns an ApiResult whose status says explicitly whether
the remote object was missing. Callers branch on that discriminant instead of
inspecting SDK exception types.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Protocol

import requests
from databricks.sdk.errors import DatabricksError, NotFound

logger = logging.getLogger(__name__)


class ApiStatus(str, Enum):
    """
    Classification of a remote API call.

    Values:
        OK: The call succeeded.
        MISSING: The addressed object does not exist.
        FAILED: The call failed for any other reason.
    """

    OK = "OK"
    MISSING = "MISSING"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ApiResult:
    """Outcome of a single remote call."""

    status: ApiStatus
    payload: Mapping[str, Any] | None = None
    error: str | None = None

    @classmethod
    def ok(cls, payload: Mapping[str, Any] | None = None) -> "ApiResult":
        return cls(ApiStatus.OK, payload=payload)

    @classmethod
    def missing(cls, error: str = "") -> "ApiResult":
        return cls(ApiStatus.MISSING, error=error)

    @classmethod
    def failed(cls, error: str) -> "ApiResult":
        return cls(ApiStatus.FAILED, error=error)

    @property
    def is_ok(self) -> bool:
        return self.status == ApiStatus.OK

    @property
    def is_missing(self) -> bool:
        return self.status == ApiStatus.MISSING


class ResourceApi(Protocol):
    """Interface for the remote CRUD calls of one resource kind."""

    def create(self, payload: Mapping[str, Any]) -> ApiResult:
        """Create an object and return its (possibly provisional) representation."""
        ...

    def get(self, handle: str) -> ApiResult:
        """Fetch an object by its canonical identity."""
        ...

    def update(self, handle: str, payload: Mapping[str, Any]) -> ApiResult:
        """Apply mutable attributes to an existing object."""
        ...

    def delete(self, handle: str) -> ApiResult:
        """Delete an object by its canonical identity."""
        ...


def call_api(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> ApiResult:
    """
    Invoke an SDK call and classify its outcome.

    `NotFound` (and its subclasses such as `ResourceDoesNotExist`) maps to
    MISSING, any other `DatabricksError` to FAILED. Transport failures that
    survive the SDK retry loop (`requests` errors, the `TimeoutError` raised
    once retries run out) are FAILED as well. Objects returned by the SDK
    are converted to plain mappings with `as_dict()`.
    """
    try:
        result = fn(*args, **kwargs)
    except NotFound as exc:
        logger.debug("remote object missing: %s", exc)
        return ApiResult.missing(str(exc))
    except DatabricksError as exc:
        logger.warning("remote call failed: %s", exc)
        return ApiResult.failed(str(exc))
    except (requests.RequestException, TimeoutError) as exc:
        logger.warning("remote call did not complete: %s", exc)
        return ApiResult.failed(str(exc) or type(exc).__name__)

    if result is None:
        return ApiResult.ok()
    as_dict = getattr(result, "as_dict", None)
    return ApiResult.ok(as_dict() if callable(as_dict) else dict(result))
