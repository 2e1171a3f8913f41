"""Create/read/update/delete reconciliation for one resource kind.

A ResourceReconciler receives a desired state, issues the mutating API call,
optionally waits for the remote object to become queryable, converts the API
response back into the desired-state shape and reports the converged state.

Every operation returns a ReconcileResult. Failures are reported as error
diagnostics on the result; no reconciliation error escapes an operation.
Reconcilers hold no per-call state, so one instance can serve concurrent
operations on different objects.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Mapping

from dbreconcile.core.api import ApiResult, ResourceApi
from dbreconcile.core.config import ReconcilerConfig
from dbreconcile.core.convert import apply_payload, to_payload
from dbreconcile.core.diagnostics import Diagnostics
from dbreconcile.core.errors import (
    CreateError,
    DeleteError,
    NotFound,
    PollFatalError,
    ReadError,
    StabilizationTimeout,
    UpdateError,
    WaitCancelled,
)
from dbreconcile.core.models import ResourceSchema
from dbreconcile.core.polling import PollOutcome, wait_until_ready

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """
    Outcome of one lifecycle operation.

    Attributes:
        state: The converged state, or None when there is nothing to track.
        diagnostics: Warnings and errors produced by the operation.
        removed: True when the remote object no longer exists and the caller
            should drop it from tracked state.
    """

    state: Any = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    removed: bool = False

    @property
    def ok(self) -> bool:
        return not self.diagnostics.has_error()


class ResourceReconciler:
    """Reconciles desired state against one kind of remote object."""

    def __init__(
        self,
        api: ResourceApi,
        schema: ResourceSchema,
        config: ReconcilerConfig | None = None,
        *,
        wait_for_ready: bool = False,
    ) -> None:
        self.api = api
        self.schema = schema
        self.config = config or ReconcilerConfig()
        self.wait_for_ready = wait_for_ready

    @property
    def noun(self) -> str:
        """Short resource name used in messages (e.g. `function`)."""
        return self.schema.type_name.removeprefix("databricks_")

    # ---- lifecycle --------------------------------------------------------

    def create(
        self, desired: Any, cancel: threading.Event | None = None
    ) -> ReconcileResult:
        """
        Create the remote object described by `desired`.

        When the kind is created asynchronously the provisional object returned
        by the API is replaced by the first successful poll. Mutable attributes
        the create call cannot set (such as ownership) are applied afterwards
        with an update.
        """
        diags = Diagnostics()
        payload, conv = to_payload(desired, self.schema, require=True)
        diags.extend(conv)
        if diags.has_error():
            return ReconcileResult(diagnostics=diags)

        logger.info("creating %s %s", self.noun, self.schema.handle_of(desired))
        result = self.api.create(payload)
        if not result.is_ok:
            diags.add_exception(
                CreateError(f"failed to create {self.noun}", result.error or "")
            )
            return ReconcileResult(diagnostics=diags)

        remote = result.payload or {}
        if self.wait_for_ready:
            handle = remote.get(self.schema.handle_field) or self.schema.handle_of(
                desired
            )
            try:
                remote = self.wait(handle, cancel=cancel)
            except (StabilizationTimeout, PollFatalError, WaitCancelled) as exc:
                diags.add_error(
                    f"failed to create {self.noun}", str(exc), kind=exc.kind
                )
                return ReconcileResult(diagnostics=diags)

        state, conv = apply_payload(desired, remote, self.schema)
        diags.extend(conv)
        if diags.has_error():
            return ReconcileResult(diagnostics=diags)

        return self._settle_mutable(desired, state, diags)

    def read(self, state: Any) -> ReconcileResult:
        """
        Refresh `state` from the remote object.

        A missing object is not an error: the result is marked `removed` so
        the caller can stop tracking it.
        """
        diags = Diagnostics()
        handle = self.schema.handle_of(state)
        if not handle:
            diags.add_exception(
                ReadError(
                    f"failed to get {self.noun}",
                    f"'{self.schema.handle_field}' is not set",
                )
            )
            return ReconcileResult(diagnostics=diags)

        result = self.api.get(handle)
        if result.is_missing:
            logger.info("%s %s no longer exists", self.noun, handle)
            return ReconcileResult(diagnostics=diags, removed=True)
        if not result.is_ok:
            diags.add_exception(
                ReadError(f"failed to get {self.noun}", result.error or "")
            )
            return ReconcileResult(diagnostics=diags)

        refreshed, conv = apply_payload(state, result.payload or {}, self.schema)
        diags.extend(conv)
        if diags.has_error():
            return ReconcileResult(diagnostics=diags)
        return ReconcileResult(state=refreshed, diagnostics=diags)

    def update(self, desired: Any, prior: Any | None = None) -> ReconcileResult:
        """
        Apply the mutable attributes of `desired` to the remote object.

        Identity attributes are never part of the payload; a desired state whose
        identity differs from `prior` needs replacement and is rejected.
        """
        diags = Diagnostics()
        if prior is not None:
            for name in sorted(self.schema.identity):
                wanted = getattr(desired, name)
                if wanted is not None and wanted != getattr(prior, name):
                    diags.add_exception(
                        UpdateError(
                            f"cannot update {self.noun} attribute '{name}'",
                            "changing it requires replacing the object",
                        )
                    )
            if diags.has_error():
                return ReconcileResult(diagnostics=diags)
            desired = self._carry_over(desired, prior)

        handle = self.schema.handle_of(desired)
        payload, conv = to_payload(desired, self.schema, only=self.schema.mutable)
        diags.extend(conv)
        if diags.has_error():
            return ReconcileResult(diagnostics=diags)
        if not payload:
            logger.info("no mutable attributes set for %s %s", self.noun, handle)
            return self.read(desired)

        logger.info("updating %s %s", self.noun, handle)
        result = self.api.update(handle, payload)
        if not result.is_ok:
            diags.add_exception(
                UpdateError(f"failed to update {self.noun}", result.error or "")
            )
            return ReconcileResult(diagnostics=diags)

        state, conv = apply_payload(desired, result.payload or {}, self.schema)
        diags.extend(conv)
        if diags.has_error():
            return ReconcileResult(diagnostics=diags)
        return ReconcileResult(state=state, diagnostics=diags)

    def delete(self, state: Any) -> ReconcileResult:
        """
        Delete the remote object. Deleting an absent object succeeds.
        """
        diags = Diagnostics()
        handle = self.schema.handle_of(state)
        if not handle:
            diags.add_exception(
                DeleteError(
                    f"failed to delete {self.noun}",
                    f"'{self.schema.handle_field}' is not set",
                )
            )
            return ReconcileResult(diagnostics=diags)

        logger.info("deleting %s %s", self.noun, handle)
        result = self.api.delete(handle)
        if result.is_missing:
            logger.info("%s %s was already absent", self.noun, handle)
        elif not result.is_ok:
            diags.add_exception(
                DeleteError(f"failed to delete {self.noun}", result.error or "")
            )
        return ReconcileResult(diagnostics=diags)

    def import_state(self, handle: str) -> ReconcileResult:
        """Seed state from an external identity by reading the remote object."""
        seed = self.schema.state_type(**{self.schema.handle_field: handle})
        result = self.read(seed)
        if result.removed:
            result.removed = False
            result.diagnostics.add_exception(
                NotFound(
                    "cannot import non-existent remote object",
                    f"{self.noun} {handle} does not exist",
                )
            )
        return result

    # ---- stabilization ----------------------------------------------------

    def wait(self, handle: str, cancel: threading.Event | None = None) -> Any:
        """Block until the object addressed by `handle` is queryable."""
        return wait_until_ready(
            lambda: self._poll(handle),
            timeout=self.config.wait_timeout,
            interval=self.config.poll_interval,
            cancel=cancel,
        )

    def _poll(self, handle: str) -> PollOutcome:
        result: ApiResult = self.api.get(handle)
        if result.is_ok:
            return PollOutcome.ready(result.payload or {})
        if result.is_missing:
            return PollOutcome.not_yet(f"{self.noun} {handle} is not yet available")
        return PollOutcome.fatal(f"failed to get {self.noun}: {result.error}")

    # ---- helpers ----------------------------------------------------------

    def _carry_over(self, desired: Any, prior: Any) -> Any:
        """Fill unset identity and read-only attributes of desired from prior."""
        kept = {
            name: getattr(prior, name)
            for name in self.schema.identity | self.schema.read_only
            if getattr(desired, name) is None and getattr(prior, name) is not None
        }
        return dataclasses.replace(desired, **kept)

    def _settle_mutable(
        self, desired: Any, created: Any, diags: Diagnostics
    ) -> ReconcileResult:
        """Update mutable attributes the server did not take from the create call."""
        wanted, _ = to_payload(desired, self.schema, only=self.schema.mutable)
        actual, _ = to_payload(created, self.schema, only=self.schema.mutable)
        drift: Mapping[str, Any] = {
            k: v for k, v in wanted.items() if actual.get(k) != v
        }
        if not drift:
            return ReconcileResult(state=created, diagnostics=diags)

        handle = self.schema.handle_of(created)
        logger.info(
            "applying %s to new %s %s", ", ".join(sorted(drift)), self.noun, handle
        )
        result = self.api.update(handle, drift)
        if not result.is_ok:
            # the object exists; keep tracking it so the next plan can fix it
            diags.add_exception(
                UpdateError(
                    f"failed to update {self.noun} after create", result.error or ""
                )
            )
            return ReconcileResult(state=created, diagnostics=diags)

        state, conv = apply_payload(created, result.payload or {}, self.schema)
        diags.extend(conv)
        return ReconcileResult(state=state, diagnostics=diags)

