"""Bounded poll-until-ready loop for asynchronously created objects.

Some remote objects are created asynchronously: the create call returns before
the object is queryable. `wait_until_ready` polls at a fixed interval until
the object shows up, a poll fails fatally, the deadline passes, or the caller
cancels. It is deliberately synchronous; cancellation is cooperative through a
`threading.Event` owned by the caller.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from dbreconcile.core.errors import PollFatalError, StabilizationTimeout, WaitCancelled

logger = logging.getLogger(__name__)


class PollState(str, Enum):
    """
    Classification of one poll attempt.

    Values:
        READY: The object was found; stop polling.
        NOT_YET: The object is not available yet; keep polling.
        FATAL: The object can never become ready; stop immediately.
    """

    READY = "READY"
    NOT_YET = "NOT_YET"
    FATAL = "FATAL"


@dataclass(frozen=True)
class PollOutcome:
    """Result of a single poll attempt."""

    state: PollState
    value: Any = None
    message: str = ""

    @classmethod
    def ready(cls, value: Any) -> "PollOutcome":
        return cls(PollState.READY, value=value)

    @classmethod
    def not_yet(cls, message: str = "") -> "PollOutcome":
        return cls(PollState.NOT_YET, message=message)

    @classmethod
    def fatal(cls, message: str) -> "PollOutcome":
        return cls(PollState.FATAL, message=message)


def wait_until_ready(
    poll: Callable[[], PollOutcome],
    *,
    timeout: float,
    interval: float,
    cancel: threading.Event | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Any] | None = None,
) -> Any:
    """
    Poll until `poll()` reports READY and return its value.

    Args:
        poll: Callable performing one attempt and classifying the outcome.
        timeout: Total wall-clock budget in seconds.
        interval: Fixed delay between attempts in seconds.
        cancel: Optional event; once set, waiting stops before the next attempt.
        clock: Monotonic clock used for the deadline.
        sleep: Delay function. Defaults to waiting on `cancel`, so a cancel
            interrupts the delay instead of waiting it out.

    Raises:
        PollFatalError: An attempt was classified FATAL. No further attempts.
        StabilizationTimeout: The deadline was reached without READY.
        WaitCancelled: `cancel` was set.
    """
    if timeout < 0:
        raise ValueError("timeout must be >= 0")
    if interval <= 0:
        raise ValueError("interval must be > 0")

    cancel = cancel or threading.Event()
    if sleep is None:
        sleep = cancel.wait

    deadline = clock() + timeout
    attempts = 0
    last_message = ""

    while True:
        if cancel.is_set():
            raise WaitCancelled(
                "wait cancelled", f"cancelled after {attempts} attempt(s)"
            )

        attempts += 1
        outcome = poll()
        logger.debug("poll attempt %d: %s", attempts, outcome.state.value)

        if outcome.state == PollState.READY:
            return outcome.value
        if outcome.state == PollState.FATAL:
            raise PollFatalError("poll failed", outcome.message)

        last_message = outcome.message or last_message
        remaining = deadline - clock()
        if remaining <= 0:
            raise StabilizationTimeout(
                f"timed out after {timeout:g}s",
                last_message or f"not ready after {attempts} attempt(s)",
            )
        sleep(min(interval, remaining))
