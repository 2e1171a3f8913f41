"""Reconciler configuration.

Timeouts are explicit configuration rather than module constants so that
tests can shorten them. An environment override that does not parse as a
usable number of seconds falls back to the default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

_WAIT_TIMEOUT_ENV = "DBRECONCILE_WAIT_TIMEOUT"
_POLL_INTERVAL_ENV = "DBRECONCILE_POLL_INTERVAL"

DEFAULT_WAIT_TIMEOUT_SECONDS = 300.0
DEFAULT_POLL_INTERVAL_SECONDS = 1.0


def _env_seconds(name: str, default: float, *, allow_zero: bool) -> float:
    """Return a non-negative number of seconds from the environment."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if value < 0 or (value == 0 and not allow_zero):
        return default
    return value


@dataclass(frozen=True)
class ReconcilerConfig:
    """Stabilization wait settings for a reconciler."""

    wait_timeout: float = DEFAULT_WAIT_TIMEOUT_SECONDS
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS

    def __post_init__(self) -> None:
        if self.wait_timeout < 0:
            raise ValueError(f"wait_timeout must be >= 0, got {self.wait_timeout}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got {self.poll_interval}")

    @classmethod
    def from_env(cls) -> "ReconcilerConfig":
        """Load from environment variables."""
        return cls(
            wait_timeout=_env_seconds(
                _WAIT_TIMEOUT_ENV, DEFAULT_WAIT_TIMEOUT_SECONDS, allow_zero=True
            ),
            poll_interval=_env_seconds(
                _POLL_INTERVAL_ENV, DEFAULT_POLL_INTERVAL_SECONDS, allow_zero=False
            ),
        )
