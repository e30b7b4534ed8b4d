"""
Ledger state tracking — the client's monotonic view of the authority.

A ``LedgerStateTracker`` is owned by one client instance and shared by
every call made through it. Each validated response is passed through
``compare_and_update``, which rejects any response older than the newest
state already observed.

The read-check-write is done under a lock so two concurrent calls cannot
both accept a stale candidate.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from diem_client.errors import StaleResponseError


@dataclass(frozen=True)
class LedgerState:
    """The authority's ledger position.

    Attributes:
        version: Ledger version (monotonic counter).
        timestamp_usec: Ledger timestamp in microseconds.
    """

    version: int = 0
    timestamp_usec: int = 0

    def __post_init__(self) -> None:
        if self.version < 0:
            raise ValueError(f"version must be >= 0, got: {self.version}")
        if self.timestamp_usec < 0:
            raise ValueError(
                f"timestamp_usec must be >= 0, got: {self.timestamp_usec}"
            )

    def is_newer_or_equal(self, other: LedgerState) -> bool:
        """Lexicographic (version, timestamp) comparison."""
        return (self.version, self.timestamp_usec) >= (
            other.version,
            other.timestamp_usec,
        )

    def __str__(self) -> str:
        return f"{{version={self.version} timestamp_usec={self.timestamp_usec}}}"


class LedgerStateTracker:
    """Thread-safe holder of the latest observed ``LedgerState``."""

    def __init__(self, initial: LedgerState | None = None) -> None:
        self._lock = threading.Lock()
        self._state = initial or LedgerState()

    @property
    def state(self) -> LedgerState:
        """Snapshot of the stored state."""
        with self._lock:
            return self._state

    def update(self, state: LedgerState) -> None:
        """Overwrite the stored state unconditionally.

        Used to seed a fresh client or to recover state kept elsewhere.
        """
        with self._lock:
            self._state = state

    def compare_and_update(self, candidate: LedgerState) -> None:
        """Accept ``candidate`` if it is not older than the stored state.

        Equal states are accepted, so responses that show no progress
        don't fail.

        Raises:
            StaleResponseError: If ``candidate`` is older. The stored state
                is left unchanged.
        """
        with self._lock:
            if not candidate.is_newer_or_equal(self._state):
                raise StaleResponseError(candidate, self._state)
            self._state = candidate
