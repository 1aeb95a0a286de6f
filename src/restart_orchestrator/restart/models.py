"""Runtime models for restart runs.

Nothing here is persisted: snapshots, phase outcomes and restart outcomes are
created per run and discarded once reported.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal


class Phase(str, Enum):
    SUSPEND = "suspend"
    RESUME = "resume"


class RestartState(str, Enum):
    IDLE = "idle"
    SUSPENDING = "suspending"
    SETTLING = "settling"
    RESUMING = "resuming"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATES = frozenset({RestartState.SUCCEEDED, RestartState.FAILED})

ALLOWED_TRANSITIONS: dict[RestartState, frozenset[RestartState]] = {
    RestartState.IDLE: frozenset({RestartState.SUSPENDING}),
    RestartState.SUSPENDING: frozenset({RestartState.SETTLING}),
    RestartState.SETTLING: frozenset({RestartState.RESUMING}),
    RestartState.RESUMING: frozenset({RestartState.SUCCEEDED, RestartState.FAILED}),
    RestartState.SUCCEEDED: frozenset(),
    RestartState.FAILED: frozenset(),
}


@dataclass(frozen=True)
class StatusSnapshot:
    """One observed status, produced by a single poll."""

    raw_status: str
    observed_at: datetime


@dataclass(frozen=True)
class PollResult:
    """Result of waiting for a status to enter an acceptable set."""

    confirmed: bool
    status: str | None = None
    reason: Literal["timeout"] | None = None
    queries: int = 0


@dataclass(frozen=True)
class PhaseOutcome:
    """Result of one retry-wrapped phase."""

    phase: Phase
    confirmed: bool
    attempts_used: int
    last_status: str | None = None


@dataclass
class RestartOutcome:
    """Terminal result of restarting one service."""

    service_id: str
    ok: bool
    failed_phase: Phase | None = None
    message: str | None = None
    phases: list[PhaseOutcome] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "service_id": self.service_id,
            "ok": self.ok,
            "failed_phase": self.failed_phase.value if self.failed_phase else None,
            "message": self.message,
            "phases": [
                {
                    "phase": p.phase.value,
                    "confirmed": p.confirmed,
                    "attempts_used": p.attempts_used,
                    "last_status": p.last_status,
                }
                for p in self.phases
            ],
            "warnings": list(self.warnings),
        }


class InvalidTransitionError(RuntimeError):
    """Raised when a restart run tries to move along an undefined edge."""


@dataclass
class RestartRun:
    """Mutable bookkeeping for a single restart invocation."""

    service_id: str
    state: RestartState = RestartState.IDLE
    history: list[RestartState] = field(default_factory=lambda: [RestartState.IDLE])

    def transition(self, new_state: RestartState) -> None:
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"{self.service_id}: cannot move from {self.state.value} to {new_state.value}"
            )
        self.state = new_state
        self.history.append(new_state)

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES
