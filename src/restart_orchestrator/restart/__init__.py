"""Restart core: status poller, two-phase state machine and coordinator."""

from restart_orchestrator.restart.clock import Clock, SystemClock
from restart_orchestrator.restart.coordinator import RestartCoordinator
from restart_orchestrator.restart.machine import RestartStateMachine
from restart_orchestrator.restart.models import (
    Phase,
    PhaseOutcome,
    PollResult,
    RestartOutcome,
    RestartState,
    StatusSnapshot,
)
from restart_orchestrator.restart.poller import StatusPoller

__all__ = [
    "Clock",
    "Phase",
    "PhaseOutcome",
    "PollResult",
    "RestartCoordinator",
    "RestartOutcome",
    "RestartState",
    "RestartStateMachine",
    "StatusPoller",
    "StatusSnapshot",
    "SystemClock",
]
