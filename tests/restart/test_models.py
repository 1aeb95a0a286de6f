"""Tests for restart run bookkeeping."""

import pytest

from restart_orchestrator.restart.models import (
    InvalidTransitionError,
    Phase,
    PhaseOutcome,
    RestartOutcome,
    RestartRun,
    RestartState,
)

pytestmark = pytest.mark.unit


class TestRestartRun:
    def test_starts_idle(self) -> None:
        run = RestartRun(service_id="srv-1")
        assert run.state == RestartState.IDLE
        assert run.history == [RestartState.IDLE]
        assert run.finished is False

    def test_rejects_skipping_suspend(self) -> None:
        run = RestartRun(service_id="srv-1")
        with pytest.raises(InvalidTransitionError, match="idle to resuming"):
            run.transition(RestartState.RESUMING)

    def test_terminal_states_have_no_exits(self) -> None:
        run = RestartRun(service_id="srv-1")
        for state in (
            RestartState.SUSPENDING,
            RestartState.SETTLING,
            RestartState.RESUMING,
            RestartState.FAILED,
        ):
            run.transition(state)
        assert run.finished is True
        with pytest.raises(InvalidTransitionError):
            run.transition(RestartState.SUSPENDING)


class TestRestartOutcome:
    def test_to_dict(self) -> None:
        outcome = RestartOutcome(
            service_id="srv-1",
            ok=False,
            failed_phase=Phase.RESUME,
            message="API: resume failed after 3 attempts.",
            phases=[
                PhaseOutcome(phase=Phase.SUSPEND, confirmed=True, attempts_used=1, last_status="suspended"),
                PhaseOutcome(phase=Phase.RESUME, confirmed=False, attempts_used=3),
            ],
        )

        data = outcome.to_dict()

        assert data["failed_phase"] == "resume"
        assert data["phases"][0] == {
            "phase": "suspend",
            "confirmed": True,
            "attempts_used": 1,
            "last_status": "suspended",
        }
        assert data["phases"][1]["last_status"] is None
        assert data["warnings"] == []

    def test_outcomes_do_not_share_lists(self) -> None:
        a = RestartOutcome(service_id="a", ok=True)
        b = RestartOutcome(service_id="b", ok=True)
        a.warnings.append("x")
        assert b.warnings == []
