"""
Restart state machine.

Restarts one service as suspend -> confirm -> settle -> resume -> confirm.
Each phase is an attempt loop with linear backoff; a suspend that never
confirms only degrades to a warning, a resume that never confirms fails the
run. ``restart`` always returns a RestartOutcome.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from restart_orchestrator.config.restart import RestartConfig
from restart_orchestrator.config.services import ServiceTarget
from restart_orchestrator.restart.clock import Clock, SystemClock
from restart_orchestrator.restart.models import (
    Phase,
    PhaseOutcome,
    RestartOutcome,
    RestartRun,
    RestartState,
)

if TYPE_CHECKING:
    from restart_orchestrator.alerts import AlertSink
    from restart_orchestrator.clients.render import RenderClient
    from restart_orchestrator.restart.poller import StatusPoller

logger = logging.getLogger(__name__)


class RestartStateMachine:
    """Composes the action client and poller into a confirmed two-phase restart."""

    def __init__(
        self,
        client: RenderClient,
        poller: StatusPoller,
        config: RestartConfig | None = None,
        alerts: AlertSink | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.client = client
        self.poller = poller
        self.config = config or RestartConfig()
        self.alerts = alerts
        self.clock = clock or SystemClock()

    def _alert(self, message: str) -> None:
        if self.alerts is not None:
            self.alerts.notify(message)

    async def _run_phase(
        self,
        target: ServiceTarget,
        phase: Phase,
        acceptable: Sequence[str],
        timeout: float,
    ) -> PhaseOutcome:
        """Run up to max_attempts action + confirm attempts for one phase."""
        label = target.label
        max_attempts = self.config.max_attempts
        last_status: str | None = None

        for attempt in range(1, max_attempts + 1):
            try:
                logger.info(f"[{label}] {phase.value} attempt {attempt}/{max_attempts}")
                await self.client.perform_action(target.service_id, phase.value, target.credential)
                result = await self.poller.poll_until(
                    target.service_id, target.credential, acceptable, timeout
                )
                last_status = result.status or last_status
                if result.confirmed:
                    logger.info(f"[{label}] {phase.value} confirmed (status: {result.status})")
                    return PhaseOutcome(
                        phase=phase,
                        confirmed=True,
                        attempts_used=attempt,
                        last_status=result.status,
                    )
                logger.warning(
                    f"[{label}] {phase.value} not confirmed within {timeout:.0f}s "
                    f"(attempt {attempt}, last status: {result.status or 'unknown'})"
                )
            except Exception as e:
                logger.warning(f"[{label}] {phase.value} error (attempt {attempt}): {e}")

            if attempt < max_attempts:
                await self.clock.sleep(attempt * self.config.backoff_delay)

        return PhaseOutcome(
            phase=phase,
            confirmed=False,
            attempts_used=max_attempts,
            last_status=last_status,
        )

    async def _restart(self, target: ServiceTarget, run: RestartRun) -> RestartOutcome:
        label = target.label
        outcome = RestartOutcome(service_id=target.service_id, ok=False)

        run.transition(RestartState.SUSPENDING)
        suspend = await self._run_phase(
            target,
            Phase.SUSPEND,
            self.config.suspended_statuses,
            self.config.suspend_timeout,
        )
        outcome.phases.append(suspend)
        if not suspend.confirmed:
            message = (
                f"{label}: suspend step failed after {suspend.attempts_used} attempts. "
                "Attempting resume anyway."
            )
            logger.warning(message)
            outcome.warnings.append(message)
            self._alert(f"[warning] {message}")

        run.transition(RestartState.SETTLING)
        await self.clock.sleep(self.config.settle_delay)

        run.transition(RestartState.RESUMING)
        resume = await self._run_phase(
            target,
            Phase.RESUME,
            self.config.resumed_statuses,
            self.config.resume_timeout,
        )
        outcome.phases.append(resume)

        if not resume.confirmed:
            run.transition(RestartState.FAILED)
            message = f"{label}: resume failed after {resume.attempts_used} attempts."
            logger.error(message)
            self._alert(f"[error] {message}")
            outcome.failed_phase = Phase.RESUME
            outcome.message = message
            return outcome

        run.transition(RestartState.SUCCEEDED)
        outcome.ok = True
        outcome.message = f"{label}: resumed (status: {resume.last_status})"
        logger.info(outcome.message)
        return outcome

    async def restart(self, target: ServiceTarget) -> RestartOutcome:
        """
        Restart one service.

        Args:
            target: Service and credential to act on

        Returns:
            RestartOutcome; ok is True only if the resume was confirmed
        """
        run = RestartRun(service_id=target.service_id)
        logger.info(f"--- Restarting {target.label} ---")
        try:
            return await self._restart(target, run)
        except Exception as e:
            message = f"Exception restarting {target.label}: {e}"
            logger.error(message, exc_info=True)
            self._alert(f"[error] {message}")
            failed_phase = Phase.SUSPEND if run.state == RestartState.SUSPENDING else Phase.RESUME
            return RestartOutcome(
                service_id=target.service_id,
                ok=False,
                failed_phase=failed_phase,
                message=message,
            )
