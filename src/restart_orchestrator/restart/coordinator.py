"""Runs the restart state machine over every configured service."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from restart_orchestrator.config.services import ServiceTarget
from restart_orchestrator.restart.models import RestartOutcome

if TYPE_CHECKING:
    from restart_orchestrator.alerts import AlertSink
    from restart_orchestrator.restart.machine import RestartStateMachine

logger = logging.getLogger(__name__)

NO_SERVICES_MESSAGE = "No services configured in SERVICES_JSON"


class RestartCoordinator:
    """
    Restarts a static list of services one after another.

    One service's failure never stops the remaining services. Each service
    gets its own error boundary that turns unexpected exceptions into a
    failed outcome plus an alert.
    """

    def __init__(
        self,
        machine: RestartStateMachine,
        services: Sequence[ServiceTarget],
        alerts: AlertSink,
    ) -> None:
        self.machine = machine
        self.services: tuple[ServiceTarget, ...] = tuple(services)
        self.alerts = alerts

    async def restart_all(self) -> list[RestartOutcome]:
        """
        Restart every configured service in sequence.

        Returns:
            One outcome per service, in configuration order. Empty if no
            services are configured (an alert is sent in that case).
        """
        if not self.services:
            logger.warning(NO_SERVICES_MESSAGE)
            self.alerts.notify(f"[warning] {NO_SERVICES_MESSAGE}")
            return []

        outcomes: list[RestartOutcome] = []
        for target in self.services:
            try:
                outcome = await self.machine.restart(target)
            except Exception as e:
                message = f"Exception restarting {target.label}: {e}"
                logger.error(message, exc_info=True)
                self.alerts.notify(f"[error] {message}")
                outcome = RestartOutcome(service_id=target.service_id, ok=False, message=message)
            outcomes.append(outcome)

        succeeded = sum(1 for o in outcomes if o.ok)
        logger.info(f"Restart run finished: {succeeded}/{len(outcomes)} services restarted")
        for outcome in outcomes:
            if not outcome.ok:
                logger.debug(f"Failed outcome: {outcome.to_dict()}")
        return outcomes
