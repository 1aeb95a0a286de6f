"""
Service watchdog.

Probes each watched service's own health endpoint on a fixed period and
restarts it through the restart state machine after two consecutive probe
failures separated by a cooldown.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import httpx

from restart_orchestrator.config.watchdog import WatchdogConfig
from restart_orchestrator.restart.clock import Clock, SystemClock

if TYPE_CHECKING:
    from restart_orchestrator.alerts import AlertSink
    from restart_orchestrator.config.services import WatchTarget
    from restart_orchestrator.restart.machine import RestartStateMachine
    from restart_orchestrator.restart.models import RestartOutcome

logger = logging.getLogger(__name__)


class ServiceWatchdog:
    """
    Periodic health checker that restarts unresponsive services.

    Features:
    - Plain GET health probes against each target's health URL
    - Cooldown-separated second probe before any restart
    - Targets checked sequentially within a tick
    - Graceful shutdown via task cancellation
    """

    def __init__(
        self,
        machine: RestartStateMachine,
        config: WatchdogConfig | None = None,
        alerts: AlertSink | None = None,
        clock: Clock | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.machine = machine
        self.config = config or WatchdogConfig()
        self.alerts = alerts
        self.clock = clock or SystemClock()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self.config.probe_timeout)
        self._running = False
        self._task: asyncio.Task[None] | None = None

    async def check_health(self, target: WatchTarget) -> bool:
        """
        Probe a target's health endpoint.

        Returns:
            True if the endpoint answered with a 2xx status, False otherwise.
        """
        try:
            response = await self._client.get(target.health_url, timeout=self.config.probe_timeout)
            if response.is_success:
                logger.debug(f"[watchdog] {target.label} health check passed")
                return True
            logger.warning(
                f"[watchdog] {target.label} health check returned status {response.status_code}"
            )
            return False
        except httpx.ConnectError:
            logger.warning(f"[watchdog] {target.label} health check failed: connection refused")
            return False
        except httpx.TimeoutException:
            logger.warning(f"[watchdog] {target.label} health check failed: timeout")
            return False
        except Exception as e:
            logger.warning(f"[watchdog] {target.label} health check failed: {e}")
            return False

    async def check_target(self, target: WatchTarget) -> RestartOutcome | None:
        """
        Run one probe / cooldown / probe / restart sequence.

        Returns:
            The restart outcome, or None if the service was healthy on either probe.
        """
        if await self.check_health(target):
            return None

        logger.warning(
            f"[watchdog] {target.label} failed first check, rechecking in {self.config.cooldown:.0f}s"
        )
        await self.clock.sleep(self.config.cooldown)

        if await self.check_health(target):
            logger.info(f"[watchdog] {target.label} recovered before restart")
            return None

        logger.warning(f"[watchdog] {target.label} failed second check, restarting")
        return await self.machine.restart(target.as_service())

    async def run_tick(self) -> dict[str, RestartOutcome | None]:
        """Check every target once, in configuration order."""
        results: dict[str, RestartOutcome | None] = {}
        for target in self.config.targets:
            try:
                results[target.service_id] = await self.check_target(target)
            except Exception as e:
                message = f"Watchdog error for {target.label}: {e}"
                logger.error(message, exc_info=True)
                if self.alerts is not None:
                    self.alerts.notify(f"[error] {message}")
                results[target.service_id] = None
        return results

    async def start(self) -> None:
        """Start the watchdog loop."""
        if self._running:
            return
        if not self.config.enabled:
            logger.info("Watchdog disabled by config")
            return
        if not self.config.targets:
            logger.info("Watchdog has no targets, not starting")
            return

        self._running = True
        self._task = asyncio.create_task(self._loop(), name="service-watchdog")
        logger.info(
            f"Watchdog started: targets={len(self.config.targets)}, "
            f"interval={self.config.interval}s, cooldown={self.config.cooldown}s"
        )

    async def stop(self) -> None:
        """Stop the watchdog loop, cancelling any in-flight check or restart."""
        self._running = False
        if self._task:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        logger.info("Watchdog stopped")

    async def aclose(self) -> None:
        await self.stop()
        if self._owns_client:
            await self._client.aclose()

    async def _loop(self) -> None:
        while self._running:
            try:
                await self.run_tick()
            except Exception as e:
                logger.error(f"Watchdog loop error: {e}", exc_info=True)
            try:
                await self.clock.sleep(self.config.interval)
            except asyncio.CancelledError:
                break
