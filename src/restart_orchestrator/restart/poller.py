"""Status poller - waits for a service status to enter an acceptable set."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from restart_orchestrator.clients.status import extract_status, normalize_status_set
from restart_orchestrator.restart.clock import Clock, SystemClock
from restart_orchestrator.restart.models import PollResult, StatusSnapshot

if TYPE_CHECKING:
    from restart_orchestrator.clients.render import RenderClient

logger = logging.getLogger(__name__)


class StatusPoller:
    """
    Repeatedly queries a service's status until it is acceptable or a deadline passes.

    Failed queries (transport errors, non-2xx responses) count as "not yet
    confirmed" and never abort the wait. The only suspension points are the
    status request itself and the poll-interval sleep, both of which are
    cancelled with the surrounding task.
    """

    def __init__(
        self,
        client: RenderClient,
        poll_interval: float = 5.0,
        clock: Clock | None = None,
    ) -> None:
        self.client = client
        self.poll_interval = poll_interval
        self.clock = clock or SystemClock()

    async def query(self, service_id: str, credential: str) -> StatusSnapshot | None:
        """Issue one status query. Returns None if the query failed."""
        try:
            payload = await self.client.get_service(service_id, credential)
        except Exception as e:
            logger.debug(f"[status] {service_id} query failed: {e}")
            return None
        snapshot = StatusSnapshot(
            raw_status=extract_status(payload) or "",
            observed_at=self.clock.now(),
        )
        logger.debug(f"[status] {service_id} => {snapshot.raw_status or '<none>'}")
        return snapshot

    async def poll_until(
        self,
        service_id: str,
        credential: str,
        acceptable_statuses: Iterable[str],
        timeout: float,
    ) -> PollResult:
        """
        Wait for the service status to match one of ``acceptable_statuses``.

        Args:
            service_id: Remote service identifier
            credential: API key for the owning account
            acceptable_statuses: Statuses that confirm, compared case-insensitively
            timeout: Seconds before giving up

        Returns:
            PollResult with confirmed=True and the status, or confirmed=False
            and reason="timeout"
        """
        acceptable = normalize_status_set(acceptable_statuses)
        start = self.clock.monotonic()
        last_status: str | None = None
        queries = 0

        while True:
            snapshot = await self.query(service_id, credential)
            queries += 1
            if snapshot is not None:
                last_status = snapshot.raw_status or last_status
                if snapshot.raw_status and snapshot.raw_status in acceptable:
                    return PollResult(
                        confirmed=True, status=snapshot.raw_status, queries=queries
                    )

            await self.clock.sleep(self.poll_interval)
            if self.clock.monotonic() - start >= timeout:
                logger.debug(
                    f"[status] {service_id} not in {sorted(acceptable)} after {timeout:.0f}s"
                )
                return PollResult(
                    confirmed=False, status=last_status, reason="timeout", queries=queries
                )
