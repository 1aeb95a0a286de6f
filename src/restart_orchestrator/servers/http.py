"""
HTTP server for the restart orchestrator.

Provides a FastAPI app with the inbound restart webhook and a health
endpoint. Accepted webhook calls respond immediately; the restart run
continues in a tracked background task with its own error boundary.
"""

from __future__ import annotations

import asyncio
import hmac
import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI

from restart_orchestrator import __version__
from restart_orchestrator.config.app import WebhookConfig
from restart_orchestrator.servers.routes.webhook import create_webhook_router

if TYPE_CHECKING:
    from restart_orchestrator.alerts import AlertSink
    from restart_orchestrator.restart.coordinator import RestartCoordinator

logger = logging.getLogger(__name__)


class HTTPServer:
    """
    FastAPI HTTP server for the restart orchestrator.

    Handles webhook-triggered restarts and health reporting.
    """

    def __init__(
        self,
        coordinator: RestartCoordinator,
        alerts: AlertSink,
        webhook_config: WebhookConfig | None = None,
        port: int = 3000,
    ) -> None:
        """
        Initialize HTTP server.

        Args:
            coordinator: Runs the restart state machine over the configured services
            alerts: Alert sink for unexpected errors
            webhook_config: Secret and body-size settings for the webhook
            port: Server port (informational, binding is done by the runner)
        """
        self.coordinator = coordinator
        self.alerts = alerts
        self.webhook_config = webhook_config or WebhookConfig()
        self.port = port
        self._start_time: float = time.time()
        self._background_tasks: set[asyncio.Task[Any]] = set()
        self.app = self._create_app()

    def is_authorized(self, provided: str | None) -> bool:
        """Check a shared-secret header value. No configured secret rejects everything."""
        expected = self.webhook_config.secret
        if not expected or provided is None:
            return False
        return hmac.compare_digest(provided.encode(), expected.encode())

    def start_restart_run(self, trigger: str) -> asyncio.Task[None]:
        """Detach a restart run for every configured service."""
        task = asyncio.create_task(self._run_restarts(trigger), name=f"restart-run-{trigger}")
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def _run_restarts(self, trigger: str) -> None:
        try:
            outcomes = await self.coordinator.restart_all()
            logger.info(
                f"Restart run for '{trigger}' complete: "
                f"{sum(1 for o in outcomes if o.ok)}/{len(outcomes)} ok"
            )
        except Exception as e:
            logger.error(f"Restart run for '{trigger}' failed: {e}", exc_info=True)
            self.alerts.notify(f"[error] orchestrator error: {e}")

    async def wait_for_background_tasks(self, timeout: float | None = None) -> None:
        """Wait for detached restart runs to finish."""
        if not self._background_tasks:
            return
        await asyncio.wait(set(self._background_tasks), timeout=timeout)

    async def shutdown(self) -> None:
        """Cancel outstanding restart runs so the process can exit promptly."""
        pending = [t for t in self._background_tasks if not t.done()]
        if not pending:
            return
        logger.info(f"Cancelling {len(pending)} in-flight restart runs")
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    def _create_app(self) -> FastAPI:
        """
        Create and configure FastAPI application.

        Returns:
            Configured FastAPI app instance
        """

        @asynccontextmanager
        async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
            logger.debug("Starting HTTP server on port %d", self.port)
            self._start_time = time.time()
            yield
            logger.debug("Shutting down HTTP server")
            await self.shutdown()

        app = FastAPI(
            title="restart-orchestrator",
            version=__version__,
            lifespan=lifespan,
        )

        @app.get("/health")
        async def health() -> dict[str, Any]:
            """Report liveness and the number of managed services."""
            return {"ok": True, "services": len(self.coordinator.services)}

        app.include_router(create_webhook_router(self))
        return app
