"""Alert sinks for restart failures.

This module provides the AlertSink capability and its implementations.
Alerts are best-effort: ``notify`` never raises and never waits for delivery.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)


class AlertSink(Protocol):
    """Best-effort notification channel."""

    def notify(self, message: str) -> None: ...


class LoggingAlertSink:
    """Alert sink used when no alert webhook is configured."""

    def notify(self, message: str) -> None:
        logger.warning(f"ALERT: {message}")

    async def aclose(self) -> None:
        return None


class WebhookAlertSink:
    """Posts alerts to a Discord or Slack compatible webhook.

    Each delivery runs in a tracked background task; failures are logged
    and dropped.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the webhook alert sink.

        Args:
            url: Target webhook URL
            timeout: Per-delivery timeout in seconds
            http_client: Optional shared client; one is created if omitted
        """
        self.url = url
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._pending: set[asyncio.Task[None]] = set()

    def notify(self, message: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, alert dropped: {message}")
            return

        task = loop.create_task(self._send(message), name="alert-webhook")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @staticmethod
    def build_payload(message: str) -> dict[str, Any]:
        # Discord reads "content", Slack reads "text"
        return {"content": message, "text": message}

    async def _send(self, message: str) -> None:
        try:
            response = await self._client.post(
                self.url, json=self.build_payload(message), timeout=self.timeout
            )
            if response.status_code >= 400:
                logger.warning(
                    f"Alert webhook request failed: {response.status_code} - {response.text[:200]}"
                )
            else:
                logger.debug("Alert sent successfully")
        except Exception as e:
            logger.warning(f"Failed to send alert: {e}")

    async def drain(self, timeout: float = 5.0) -> None:
        """Wait up to ``timeout`` seconds for pending deliveries."""
        if not self._pending:
            return
        _, pending = await asyncio.wait(set(self._pending), timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning(f"Dropped {len(pending)} undelivered alerts on shutdown")

    async def aclose(self) -> None:
        await self.drain()
        if self._owns_client:
            await self._client.aclose()


def create_alert_sink(
    url: str | None, timeout: float = 10.0
) -> WebhookAlertSink | LoggingAlertSink:
    """Build the alert sink for the configured URL."""
    if url:
        return WebhookAlertSink(url, timeout=timeout)
    logger.info("No alert webhook configured, alerts will only be logged")
    return LoggingAlertSink()
