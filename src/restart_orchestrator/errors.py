"""Exceptions raised by the restart orchestrator."""

from __future__ import annotations


class OrchestratorError(Exception):
    """Base class for orchestrator errors."""


class ConfigError(OrchestratorError):
    """Raised when configuration cannot be loaded or validated."""


class ActionError(OrchestratorError):
    """Raised when a call to the service-management API fails.

    ``http_status`` is ``None`` for transport-level failures (DNS, connection
    reset, timeout) where no response was received.
    """

    def __init__(
        self,
        message: str,
        http_status: int | None = None,
        body: str = "",
        service_id: str | None = None,
        action: str | None = None,
    ) -> None:
        super().__init__(message)
        self.http_status = http_status
        self.body = body
        self.service_id = service_id
        self.action = action
