"""HTTP client for the Render service-management API."""

from __future__ import annotations

import logging
from typing import Any, Literal

import httpx

from restart_orchestrator import __version__
from restart_orchestrator.errors import ActionError

logger = logging.getLogger(__name__)

Action = Literal["suspend", "resume"]

USER_AGENT = f"restart-orchestrator/{__version__}"
MAX_ERROR_BODY = 500


class RenderClient:
    """
    Issues lifecycle commands and status queries against the Render API.

    Each method performs exactly one HTTP request. Retry policy belongs to
    the caller. Any non-2xx response or transport failure raises ActionError.
    """

    def __init__(
        self,
        base_url: str = "https://api.render.com",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> RenderClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self, credential: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {credential}",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

    async def _request(
        self,
        method: str,
        path: str,
        credential: str,
        service_id: str,
        action: str,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(
                method, url, headers=self._headers(credential), timeout=self.timeout
            )
        except httpx.HTTPError as e:
            raise ActionError(
                f"Render {action} request failed for {service_id}: {e!r}",
                http_status=None,
                body=str(e),
                service_id=service_id,
                action=action,
            ) from e

        if not response.is_success:
            body = response.text[:MAX_ERROR_BODY]
            raise ActionError(
                f"Render {action} failed for {service_id} ({response.status_code}): {body}",
                http_status=response.status_code,
                body=body,
                service_id=service_id,
                action=action,
            )
        return response

    async def perform_action(self, service_id: str, action: Action, credential: str) -> None:
        """
        Issue a lifecycle command.

        Args:
            service_id: Remote service identifier
            action: "suspend" or "resume"
            credential: API key for the account owning the service

        Raises:
            ActionError: On non-2xx status or transport failure
        """
        if action not in ("suspend", "resume"):
            raise ValueError(f"Unsupported action: {action}")
        await self._request(
            "POST", f"/v1/services/{service_id}/{action}", credential, service_id, action
        )
        logger.debug(f"Render {action} accepted for {service_id}")

    async def get_service(self, service_id: str, credential: str) -> dict[str, Any]:
        """
        Fetch the service description.

        Raises:
            ActionError: On non-2xx status, transport failure or a non-JSON body
        """
        response = await self._request(
            "GET", f"/v1/services/{service_id}", credential, service_id, "status"
        )
        try:
            payload = response.json()
        except ValueError as e:
            raise ActionError(
                f"Render status for {service_id} returned invalid JSON",
                http_status=response.status_code,
                body=response.text[:MAX_ERROR_BODY],
                service_id=service_id,
                action="status",
            ) from e
        if not isinstance(payload, dict):
            return {}
        return payload
