"""
Webhook routes for the restart orchestrator HTTP server.

Any authenticated call restarts every configured service. The body is
accepted but not interpreted beyond a size limit.
"""

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

if TYPE_CHECKING:
    from restart_orchestrator.servers.http import HTTPServer

logger = logging.getLogger(__name__)

BODY_LOG_LIMIT = 400


def create_webhook_router(server: "HTTPServer") -> APIRouter:
    """
    Create webhook router with endpoints bound to server instance.

    Args:
        server: HTTPServer instance for accessing state and dependencies

    Returns:
        Configured APIRouter with the restart webhook endpoint
    """
    router = APIRouter(tags=["webhook"])
    config = server.webhook_config

    def _too_large() -> JSONResponse:
        return JSONResponse(status_code=413, content={"ok": False, "reason": "payload too large"})

    @router.post("/webhook/{trigger}")
    async def restart_webhook(trigger: str, request: Request) -> JSONResponse:
        """Authenticate the caller and start a restart run without awaiting it."""
        try:
            if not server.is_authorized(request.headers.get(config.secret_header)):
                logger.info(f"Unauthorized webhook call for '{trigger}' (invalid secret)")
                return JSONResponse(
                    status_code=401, content={"ok": False, "reason": "unauthorized"}
                )

            declared = request.headers.get("content-length")
            if declared and declared.isdigit() and int(declared) > config.max_body_bytes:
                return _too_large()
            body = await request.body()
            if len(body) > config.max_body_bytes:
                return _too_large()

            logger.info(
                f"Webhook '{trigger}' received: "
                f"{body[:BODY_LOG_LIMIT].decode('utf-8', errors='replace')}"
            )
            server.start_restart_run(trigger)
            return JSONResponse(content={"ok": True, "message": "Restart initiated"})
        except Exception as e:
            logger.error(f"Webhook handling error: {e}", exc_info=True)
            server.alerts.notify(f"[error] Webhook handling error: {e}")
            return JSONResponse(status_code=500, content={"ok": False, "error": "internal"})

    return router
