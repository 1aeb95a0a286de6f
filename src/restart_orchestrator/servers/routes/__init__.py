"""
FastAPI route modules for the restart orchestrator HTTP server.

Each module contains an APIRouter with related endpoints.
"""

from restart_orchestrator.servers.routes.webhook import create_webhook_router

__all__ = ["create_webhook_router"]
