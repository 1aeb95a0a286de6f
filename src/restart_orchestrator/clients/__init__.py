"""Clients for the remote service-management API."""

from restart_orchestrator.clients.render import RenderClient
from restart_orchestrator.clients.status import extract_status, normalize_status, status_matches

__all__ = ["RenderClient", "extract_status", "normalize_status", "status_matches"]
