"""
Status extraction for service-management API responses.

The status field moves around depending on the account and API version,
so extraction walks a list of known paths and returns the first non-empty
string. Add new shapes to ``STATUS_PATHS``.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

__all__ = [
    "STATUS_PATHS",
    "extract_status",
    "normalize_status",
    "normalize_status_set",
    "status_matches",
]

STATUS_PATHS: tuple[tuple[str, ...], ...] = (
    ("service", "status"),
    ("service", "state"),
    ("state",),
    ("status",),
)


def _lookup(payload: Any, path: tuple[str, ...]) -> Any:
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def normalize_status(raw: Any) -> str:
    """Lower-case and trim a raw status value. Non-strings become ''."""
    if raw is None or isinstance(raw, (dict, list, bool)):
        return ""
    return str(raw).strip().lower()


def extract_status(payload: Any) -> str | None:
    """
    Pull a normalized status string out of a service payload.

    Args:
        payload: Decoded JSON body of ``GET /v1/services/{id}``

    Returns:
        The normalized status, or None if no known field holds one.
    """
    for path in STATUS_PATHS:
        status = normalize_status(_lookup(payload, path))
        if status:
            return status
    return None


def normalize_status_set(statuses: Iterable[str]) -> frozenset[str]:
    """Normalize an acceptable-status collection, dropping empty entries."""
    return frozenset(s for s in (normalize_status(v) for v in statuses) if s)


def status_matches(status: str | None, acceptable: Iterable[str]) -> bool:
    """Case-insensitive membership test. Empty statuses never match."""
    normalized = normalize_status(status)
    if not normalized:
        return False
    return normalized in normalize_status_set(acceptable)
