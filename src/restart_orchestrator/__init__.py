"""restart-orchestrator - restart remote services by suspend/resume with confirmation.

Drives a service-management API through suspend, confirm, resume, confirm,
with bounded retries and timeouts. Triggered by an authenticated webhook or
by a periodic health-check watchdog; failures are reported to an alert
webhook.
"""

__version__ = "1.0.0"
