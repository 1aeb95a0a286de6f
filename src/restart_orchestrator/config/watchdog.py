"""
Watchdog configuration module.

Contains configuration for the periodic self-health-check loop that probes
each watched service and restarts it after two consecutive failures.
"""

from pydantic import BaseModel, ConfigDict, Field

from restart_orchestrator.config.services import WatchTarget

__all__ = ["WatchdogConfig"]


class WatchdogConfig(BaseModel):
    """Configuration for the service watchdog loop."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(
        default=True,
        description="Run the watchdog when at least one target is configured",
    )
    interval: float = Field(
        default=300.0,
        gt=0,
        description="Seconds between watchdog ticks",
    )
    cooldown: float = Field(
        default=1200.0,
        ge=0,
        description="Seconds between a failed probe and the confirming second probe",
    )
    probe_timeout: float = Field(
        default=10.0,
        gt=0,
        le=120.0,
        description="Timeout in seconds for a single health probe",
    )
    targets: list[WatchTarget] = Field(
        default_factory=list,
        description="Services probed on each tick",
    )
