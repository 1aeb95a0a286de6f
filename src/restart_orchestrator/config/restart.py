"""
Restart policy configuration.

Contains the time and attempt budgets for the suspend/resume restart
sequence, and the status sets that confirm each phase.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = ["RestartConfig", "DEFAULT_SUSPENDED_STATUSES", "DEFAULT_RESUMED_STATUSES"]

DEFAULT_SUSPENDED_STATUSES = ["suspended", "inactive", "stopped"]
DEFAULT_RESUMED_STATUSES = ["live", "running", "healthy"]


class RestartConfig(BaseModel):
    """Budgets and confirmation sets for one restart run."""

    model_config = ConfigDict(frozen=True)

    suspend_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Seconds to wait for a suspend to be confirmed",
    )
    resume_timeout: float = Field(
        default=180.0,
        gt=0,
        description="Seconds to wait for a resume to be confirmed (cold starts are slow)",
    )
    poll_interval: float = Field(
        default=5.0,
        gt=0,
        description="Seconds between status queries while confirming",
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Action + confirm attempts per phase",
    )
    backoff_delay: float = Field(
        default=2.0,
        ge=0,
        description="Linear backoff unit: attempt N waits N * backoff_delay seconds",
    )
    settle_delay: float = Field(
        default=2.0,
        ge=0,
        description="Pause between the end of the suspend phase and the first resume",
    )
    suspended_statuses: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SUSPENDED_STATUSES),
        description="Statuses that confirm a suspend",
    )
    resumed_statuses: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RESUMED_STATUSES),
        description="Statuses that confirm a resume",
    )

    @field_validator("suspended_statuses", "resumed_statuses")
    @classmethod
    def validate_statuses(cls, v: list[str]) -> list[str]:
        """Normalize statuses and require at least one."""
        cleaned = [s.strip().lower() for s in v if s and s.strip()]
        if not cleaned:
            raise ValueError("At least one status is required")
        return cleaned
