"""
Configuration management for the restart orchestrator.

Provides YAML-based configuration with environment and CLI overrides,
configuration hierarchy (CLI > environment > YAML > Defaults), and validation.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from restart_orchestrator.config.restart import RestartConfig
from restart_orchestrator.config.services import ServiceTarget, WatchTarget, parse_services_json
from restart_orchestrator.config.watchdog import WatchdogConfig
from restart_orchestrator.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "~/.restart-orchestrator/config.yaml"


class WebhookConfig(BaseModel):
    """Inbound webhook configuration."""

    model_config = ConfigDict(frozen=True)

    secret: str | None = Field(
        default=None,
        repr=False,
        description="Shared secret expected in the secret header. Unset rejects every call.",
    )
    secret_header: str = Field(
        default="x-shared-secret",
        description="Header carrying the shared secret",
    )
    max_body_bytes: int = Field(
        default=128 * 1024,
        ge=0,
        description="Largest accepted request body",
    )

    @field_validator("secret_header")
    @classmethod
    def validate_header(cls, v: str) -> str:
        """Header names are matched case-insensitively."""
        v = v.strip().lower()
        if not v:
            raise ValueError("secret_header must not be empty")
        return v


class AlertConfig(BaseModel):
    """Outbound alert webhook configuration."""

    model_config = ConfigDict(frozen=True)

    webhook_url: str | None = Field(
        default=None,
        description="Discord/Slack compatible webhook URL. Unset logs alerts only.",
    )
    timeout: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for a single alert delivery",
    )


class RenderAPIConfig(BaseModel):
    """Service-management API configuration."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        default="https://api.render.com",
        description="Base URL of the service-management API",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for a single API request",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Log level",
    )
    file: str | None = Field(
        default=None,
        description="Optional log file path in addition to stderr",
    )


class OrchestratorConfig(BaseModel):
    """
    Main configuration for the restart orchestrator.

    Configuration is loaded with the following priority:
    1. CLI arguments (highest)
    2. Environment variables
    3. YAML file (~/.restart-orchestrator/config.yaml)
    4. Defaults (lowest)

    The instance is built once at startup and passed to every component.
    """

    model_config = ConfigDict(frozen=True)

    host: str = Field(
        default="0.0.0.0",  # nosec B104
        description="Interface the HTTP server binds to",
    )
    port: int = Field(
        default=3000,
        description="Port for the HTTP server",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )
    services: list[ServiceTarget] = Field(
        default_factory=list,
        description="Services restarted on every accepted webhook call",
    )
    restart: RestartConfig = Field(default_factory=RestartConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    watchdog: WatchdogConfig = Field(default_factory=WatchdogConfig)
    alerts: AlertConfig = Field(default_factory=AlertConfig)
    render: RenderAPIConfig = Field(default_factory=RenderAPIConfig)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number is in valid range."""
        if not (1 <= v <= 65535):
            raise ValueError("Port must be between 1 and 65535")
        return v


def load_yaml(config_file: str) -> dict[str, Any]:
    """
    Load YAML or JSON configuration file.

    Args:
        config_file: Path to YAML or JSON configuration file

    Returns:
        Dictionary with parsed content, empty if the file does not exist

    Raises:
        ConfigError: If the file is invalid or has the wrong extension
    """
    config_path = Path(config_file).expanduser()

    if not config_path.exists():
        return {}

    file_ext = config_path.suffix.lower()
    if file_ext not in [".yaml", ".yml", ".json"]:
        raise ConfigError(
            f"Config file must have .yaml, .yml, or .json extension, got: {file_ext}\n"
            f"File: {config_path}"
        )

    try:
        content = config_path.read_text()
        if file_ext == ".json":
            data = json.loads(content) if content.strip() else {}
        else:
            data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {config_path}")
    return data


def coerce_services(raw: Any) -> list[dict[str, Any]]:
    """
    Validate a service list from YAML or environment.

    A malformed list never aborts startup: it is logged and treated as empty
    so the health and webhook endpoints keep serving.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        targets = parse_services_json(raw)
    elif isinstance(raw, list):
        try:
            targets = [ServiceTarget.model_validate(entry) for entry in raw]
        except ValidationError as e:
            logger.error(f"Invalid services configuration: {e}")
            targets = []
    else:
        logger.error(f"Invalid services configuration: expected a list, got {type(raw).__name__}")
        targets = []
    return [t.model_dump() for t in targets]


def _env_seconds(env: Mapping[str, str], name: str) -> float | None:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw) / 1000.0
    except ValueError as e:
        raise ConfigError(f"{name} must be a number of milliseconds, got {raw!r}") from e


def _env_int(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _env_watch_targets(env: Mapping[str, str]) -> list[dict[str, Any]]:
    """Collect WATCH_<n>_* triples for n = 1, 2, ... until the first gap."""
    targets: list[dict[str, Any]] = []
    index = 1
    while True:
        prefix = f"WATCH_{index}_"
        service_id = env.get(f"{prefix}SERVICE_ID")
        if not service_id:
            break
        credential = env.get(f"{prefix}API_KEY")
        health_url = env.get(f"{prefix}HEALTH_URL")
        if not credential or not health_url:
            raise ConfigError(
                f"{prefix}SERVICE_ID is set but {prefix}API_KEY or {prefix}HEALTH_URL is missing"
            )
        target = WatchTarget(
            service_id=service_id,
            credential=credential,
            health_url=health_url,
            display_name=env.get(f"{prefix}NAME") or None,
        )
        targets.append(target.model_dump())
        index += 1
    return targets


def _set_nested(config_dict: dict[str, Any], key: str, value: Any) -> None:
    parts = key.split(".")
    current = config_dict
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value


def apply_env_overrides(
    config_dict: dict[str, Any],
    env: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    Apply environment variable overrides to config dictionary.

    Millisecond variables are converted to seconds.

    Args:
        config_dict: Configuration dictionary
        env: Environment mapping (default: os.environ)

    Returns:
        Configuration dictionary with environment overrides applied

    Raises:
        ConfigError: If a numeric variable cannot be parsed
    """
    if env is None:
        env = os.environ

    port = _env_int(env, "PORT")
    if port is not None:
        config_dict["port"] = port

    debug = env.get("DEBUG")
    if debug is not None:
        config_dict["debug"] = debug.strip().lower() in ("1", "true", "yes", "on")

    if "SERVICES_JSON" in env:
        config_dict["services"] = env["SERVICES_JSON"]

    secret = env.get("WEBHOOK_SECRET") or env.get("UPTIMEROBOT_SECRET")
    if secret:
        _set_nested(config_dict, "webhook.secret", secret)

    alert_url = env.get("ALERT_WEBHOOK")
    if alert_url:
        _set_nested(config_dict, "alerts.webhook_url", alert_url)

    render_url = env.get("RENDER_API_URL")
    if render_url:
        _set_nested(config_dict, "render.base_url", render_url)

    seconds_overrides = {
        "SUSPEND_TIMEOUT_MS": "restart.suspend_timeout",
        "START_TIMEOUT_MS": "restart.resume_timeout",
        "STATUS_POLL_INTERVAL_MS": "restart.poll_interval",
        "BACKOFF_DELAY_MS": "restart.backoff_delay",
        "SETTLE_DELAY_MS": "restart.settle_delay",
        "WATCHDOG_INTERVAL_MS": "watchdog.interval",
        "WATCHDOG_COOLDOWN_MS": "watchdog.cooldown",
    }
    for name, key in seconds_overrides.items():
        value = _env_seconds(env, name)
        if value is not None:
            _set_nested(config_dict, key, value)

    attempts = _env_int(env, "ACTION_RETRY")
    if attempts is not None:
        _set_nested(config_dict, "restart.max_attempts", attempts)

    watch_targets = _env_watch_targets(env)
    if watch_targets:
        _set_nested(config_dict, "watchdog.targets", watch_targets)

    return config_dict


def apply_cli_overrides(
    config_dict: dict[str, Any],
    cli_overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Apply CLI argument overrides to config dictionary.

    Args:
        config_dict: Configuration dictionary
        cli_overrides: Dictionary of CLI overrides; dotted keys address
            nested settings (e.g. "restart.max_attempts")

    Returns:
        Configuration dictionary with CLI overrides applied
    """
    if cli_overrides is None:
        return config_dict

    for key, value in cli_overrides.items():
        if value is None:
            continue
        _set_nested(config_dict, key, value)

    return config_dict


def load_config(
    config_file: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
) -> OrchestratorConfig:
    """
    Load configuration with hierarchy: CLI > environment > YAML > Defaults.

    Args:
        config_file: Path to YAML config file (default: ~/.restart-orchestrator/config.yaml)
        cli_overrides: Dictionary of CLI argument overrides
        env: Environment mapping (default: os.environ)

    Returns:
        Validated OrchestratorConfig instance

    Raises:
        ConfigError: If configuration is invalid
    """
    if config_file is None:
        config_file = DEFAULT_CONFIG_FILE

    config_dict = load_yaml(config_file)
    config_dict = apply_env_overrides(config_dict, env)
    config_dict = apply_cli_overrides(config_dict, cli_overrides)
    config_dict["services"] = coerce_services(config_dict.get("services"))

    try:
        return OrchestratorConfig(**config_dict)
    except ValidationError as e:
        raise ConfigError(
            f"Configuration validation failed: {e}\n"
            f"Please check your configuration file at {config_file}"
        ) from e
