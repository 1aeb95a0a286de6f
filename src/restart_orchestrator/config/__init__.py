"""
Configuration package for the restart orchestrator.

Module structure:
- app.py: OrchestratorConfig, webhook/alert/API/logging settings, load_config
- restart.py: RestartConfig (suspend/resume budgets and status sets)
- services.py: ServiceTarget and WatchTarget
- watchdog.py: WatchdogConfig
"""

from restart_orchestrator.config.app import (
    AlertConfig,
    LoggingSettings,
    OrchestratorConfig,
    RenderAPIConfig,
    WebhookConfig,
    load_config,
)
from restart_orchestrator.config.restart import RestartConfig
from restart_orchestrator.config.services import ServiceTarget, WatchTarget, parse_services_json
from restart_orchestrator.config.watchdog import WatchdogConfig

__all__ = [
    "AlertConfig",
    "LoggingSettings",
    "OrchestratorConfig",
    "RenderAPIConfig",
    "RestartConfig",
    "ServiceTarget",
    "WatchTarget",
    "WatchdogConfig",
    "WebhookConfig",
    "load_config",
    "parse_services_json",
]
