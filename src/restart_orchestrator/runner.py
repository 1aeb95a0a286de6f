import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Any

import uvicorn

from restart_orchestrator.alerts import create_alert_sink
from restart_orchestrator.clients.render import RenderClient
from restart_orchestrator.config.app import OrchestratorConfig, load_config
from restart_orchestrator.restart.clock import SystemClock
from restart_orchestrator.restart.coordinator import RestartCoordinator
from restart_orchestrator.restart.machine import RestartStateMachine
from restart_orchestrator.restart.poller import StatusPoller
from restart_orchestrator.servers.http import HTTPServer
from restart_orchestrator.utils.logging import setup_logging
from restart_orchestrator.watchdog import ServiceWatchdog

logger = logging.getLogger(__name__)


class OrchestratorRunner:
    """Runner for the restart orchestrator process."""

    def __init__(
        self,
        config_path: Path | None = None,
        verbose: bool = False,
        cli_overrides: dict[str, Any] | None = None,
        config: OrchestratorConfig | None = None,
    ):
        config_file = str(config_path) if config_path else None
        self.config = config or load_config(config_file, cli_overrides=cli_overrides)
        self.verbose = verbose or self.config.debug
        setup_logging(
            verbose=self.verbose,
            level=self.config.logging.level,
            log_file=self.config.logging.file,
        )
        self._shutdown = asyncio.Event()

        if not self.config.services:
            logger.warning("No services configured; webhook calls will only raise an alert")

        clock = SystemClock()
        self.alerts = create_alert_sink(
            self.config.alerts.webhook_url, timeout=self.config.alerts.timeout
        )
        self.render_client = RenderClient(
            base_url=self.config.render.base_url,
            timeout=self.config.render.timeout,
        )
        self.poller = StatusPoller(
            self.render_client,
            poll_interval=self.config.restart.poll_interval,
            clock=clock,
        )
        self.machine = RestartStateMachine(
            self.render_client,
            self.poller,
            config=self.config.restart,
            alerts=self.alerts,
            clock=clock,
        )
        self.coordinator = RestartCoordinator(self.machine, self.config.services, self.alerts)
        self.watchdog = ServiceWatchdog(
            self.machine,
            config=self.config.watchdog,
            alerts=self.alerts,
            clock=clock,
        )
        self.http_server = HTTPServer(
            self.coordinator,
            self.alerts,
            webhook_config=self.config.webhook,
            port=self.config.port,
        )

    def _setup_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._shutdown.set)

    def request_shutdown(self) -> None:
        self._shutdown.set()

    async def run(self) -> None:
        try:
            self._setup_signal_handlers()

            await self.watchdog.start()

            config = uvicorn.Config(
                self.http_server.app,
                host=self.config.host,
                port=self.config.port,
                log_level="debug" if self.verbose else "warning",
                access_log=False,
            )
            server = uvicorn.Server(config)
            server_task = asyncio.create_task(server.serve(), name="http-server")
            shutdown_task = asyncio.create_task(self._shutdown.wait(), name="shutdown-wait")
            logger.info(
                f"restart-orchestrator listening on {self.config.host}:{self.config.port} "
                f"({len(self.config.services)} services, "
                f"{len(self.config.watchdog.targets)} watchdog targets)"
            )

            # uvicorn may consume the signal itself and just return from serve()
            await asyncio.wait({server_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED)
            logger.info("Shutdown requested")
            shutdown_task.cancel()

            # Stop in reverse startup order
            server.should_exit = True
            await server_task
            await self.http_server.shutdown()
            await self.watchdog.aclose()
            await self.alerts.aclose()
            await self.render_client.aclose()
            logger.info("restart-orchestrator stopped")

        except Exception as e:
            logger.error(f"Fatal error: {e}", exc_info=True)
            sys.exit(1)


async def run_orchestrator(
    config_path: Path | None = None,
    verbose: bool = False,
    cli_overrides: dict[str, Any] | None = None,
) -> None:
    runner = OrchestratorRunner(
        config_path=config_path, verbose=verbose, cli_overrides=cli_overrides
    )
    await runner.run()


def main(
    config_path: Path | None = None,
    verbose: bool = False,
    cli_overrides: dict[str, Any] | None = None,
) -> None:
    try:
        asyncio.run(
            run_orchestrator(config_path=config_path, verbose=verbose, cli_overrides=cli_overrides)
        )
    except KeyboardInterrupt:
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Run restart-orchestrator")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--config", type=Path, help="Path to config file")
    args = parser.parse_args()
    main(config_path=args.config, verbose=args.verbose)
