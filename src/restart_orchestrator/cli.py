"""
restart-orchestrator CLI entry point.
"""

from pathlib import Path
from typing import Any

import click

from restart_orchestrator import __version__
from restart_orchestrator.runner import main as run_main


@click.command()
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to custom configuration file",
)
@click.option("--host", type=str, default=None, help="Interface to bind the HTTP server to")
@click.option("--port", type=int, default=None, help="Port for the HTTP server")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose debug output",
)
@click.version_option(__version__, prog_name="restart-orchestrator")
def cli(config: Path | None, host: str | None, port: int | None, verbose: bool) -> None:
    """Restart remote services on webhook calls or failed health checks."""
    overrides: dict[str, Any] = {"host": host, "port": port}
    run_main(config_path=config, verbose=verbose, cli_overrides=overrides)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
