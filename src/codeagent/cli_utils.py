"""Shared CLI helpers: exit codes, console output and logging setup."""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from codeagent.core.config import AgentConfig, load_config
from codeagent.core.exceptions import ConfigError

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_PARTIAL = 3
EXIT_INTERRUPTED = 130

console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool, quiet: bool) -> None:
    """Install a Rich log handler on the codeagent logger.

    DEBUG with verbose, WARNING with quiet, INFO otherwise. Safe to call
    more than once; earlier handlers are replaced.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    package_logger = logging.getLogger("codeagent")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    handler = RichHandler(console=err_console, show_path=verbose, show_time=verbose, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False


def _error(message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")


def _warning(message: str) -> None:
    console.print(f"[yellow]Warning:[/yellow] {message}")


def _info(message: str) -> None:
    console.print(f"[blue]Info:[/blue] {message}")


def _success(message: str) -> None:
    console.print(f"[green]{message}[/green]")


def _load_config_or_exit(config: Path | None) -> AgentConfig:
    """Load configuration or exit with EXIT_CONFIG_ERROR."""
    try:
        return load_config(config)
    except ConfigError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from None


def _validate_project_path(project: Path) -> Path:
    """Resolve a project directory or exit with EXIT_ERROR."""
    project_path = project.resolve()
    if not project_path.exists():
        _error(f"Directory does not exist: {project_path}")
        raise typer.Exit(code=EXIT_ERROR)
    if not project_path.is_dir():
        _error(f"Not a directory: {project_path}")
        raise typer.Exit(code=EXIT_ERROR)
    return project_path
