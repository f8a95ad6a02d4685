"""Config command group for codeagent.

- `codeagent config verify [PATH]`: validate a configuration file
- `codeagent config show`: print the effective configuration as YAML

Example:
    $ codeagent config verify
    $ codeagent config verify ~/.codeagent/config.yaml
"""

import logging
from pathlib import Path

import typer
import yaml

from codeagent.cli_utils import (
    EXIT_CONFIG_ERROR,
    EXIT_SUCCESS,
    _load_config_or_exit,
    console,
)
from codeagent.core.config import PROJECT_CONFIG_NAME

logger = logging.getLogger(__name__)

config_app = typer.Typer(
    name="config",
    help="Configuration management commands",
    no_args_is_help=True,
)


@config_app.command(name="verify")
def verify_command(
    config: Path = typer.Argument(
        None,
        help=f"Path to config file (default: ./{PROJECT_CONFIG_NAME})",
    ),
) -> None:
    """Verify a configuration file for errors and warnings.

    Shows [OK], [WARN], or [ERR] status for each check.

    Exits with code 0 if valid (warnings allowed), 2 if errors found.
    """
    from codeagent.core.config.validator import format_validation_report, validate_config_file

    if config is None:
        config = Path(PROJECT_CONFIG_NAME)

    config_path = config.resolve()

    if not config_path.exists():
        console.print(f"[red]\\[ERR][/red] Config file not found: {config_path}")
        raise typer.Exit(code=EXIT_CONFIG_ERROR)

    if not config_path.is_file():
        console.print(f"[red]\\[ERR][/red] Not a file: {config_path}")
        raise typer.Exit(code=EXIT_CONFIG_ERROR)

    results = validate_config_file(config_path)
    report, has_errors = format_validation_report(results, config_path)
    console.print(report)

    if has_errors:
        raise typer.Exit(code=EXIT_CONFIG_ERROR)
    raise typer.Exit(code=EXIT_SUCCESS)


@config_app.command(name="show")
def show_command(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Print the effective configuration (defaults, file and preferences merged)."""
    agent_config = _load_config_or_exit(config)
    data = agent_config.model_dump(mode="json", exclude={"routing": {"weights"}})
    console.print(yaml.safe_dump(data, sort_keys=False), markup=False, highlight=False)
