"""Models command group: inspect profiles and manage routing preferences.

Example:
    $ codeagent models list
    $ codeagent models health
    $ codeagent models prefer code --ext .css
    $ codeagent models unprefer --ext .css
"""

import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.table import Table

from codeagent.cli_utils import (
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    _error,
    _info,
    _load_config_or_exit,
    _success,
    console,
)
from codeagent.core.config import (
    PROFILE_KEYS,
    UserPreferences,
    load_preferences,
    save_preferences,
)
from codeagent.core.exceptions import BackendError, ConfigError
from codeagent.routing import HealthStatus, build_router

logger = logging.getLogger(__name__)

models_app = typer.Typer(
    name="models",
    help="Model profile and routing preference commands",
    no_args_is_help=True,
)

_HEALTH_COLORS = {
    HealthStatus.HEALTHY: "green",
    HealthStatus.DEGRADED: "yellow",
    HealthStatus.UNAVAILABLE: "red",
    HealthStatus.UNKNOWN: "dim",
}


def _normalize_ext(ext: str) -> str:
    ext = ext.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


def _store(preferences: dict[str, object]) -> None:
    try:
        save_preferences(UserPreferences.model_validate(preferences))
    except ValidationError as e:
        _error(f"Invalid preference: {e.errors()[0]['msg']}")
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from None
    except ConfigError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from None


@models_app.command(name="list")
def list_command(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show configured model profiles and user preferences."""
    agent_config = _load_config_or_exit(config)
    routing = agent_config.routing
    preferences = agent_config.preferences

    table = Table(title="Model profiles")
    table.add_column("Profile", style="cyan")
    table.add_column("Model")
    table.add_column("Endpoint")
    table.add_column("Temp", justify="right")
    table.add_column("Max tokens", justify="right")
    table.add_column("Thinking")
    default = preferences.default_profile or routing.default_profile
    for key, profile in agent_config.models.items():
        marker = " (default)" if key == default else ""
        temperature = preferences.preferred_temperature.get(key, profile.temperature)
        table.add_row(
            f"{key}{marker}",
            profile.name,
            profile.endpoint,
            f"{temperature:.1f}",
            str(profile.max_tokens),
            "yes" if profile.thinking_enabled else "no",
        )
    console.print(table)

    if preferences.extension_overrides:
        console.print("Extension overrides:")
        for ext, key in sorted(preferences.extension_overrides.items()):
            console.print(f"  {ext} -> {key}")


@models_app.command(name="health")
def health_command(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to config file"),
    profile: list[str] | None = typer.Option(None, "--profile", "-p", help="Profile(s) to check (default: all)"),
) -> None:
    """Probe each profile's model with a one-token request."""
    agent_config = _load_config_or_exit(config)
    router = build_router(agent_config)
    try:
        results = router.check_health(profile or None)
    except ValueError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from None
    except BackendError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from None

    table = Table(title="Model health")
    table.add_column("Profile", style="cyan")
    table.add_column("Model")
    table.add_column("Status")
    table.add_column("Response", justify="right")
    table.add_column("Last error")
    for key, health in results.items():
        color = _HEALTH_COLORS[health.status]
        response = f"{health.response_time_ms}ms" if health.response_time_ms is not None else "-"
        table.add_row(
            key,
            agent_config.models.get(key).name,
            f"[{color}]{health.status.value}[/{color}]",
            response,
            health.last_error or "",
        )
    console.print(table)

    if any(h.status is HealthStatus.UNAVAILABLE for h in results.values()):
        raise typer.Exit(code=EXIT_ERROR)


@models_app.command(name="prefer")
def prefer_command(
    profile: str = typer.Argument(..., help=f"Profile key: {', '.join(PROFILE_KEYS)}"),
    ext: str | None = typer.Option(None, "--ext", "-e", help="Only for files with this extension"),
) -> None:
    """Set the default profile, or a per-extension override with --ext."""
    if profile not in PROFILE_KEYS:
        _error(f"Unknown profile '{profile}'. Expected one of: {', '.join(PROFILE_KEYS)}")
        raise typer.Exit(code=EXIT_ERROR)

    data = load_preferences().model_dump()
    if ext:
        extension = _normalize_ext(ext)
        data["extension_overrides"] = {**data["extension_overrides"], extension: profile}
        _store(data)
        _success(f"Files ending in {extension} will use the '{profile}' profile")
    else:
        data["default_profile"] = profile
        _store(data)
        _success(f"Default profile set to '{profile}'")


@models_app.command(name="unprefer")
def unprefer_command(
    ext: str = typer.Option(..., "--ext", "-e", help="Extension whose override to remove"),
) -> None:
    """Remove a per-extension override."""
    extension = _normalize_ext(ext)
    data = load_preferences().model_dump()
    overrides = dict(data["extension_overrides"])
    if overrides.pop(extension, None) is None:
        _info(f"No override set for {extension}")
        return
    data["extension_overrides"] = overrides
    _store(data)
    _success(f"Removed override for {extension}")
