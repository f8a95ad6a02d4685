"""YAML configuration loading for codeagent.

Configuration is read once at startup and passed down explicitly; there is
no process-wide config singleton. Sources, in order of precedence:

1. Explicit path or dict passed to load_config()
2. ./codeagent.yaml in the working directory
3. ~/.codeagent/config.yaml
4. Built-in defaults

User preferences live in a separate file (~/.codeagent/preferences.yaml)
because they are written back by the CLI, while the main config is not.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from codeagent.core.config.models import AgentConfig, UserPreferences
from codeagent.core.config.models.profiles import DEFAULT_ENDPOINT
from codeagent.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = "codeagent.yaml"
USER_CONFIG_DIR = Path.home() / ".codeagent"
USER_CONFIG_PATH = USER_CONFIG_DIR / "config.yaml"
PREFERENCES_PATH = USER_CONFIG_DIR / "preferences.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping from disk.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, or is
            not a mapping.

    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def convert_legacy_config(raw: dict[str, Any]) -> dict[str, Any]:
    """Convert a single-model config into the four-profile layout.

    Legacy files only carry ``model`` and ``ollama_url``. The endpoint is
    applied to every profile; the model names keep their defaults because
    the legacy single model was a code model and the analysis/creative
    profiles need a general-purpose one.

    Args:
        raw: Parsed legacy configuration.

    Returns:
        Dict suitable for AgentConfig.model_validate().

    """
    endpoint = raw.get("ollama_url") or DEFAULT_ENDPOINT
    legacy_model = raw.get("model")
    logger.info("Converting legacy single-model config (model=%s)", legacy_model)

    models: dict[str, dict[str, Any]] = {
        "code": {"name": legacy_model or "qwen2.5-coder:7b", "temperature": 0.1, "max_tokens": 2048},
        "analysis": {"name": "qwen3:latest", "temperature": 0.3, "max_tokens": 3072, "thinking_enabled": True},
        "creative": {"name": "qwen3:latest", "temperature": 0.8, "max_tokens": 1024},
        "fallback": {"name": legacy_model or "qwen2.5-coder:7b", "temperature": 0.4, "max_tokens": 800},
    }
    for profile in models.values():
        profile["endpoint"] = endpoint
    if "temperature" in raw:
        models["code"]["temperature"] = raw["temperature"]
    if "max_tokens" in raw:
        models["code"]["max_tokens"] = raw["max_tokens"]

    return {"models": models}


def _is_legacy(raw: dict[str, Any]) -> bool:
    return "model" in raw and "models" not in raw


def _discover_config_path() -> Path | None:
    candidates = [Path.cwd() / PROJECT_CONFIG_NAME, USER_CONFIG_PATH]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def load_config(
    source: Path | str | dict[str, Any] | None = None,
    preferences_path: Path | None = None,
) -> AgentConfig:
    """Load configuration and merge user preferences.

    Args:
        source: Path to a YAML file, an already-parsed dict, or None to
            discover the config file (missing file means defaults).
        preferences_path: Preferences file to merge. None uses the default
            location; preferences embedded in the config take precedence
            over nothing but are replaced by the preferences file when it
            exists.

    Returns:
        Validated, frozen AgentConfig.

    Raises:
        ConfigError: If an explicit path is missing, or YAML/validation fails.

    """
    if isinstance(source, dict):
        raw: dict[str, Any] = dict(source)
        origin = "<dict>"
    elif source is not None:
        path = Path(source)
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        raw = _read_yaml(path)
        origin = str(path)
    else:
        discovered = _discover_config_path()
        if discovered is None:
            logger.debug("No config file found, using defaults")
            raw = {}
            origin = "<defaults>"
        else:
            raw = _read_yaml(discovered)
            origin = str(discovered)

    if _is_legacy(raw):
        raw = convert_legacy_config(raw)

    prefs_file = preferences_path if preferences_path is not None else PREFERENCES_PATH
    if prefs_file.is_file():
        raw["preferences"] = load_preferences(prefs_file).model_dump()

    try:
        config = AgentConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {origin}:\n{e}") from e

    logger.debug("Loaded configuration from %s", origin)
    return config


def load_preferences(path: Path | None = None) -> UserPreferences:
    """Load user preferences, falling back to defaults on any problem.

    A broken preference file must never prevent the CLI from running, so
    errors are logged and defaults returned.
    """
    path = path if path is not None else PREFERENCES_PATH
    if not path.is_file():
        return UserPreferences()

    try:
        raw = _read_yaml(path)
        return UserPreferences.model_validate(raw)
    except (ConfigError, ValidationError) as e:
        logger.warning("Failed to load user preferences from %s, using defaults: %s", path, e)
        return UserPreferences()


def save_preferences(preferences: UserPreferences, path: Path | None = None) -> Path:
    """Persist preferences atomically (temp file + rename).

    Returns:
        Path written.

    Raises:
        ConfigError: If the file cannot be written.

    """
    path = path if path is not None else PREFERENCES_PATH
    data = preferences.model_dump(exclude_defaults=True)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, sort_keys=True)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise ConfigError(f"Cannot write preferences to {path}: {e}") from e

    logger.debug("Saved preferences to %s", path)
    return path
