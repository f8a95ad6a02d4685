"""Tests for configuration loading and preferences persistence."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from codeagent.core.config import (
    AgentConfig,
    UserPreferences,
    convert_legacy_config,
    load_config,
    load_preferences,
    save_preferences,
)
from codeagent.core.exceptions import ConfigError


def _write_yaml(path: Path, data: object) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data))
    return path


class TestLoadConfig:
    """Tests for load_config()."""

    def test_defaults_without_files(self) -> None:
        config = load_config()
        assert config == AgentConfig()
        assert config.models.code.name == "qwen2.5-coder:7b"
        assert config.routing.default_profile == "analysis"
        assert config.routing.confidence_threshold == 0.6

    def test_project_file_discovered(self) -> None:
        _write_yaml(Path.cwd() / "codeagent.yaml", {"routing": {"confidence_threshold": 0.8}})
        assert load_config().routing.confidence_threshold == 0.8

    def test_user_file_discovered(self, isolate_user_config: Path) -> None:
        _write_yaml(isolate_user_config / "config.yaml", {"routing": {"auto_detect": False}})
        assert load_config().routing.auto_detect is False

    def test_project_file_wins_over_user_file(self, isolate_user_config: Path) -> None:
        _write_yaml(isolate_user_config / "config.yaml", {"routing": {"confidence_threshold": 0.9}})
        _write_yaml(Path.cwd() / "codeagent.yaml", {"routing": {"confidence_threshold": 0.7}})
        assert load_config().routing.confidence_threshold == 0.7

    def test_dict_source(self) -> None:
        config = load_config({"models": {"code": {"name": "coder:1b", "endpoint": "http://h:1/"}}})
        assert config.models.code.name == "coder:1b"
        assert config.models.code.endpoint == "http://h:1"

    def test_explicit_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("models: [unclosed")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config(path)

    def test_validation_error(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "c.yaml", {"routing": {"default_profile": "gpt"}})
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_empty_file_means_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == AgentConfig()

    def test_preferences_merged(self, isolate_user_config: Path) -> None:
        _write_yaml(isolate_user_config / "preferences.yaml", {"default_profile": "code"})
        assert load_config().preferences.default_profile == "code"

    def test_config_is_frozen(self) -> None:
        config = load_config()
        with pytest.raises(ValidationError):
            config.routing.auto_detect = False  # type: ignore[misc]


class TestLegacyConfig:
    """Tests for single-model config conversion."""

    def test_convert(self) -> None:
        converted = convert_legacy_config({"model": "coder:3b", "ollama_url": "http://box:11434", "temperature": 0.2})
        models = converted["models"]
        assert models["code"]["name"] == "coder:3b"
        assert models["code"]["temperature"] == 0.2
        assert models["fallback"]["name"] == "coder:3b"
        assert models["analysis"]["name"] == "qwen3:latest"
        assert {m["endpoint"] for m in models.values()} == {"http://box:11434"}

    def test_legacy_file_loads(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "old.yaml", {"model": "coder:3b"})
        config = load_config(path)
        assert config.models.code.name == "coder:3b"
        assert config.models.creative.name == "qwen3:latest"


class TestPreferences:
    """Tests for load_preferences() and save_preferences()."""

    def test_missing_file_gives_defaults(self) -> None:
        assert load_preferences() == UserPreferences()

    def test_round_trip(self, isolate_user_config: Path) -> None:
        prefs = UserPreferences(default_profile="creative", extension_overrides={"md": "analysis"})

        path = save_preferences(prefs)

        assert path == isolate_user_config / "preferences.yaml"
        assert yaml.safe_load(path.read_text()) == {
            "default_profile": "creative",
            "extension_overrides": {".md": "analysis"},
        }
        assert load_preferences() == prefs

    def test_broken_file_falls_back(self, isolate_user_config: Path, caplog: pytest.LogCaptureFixture) -> None:
        _write_yaml(isolate_user_config / "preferences.yaml", {"default_profile": "gpt"})
        assert load_preferences() == UserPreferences()
        assert "Failed to load user preferences" in caplog.text

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            UserPreferences(preferred_temperature={"code": 3.0})
        with pytest.raises(ValidationError):
            UserPreferences(extension_overrides={".py": "gpt"})
