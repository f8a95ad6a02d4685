"""Configuration package: pydantic models plus YAML loading."""

from codeagent.core.config.loader import (
    PREFERENCES_PATH,
    PROJECT_CONFIG_NAME,
    USER_CONFIG_PATH,
    convert_legacy_config,
    load_config,
    load_preferences,
    save_preferences,
)
from codeagent.core.config.models import (
    PROFILE_KEYS,
    AgentConfig,
    ModelProfile,
    ModelProfiles,
    RoutingPolicy,
    ScoringWeights,
    UserPreferences,
)

__all__ = [
    "AgentConfig",
    "ModelProfile",
    "ModelProfiles",
    "PREFERENCES_PATH",
    "PROFILE_KEYS",
    "PROJECT_CONFIG_NAME",
    "RoutingPolicy",
    "ScoringWeights",
    "USER_CONFIG_PATH",
    "UserPreferences",
    "convert_legacy_config",
    "load_config",
    "load_preferences",
    "save_preferences",
]
