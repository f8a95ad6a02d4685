"""Pydantic configuration models."""

from pydantic import BaseModel, ConfigDict, Field

from codeagent.core.config.models.preferences import UserPreferences
from codeagent.core.config.models.profiles import (
    DEFAULT_ENDPOINT,
    PROFILE_KEYS,
    ModelProfile,
    ModelProfiles,
    ProfileKey,
)
from codeagent.core.config.models.routing import (
    DEFAULT_EXTENSION_CATEGORIES,
    RoutingPolicy,
    ScoringCategory,
    ScoringWeights,
)


class AgentConfig(BaseModel):
    """Root configuration: model profiles, routing policy and preferences."""

    model_config = ConfigDict(frozen=True)

    models: ModelProfiles = Field(default_factory=ModelProfiles)
    routing: RoutingPolicy = Field(default_factory=RoutingPolicy)
    preferences: UserPreferences = Field(default_factory=UserPreferences)


__all__ = [
    "AgentConfig",
    "DEFAULT_ENDPOINT",
    "DEFAULT_EXTENSION_CATEGORIES",
    "PROFILE_KEYS",
    "ModelProfile",
    "ModelProfiles",
    "ProfileKey",
    "RoutingPolicy",
    "ScoringCategory",
    "ScoringWeights",
    "UserPreferences",
]
