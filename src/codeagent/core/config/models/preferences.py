"""User preference model."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from codeagent.core.config.models.profiles import PROFILE_KEYS


def _check_profile(value: str) -> str:
    if value not in PROFILE_KEYS:
        raise ValueError(f"unknown profile {value!r}, expected one of {', '.join(PROFILE_KEYS)}")
    return value


class UserPreferences(BaseModel):
    """Per-user routing overrides.

    Attributes:
        default_profile: Replaces routing.default_profile when set.
        extension_overrides: Extension -> profile key, wins over scoring.
        preferred_temperature: Profile key -> temperature override.
        always_show_reasoning: Print routing reasoning for every request.
        enable_thinking_mode: Wrap prompts for thinking-enabled profiles.
        show_thinking_text: Keep <think> blocks in responses.
        format_thinking_text: Reformat <think> blocks when shown.

    """

    model_config = ConfigDict(frozen=True)

    default_profile: str | None = None
    extension_overrides: dict[str, str] = Field(default_factory=dict)
    preferred_temperature: dict[str, float] = Field(default_factory=dict)
    always_show_reasoning: bool = False
    enable_thinking_mode: bool = False
    show_thinking_text: bool = False
    format_thinking_text: bool = True

    @field_validator("default_profile")
    @classmethod
    def validate_default_profile(cls, v: str | None) -> str | None:
        """Default must be a known profile key."""
        return None if v is None else _check_profile(v)

    @field_validator("extension_overrides", mode="before")
    @classmethod
    def normalize_extension_overrides(cls, v: object) -> object:
        """Lower-case extension keys, add leading dot, validate profiles."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            return v
        normalized: dict[str, str] = {}
        for ext, profile in v.items():
            key = str(ext).lower()
            if not key.startswith("."):
                key = f".{key}"
            normalized[key] = _check_profile(str(profile))
        return normalized

    @field_validator("preferred_temperature")
    @classmethod
    def validate_temperatures(cls, v: dict[str, float]) -> dict[str, float]:
        """Keys must be profile keys and values within sampling range."""
        for key, temperature in v.items():
            _check_profile(key)
            if not 0.0 <= temperature <= 2.0:
                raise ValueError(f"temperature for {key!r} must be within 0.0-2.0")
        return v
