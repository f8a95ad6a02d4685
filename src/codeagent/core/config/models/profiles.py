"""Model profile configuration models."""

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# Profile keys are a closed set; routing categories map onto them.
ProfileKey = Literal["code", "analysis", "creative", "fallback"]

PROFILE_KEYS: tuple[str, ...] = ("code", "analysis", "creative", "fallback")

DEFAULT_ENDPOINT = "http://localhost:11434"


class ModelProfile(BaseModel):
    """One named backend configuration.

    Attributes:
        name: Backend model name (e.g. "qwen2.5-coder:7b").
        endpoint: Base URL of the inference server.
        temperature: Sampling temperature.
        max_tokens: Token budget passed as num_predict.
        use_cases: Declared use cases, informational.
        specializations: Languages or topics the model is good at.
        strengths: Free-form strengths, informational.
        thinking_enabled: Whether prompts may be wrapped for step-by-step reasoning.

    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Backend model name")
    endpoint: str = Field(
        default=DEFAULT_ENDPOINT,
        description="Base URL of the inference server",
    )
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2048, ge=1)
    use_cases: list[str] = Field(default_factory=list)
    specializations: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    thinking_enabled: bool = False

    @field_validator("endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize endpoint so URL joins never produce double slashes."""
        return v.rstrip("/")


class ModelProfiles(BaseModel):
    """The four profiles the router can select."""

    model_config = ConfigDict(frozen=True)

    code: ModelProfile = Field(
        default_factory=lambda: ModelProfile(
            name="qwen2.5-coder:7b",
            temperature=0.1,
            max_tokens=2048,
            use_cases=["code_generation", "code_editing", "file_operations"],
            specializations=["typescript", "javascript", "python", "go", "rust"],
            strengths=["precise_code_generation", "syntax_accuracy"],
        )
    )
    analysis: ModelProfile = Field(
        default_factory=lambda: ModelProfile(
            name="qwen3:latest",
            temperature=0.3,
            max_tokens=3072,
            use_cases=["analysis", "documentation", "complex_reasoning"],
            specializations=["system_design", "architecture_analysis"],
            strengths=["deep_reasoning", "thinking_capability"],
            thinking_enabled=True,
        )
    )
    creative: ModelProfile = Field(
        default_factory=lambda: ModelProfile(
            name="qwen3:latest",
            temperature=0.8,
            max_tokens=1024,
            use_cases=["songs", "poems", "stories", "creative_writing"],
        )
    )
    fallback: ModelProfile = Field(
        default_factory=lambda: ModelProfile(
            name="qwen2.5-coder:7b",
            temperature=0.4,
            max_tokens=800,
            use_cases=["simple_tasks"],
        )
    )

    def get(self, key: str) -> ModelProfile:
        """Return profile by key.

        Raises:
            KeyError: If key is not one of the profile keys.

        """
        if key not in PROFILE_KEYS:
            raise KeyError(f"Unknown model profile: {key!r}")
        profile: ModelProfile = getattr(self, key)
        return profile

    def items(self) -> list[tuple[str, ModelProfile]]:
        """Return (key, profile) pairs in canonical order."""
        return [(key, self.get(key)) for key in PROFILE_KEYS]
