"""Result types returned by the model router."""

from dataclasses import dataclass, field
from enum import Enum


class ContentType(str, Enum):
    """What kind of content a request asks for."""

    CODE = "code"
    ANALYSIS = "analysis"
    CREATIVE = "creative"
    MIXED = "mixed"
    COMPOUND = "compound"


class SelectionOverride(str, Enum):
    """Why the suggested profile was chosen."""

    USER = "user"
    PREFERENCE = "preference"
    AUTO = "auto"
    DEFAULT = "default"


@dataclass(frozen=True)
class ClassificationResult:
    """Routing decision for one text.

    Attributes:
        type: Dominant content type.
        confidence: Share of the winning category in the total score (0-1).
        suggested_model: Profile key to use.
        reasoning: Human-readable explanation, diagnostic only.
        scores: Raw per-category scores.
        complexity: Derived complexity in [0, 1].
        requires_deep_reasoning: Whether the request warrants step-by-step reasoning.
        override: Source of the decision.

    """

    type: ContentType
    confidence: float
    suggested_model: str
    reasoning: str
    scores: dict[str, float] = field(default_factory=dict)
    complexity: float = 0.0
    requires_deep_reasoning: bool = False
    override: SelectionOverride = SelectionOverride.AUTO


@dataclass(frozen=True)
class GenerationResult:
    """Text generated by a backend on behalf of a profile.

    Attributes:
        text: Post-processed response text.
        profile: Profile key that actually answered.
        model: Backend model name that actually answered.
        requested_profile: Profile key originally selected.
        response_time_ms: Wall-clock duration of the backend call.
        classification: Routing decision, when the router classified the prompt.

    """

    text: str
    profile: str
    model: str
    requested_profile: str
    response_time_ms: int = 0
    classification: ClassificationResult | None = None

    @property
    def used_fallback(self) -> bool:
        return self.profile != self.requested_profile
