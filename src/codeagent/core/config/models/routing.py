"""Routing policy and scoring weight configuration models.

The indicator vocabularies and multipliers live here rather than as module
constants so the scoring heuristic can be swapped per configuration and
tested in isolation.
"""

import logging
from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from codeagent.core.config.models.profiles import PROFILE_KEYS

logger = logging.getLogger(__name__)

# Categories a file extension can add weight to
ScoringCategory = Literal["code", "analysis", "creative"]

DEFAULT_CREATIVE_INDICATORS: tuple[str, ...] = (
    "song", "poem", "story", "joke", "haiku", "lyrics", "creative",
    "funny", "humor", "narrative", "tale", "adventure", "fantasy",
    "comedy", "romance", "mystery", "drama", "character", "dialogue",
    "plot", "write a song", "write a poem", "tell me a story",
)

DEFAULT_CODE_INDICATORS: tuple[str, ...] = (
    "function", "class", "component", "script", "algorithm",
    "method", "implementation", "interface", "module", "library",
    "framework", "database", "query", "endpoint", "service", "debug",
    "refactor", "optimize", "bug", "error", "compile", "syntax",
    "variable", "parameter", "return", "import", "export", "edit file",
    "create file", "write file", "modify code", "fix code", "generate code",
    "typescript", "javascript", "python", "react", "vue", "angular",
)

DEFAULT_ANALYSIS_INDICATORS: tuple[str, ...] = (
    # Documentation and guides
    "documentation", "readme", "guide", "tutorial", "manual",
    "explanation", "how-to", "instructions", "overview", "summary",
    # Questions and explanations
    "describe", "explain", "what is", "how does", "why does", "purpose of",
    "what are", "how can", "what do", "tell me", "help me understand",
    "can you explain", "walk me through", "break down", "clarify",
    "elaborate", "define", "meaning of", "difference between", "compare",
    "contrast", "pros and cons", "advantages", "disadvantages",
    # Analysis and reasoning
    "analyze", "analysis", "architecture", "design", "strategy",
    "planning", "requirements", "complex reasoning", "understand",
    "comprehensive", "deep dive", "investigate", "research", "review",
    "assess", "evaluate", "examine", "study", "inspect", "audit",
    "critique", "feedback", "recommendation", "suggest", "advice",
    "best practices", "optimization", "improvement", "enhancement",
    # Capabilities and general questions
    "what can you do", "capabilities", "features", "abilities", "skills",
    "help with", "assist with", "support", "what do you know",
    "can you help", "are you able", "do you support", "how good are you",
    # Problem solving
    "solve", "solution", "approach", "methodology", "process",
    "steps", "workflow", "procedure", "logic", "reasoning",
    "think through", "work through", "figure out", "determine",
)

DEFAULT_COMPOUND_INDICATORS: tuple[str, ...] = (
    "and then", "and also", "create and", "make and", "write and",
    "first create", "then modify", "connect to", "link to",
    "multiple", "both", "all of", "several", "compound operation",
)

DEFAULT_EXTENSION_CATEGORIES: dict[str, ScoringCategory] = {
    # Code and markup
    ".js": "code", ".ts": "code", ".jsx": "code", ".tsx": "code",
    ".py": "code", ".java": "code", ".cpp": "code", ".c": "code",
    ".cs": "code", ".go": "code", ".rs": "code", ".php": "code",
    ".rb": "code", ".swift": "code", ".kt": "code", ".scala": "code",
    ".html": "code", ".css": "code", ".scss": "code", ".sass": "code",
    ".json": "code", ".xml": "code", ".yaml": "code", ".yml": "code",
    ".sql": "code", ".sh": "code", ".bash": "code", ".zsh": "code",
    ".dockerfile": "code", ".makefile": "code", ".toml": "code",
    ".lock": "code", ".gitignore": "code", ".env": "code",
    # Documentation
    ".md": "analysis", ".txt": "analysis", ".rst": "analysis",
    ".adoc": "analysis", ".wiki": "analysis", ".doc": "analysis",
    # Creative content
    ".poem": "creative", ".story": "creative", ".lyrics": "creative",
    ".creative": "creative",
}


class ScoringWeights(BaseModel):
    """Indicator vocabularies and weights used by the content scorer.

    Keyword hits add 1.0 unless the indicator contains one of the marker
    phrases for its category, in which case the marker weight is used.
    Analysis indicators are always weighted: question markers get
    ``question_detection_boost * 2``, review markers get
    ``analysis_weight_multiplier`` and everything else gets
    ``analysis_weight_multiplier * analysis_base_factor``.
    """

    model_config = ConfigDict(frozen=True)

    creative_indicators: tuple[str, ...] = DEFAULT_CREATIVE_INDICATORS
    code_indicators: tuple[str, ...] = DEFAULT_CODE_INDICATORS
    analysis_indicators: tuple[str, ...] = DEFAULT_ANALYSIS_INDICATORS
    compound_indicators: tuple[str, ...] = DEFAULT_COMPOUND_INDICATORS

    creative_markers: tuple[str, ...] = ("write a", "tell me")
    creative_marker_weight: float = Field(default=2.0, ge=0.0)
    code_markers: tuple[str, ...] = ("debug", "error", "implement")
    code_marker_weight: float = Field(default=2.0, ge=0.0)
    analysis_question_markers: tuple[str, ...] = (
        "analyze", "explain", "what is", "tell me", "what can", "what do",
    )
    analysis_review_markers: tuple[str, ...] = ("architecture", "review", "assess")
    question_detection_boost: float = Field(default=2.0, ge=0.0)
    analysis_weight_multiplier: float = Field(default=3.0, ge=0.0)
    analysis_base_factor: float = Field(default=0.7, ge=0.0)
    compound_indicator_weight: float = Field(default=2.0, ge=0.0)
    detected_compound_bonus: float = Field(default=5.0, ge=0.0)

    extension_bonus: dict[ScoringCategory, float] = Field(
        default_factory=lambda: {"code": 4.0, "analysis": 3.0, "creative": 3.0}
    )
    code_file_type_bonus: float = Field(default=2.0, ge=0.0)

    # Complexity factors: (per-hit weight, cap)
    complexity_length_divisor: float = Field(default=500.0, gt=0.0)
    complexity_length_cap: float = 0.3
    complexity_action_verbs: tuple[str, ...] = (
        "create", "edit", "modify", "generate", "analyze", "connect", "link",
    )
    complexity_action_weight: float = 0.15
    complexity_action_cap: float = 0.4
    complexity_technical_nouns: tuple[str, ...] = (
        "architecture", "system", "design", "integration", "dependency", "compound",
    )
    complexity_technical_weight: float = 0.1
    complexity_technical_cap: float = 0.3
    complexity_conjunctions: tuple[str, ...] = (" and ", " then ", " also ", " both ", " multiple ")
    complexity_conjunction_weight: float = 0.1
    complexity_conjunction_cap: float = 0.2

    @field_validator(
        "creative_indicators",
        "code_indicators",
        "analysis_indicators",
        "compound_indicators",
        mode="before",
    )
    @classmethod
    def lowercase_indicators(cls, v: object) -> tuple[str, ...]:
        """Indicators are matched against lower-cased text."""
        if v is None:
            return ()
        return tuple(str(item).lower() for item in v)  # type: ignore[attr-defined]


class RoutingPolicy(BaseModel):
    """Routing policy consumed by the model router.

    Attributes:
        default_profile: Profile used when signals are absent or weak.
        auto_detect: When False the router skips scoring and uses the default.
        confidence_threshold: Minimum confidence to trust the top category.
        enable_performance_tracking: Record per-profile request counters.
        enable_health_checks: Allow active health probes of profiles.
        use_thinking_for_compound: Compound requests always need deep reasoning.
        thinking_threshold_complexity: Complexity at which deep reasoning kicks in.
        force_analysis_for_compound: Send compound + deep reasoning to analysis.
        code_model_file_types: Extensions receiving an extra code bonus.
        analysis_model_operations: Operation names flagged as reasoning-heavy.
        fallback_profile: Profile substituted for unavailable profiles.
        extension_categories: Extension -> category bonus table.
        weights: Indicator vocabularies and multipliers.

    """

    model_config = ConfigDict(frozen=True)

    default_profile: str = Field(default="analysis", description="Default model profile")
    auto_detect: bool = True
    confidence_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    enable_performance_tracking: bool = True
    enable_health_checks: bool = True
    use_thinking_for_compound: bool = True
    thinking_threshold_complexity: float = Field(default=0.5, ge=0.0, le=1.0)
    force_analysis_for_compound: bool = True
    code_model_file_types: tuple[str, ...] = (
        ".ts", ".js", ".tsx", ".jsx", ".py", ".go", ".rs", ".html", ".css",
    )
    analysis_model_operations: tuple[str, ...] = (
        "compound_planning",
        "architecture_analysis",
        "system_design",
        "explanations",
        "questions",
        "capabilities",
    )
    fallback_profile: str = Field(default="fallback")
    extension_categories: dict[str, ScoringCategory] = Field(
        default_factory=lambda: dict(DEFAULT_EXTENSION_CATEGORIES)
    )
    weights: ScoringWeights = Field(default_factory=ScoringWeights)

    @field_validator("default_profile", "fallback_profile")
    @classmethod
    def validate_profile_key(cls, v: str) -> str:
        """Profile references must name one of the configured profiles."""
        if v not in PROFILE_KEYS:
            raise ValueError(f"unknown profile {v!r}, expected one of {', '.join(PROFILE_KEYS)}")
        return v

    @field_validator("extension_categories", mode="before")
    @classmethod
    def normalize_extensions(cls, v: object) -> object:
        """Lower-case extensions and add the leading dot when missing."""
        if not isinstance(v, dict):
            return v
        normalized: dict[str, object] = {}
        for ext, category in v.items():
            key = str(ext).lower()
            if not key.startswith("."):
                key = f".{key}"
            normalized[key] = category
        return normalized

    @model_validator(mode="after")
    def warn_on_self_fallback(self) -> Self:
        """A default profile equal to the fallback makes fallback a no-op."""
        if self.default_profile == self.fallback_profile:
            logger.warning(
                "Routing: default_profile and fallback_profile are both '%s'; "
                "unavailable profiles will have no substitute.",
                self.default_profile,
            )
        return self
