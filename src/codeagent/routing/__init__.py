"""Model routing: content scoring, profile selection and telemetry."""

from codeagent.routing.router import ModelRouter, build_router
from codeagent.routing.scoring import (
    CategoryScores,
    calculate_complexity,
    requires_deep_reasoning,
    score_text,
)
from codeagent.routing.telemetry import (
    HealthStatus,
    ProfileHealth,
    ProfilePerformance,
    TelemetryTracker,
)
from codeagent.routing.thinking import enhance_prompt_for_thinking, process_thinking_text
from codeagent.routing.types import (
    ClassificationResult,
    ContentType,
    GenerationResult,
    SelectionOverride,
)

__all__ = [
    "CategoryScores",
    "ClassificationResult",
    "ContentType",
    "GenerationResult",
    "HealthStatus",
    "ModelRouter",
    "ProfileHealth",
    "ProfilePerformance",
    "SelectionOverride",
    "TelemetryTracker",
    "build_router",
    "calculate_complexity",
    "enhance_prompt_for_thinking",
    "process_thinking_text",
    "requires_deep_reasoning",
    "score_text",
]
