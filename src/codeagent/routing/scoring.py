"""Weighted indicator scoring for request text.

Everything here is a pure function of its inputs: the weight table is
always passed in, never read from module state, so the same text and
weights always give the same scores.
"""

from dataclasses import dataclass

from codeagent.core.config.models import RoutingPolicy, ScoringWeights


@dataclass(frozen=True)
class CategoryScores:
    """Accumulated indicator score per category."""

    code: float = 0.0
    analysis: float = 0.0
    creative: float = 0.0
    compound: float = 0.0
    extension_bonus: bool = False

    @property
    def total(self) -> float:
        return self.code + self.analysis + self.creative + self.compound

    @property
    def maximum(self) -> float:
        return max(self.code, self.analysis, self.creative, self.compound)

    def as_dict(self) -> dict[str, float]:
        return {
            "code": self.code,
            "analysis": self.analysis,
            "creative": self.creative,
            "compound": self.compound,
        }


def _contains_any(indicator: str, markers: tuple[str, ...]) -> bool:
    return any(marker in indicator for marker in markers)


def _indicator_weight(indicator: str, markers: tuple[str, ...], marker_weight: float) -> float:
    return marker_weight if _contains_any(indicator, markers) else 1.0


def _analysis_weight(indicator: str, weights: ScoringWeights) -> float:
    if _contains_any(indicator, weights.analysis_question_markers):
        return weights.question_detection_boost * 2
    if _contains_any(indicator, weights.analysis_review_markers):
        return weights.analysis_weight_multiplier
    return weights.analysis_weight_multiplier * weights.analysis_base_factor


def score_text(
    text: str,
    weights: ScoringWeights,
    file_extension: str | None = None,
    is_compound: bool = False,
    extension_categories: dict[str, str] | None = None,
    code_file_types: tuple[str, ...] = (),
) -> CategoryScores:
    """Score text against the indicator vocabularies.

    Args:
        text: Request text (any case).
        weights: Vocabularies and multipliers.
        file_extension: Extension hint such as ".css" (case-insensitive).
        is_compound: Whether the parser decomposed the request.
        extension_categories: Extension -> category bonus table.
        code_file_types: Extensions receiving the extra code bonus.

    Returns:
        CategoryScores for code, analysis, creative and compound.

    Examples:
        >>> score_text("explain how the caching layer works", ScoringWeights()).analysis
        4.0

    """
    lowered = text.lower()

    creative = sum(
        _indicator_weight(ind, weights.creative_markers, weights.creative_marker_weight)
        for ind in weights.creative_indicators
        if ind in lowered
    )
    code = sum(
        _indicator_weight(ind, weights.code_markers, weights.code_marker_weight)
        for ind in weights.code_indicators
        if ind in lowered
    )
    analysis = sum(_analysis_weight(ind, weights) for ind in weights.analysis_indicators if ind in lowered)
    compound = sum(weights.compound_indicator_weight for ind in weights.compound_indicators if ind in lowered)
    if is_compound:
        compound += weights.detected_compound_bonus

    extension_bonus = False
    if file_extension:
        ext = file_extension.lower()
        if not ext.startswith("."):
            ext = f".{ext}"
        category = (extension_categories or {}).get(ext)
        if category is not None:
            extension_bonus = True
            bonus = weights.extension_bonus.get(category, 0.0)  # type: ignore[call-overload]
            if category == "code":
                code += bonus
            elif category == "analysis":
                analysis += bonus
            elif category == "creative":
                creative += bonus
        if ext in code_file_types:
            code += weights.code_file_type_bonus

    return CategoryScores(
        code=float(code),
        analysis=float(analysis),
        creative=float(creative),
        compound=float(compound),
        extension_bonus=extension_bonus,
    )


def calculate_complexity(text: str, weights: ScoringWeights) -> float:
    """Derive a complexity score in [0, 1].

    Sums four capped factors: text length, distinct action verbs,
    technical nouns and conjunctions.
    """
    lowered = text.lower()
    complexity = min(len(text) / weights.complexity_length_divisor, weights.complexity_length_cap)

    verbs = sum(1 for word in weights.complexity_action_verbs if word in lowered)
    complexity += min(verbs * weights.complexity_action_weight, weights.complexity_action_cap)

    nouns = sum(1 for word in weights.complexity_technical_nouns if word in lowered)
    complexity += min(nouns * weights.complexity_technical_weight, weights.complexity_technical_cap)

    conjunctions = sum(1 for word in weights.complexity_conjunctions if word in lowered)
    complexity += min(conjunctions * weights.complexity_conjunction_weight, weights.complexity_conjunction_cap)

    return min(complexity, 1.0)


def requires_deep_reasoning(text: str, complexity: float, policy: RoutingPolicy, is_compound: bool = False) -> bool:
    """Decide whether a request warrants step-by-step reasoning."""
    if is_compound and policy.use_thinking_for_compound:
        return True
    if complexity >= policy.thinking_threshold_complexity:
        return True
    lowered = text.lower()
    return any(operation in lowered for operation in policy.analysis_model_operations)
