"""Model router: pick a profile for a text and generate with it.

Decision order for classify():
1. Explicit user override (confidence 1.0)
2. Per-extension user preference (confidence 0.9)
3. auto_detect disabled -> default profile
4. Compound request needing deep reasoning with force_analysis_for_compound
   -> analysis profile
5. No indicator hits -> default profile (confidence 0.5)
6. Highest category score, ties broken compound > creative > code > analysis;
   confidence below the threshold falls back to the default profile

Generation substitutes the fallback profile for a profile known to be
unavailable, and retries once on the fallback when the backend reports the
model as missing. Every other backend error propagates.
"""

import logging
import time

from codeagent.core.config.models import PROFILE_KEYS, AgentConfig, ModelProfile
from codeagent.core.exceptions import (
    BackendConnectionError,
    BackendError,
    ModelNotFoundError,
)
from codeagent.providers.base import InferenceBackend, InferenceOptions
from codeagent.routing.scoring import (
    CategoryScores,
    calculate_complexity,
    requires_deep_reasoning,
    score_text,
)
from codeagent.routing.telemetry import HealthStatus, ProfileHealth, TelemetryTracker
from codeagent.routing.thinking import enhance_prompt_for_thinking, process_thinking_text
from codeagent.routing.types import (
    ClassificationResult,
    ContentType,
    GenerationResult,
    SelectionOverride,
)

logger = logging.getLogger(__name__)

NEUTRAL_CONFIDENCE = 0.5
PREFERENCE_CONFIDENCE = 0.9

_PROFILE_TYPES: dict[str, ContentType] = {
    "code": ContentType.CODE,
    "analysis": ContentType.ANALYSIS,
    "creative": ContentType.CREATIVE,
    "fallback": ContentType.CODE,
}

# Tie-break order when several categories share the top score
_TIE_BREAK: tuple[ContentType, ...] = (
    ContentType.COMPOUND,
    ContentType.CREATIVE,
    ContentType.CODE,
    ContentType.ANALYSIS,
)


def _normalize_extension(file_extension: str | None) -> str | None:
    if not file_extension:
        return None
    ext = file_extension.lower()
    return ext if ext.startswith(".") else f".{ext}"


def _check_profile_key(key: str) -> str:
    if key not in PROFILE_KEYS:
        raise ValueError(f"Unknown model profile: {key!r}. Expected one of: {', '.join(PROFILE_KEYS)}")
    return key


class ModelRouter:
    """Content classifier and profile-aware generation front end.

    Args:
        config: Validated configuration (profiles, routing policy, preferences).
        backend: Inference backend. Only needed for generate() and check_health().
        telemetry: Counter store; a new one is created when None.

    """

    def __init__(
        self,
        config: AgentConfig,
        backend: InferenceBackend | None = None,
        telemetry: TelemetryTracker | None = None,
    ) -> None:
        self._config = config
        self._backend = backend
        self._telemetry = telemetry or TelemetryTracker(
            PROFILE_KEYS, enabled=config.routing.enable_performance_tracking
        )

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def telemetry(self) -> TelemetryTracker:
        return self._telemetry

    @property
    def default_profile(self) -> str:
        """Default profile, user preference first."""
        return self._config.preferences.default_profile or self._config.routing.default_profile

    @property
    def fallback_profile(self) -> str:
        return self._config.routing.fallback_profile

    def profile(self, key: str) -> ModelProfile:
        return self._config.models.get(key)

    # Classification

    def score(self, text: str, file_extension: str | None = None, is_compound: bool = False) -> CategoryScores:
        """Score text with the configured weights."""
        routing = self._config.routing
        return score_text(
            text,
            routing.weights,
            file_extension=_normalize_extension(file_extension),
            is_compound=is_compound,
            extension_categories=dict(routing.extension_categories),
            code_file_types=routing.code_model_file_types,
        )

    def classify(
        self,
        text: str,
        file_extension: str | None = None,
        user_override: str | None = None,
        is_compound: bool = False,
    ) -> ClassificationResult:
        """Choose a profile for text.

        Args:
            text: Request or operation description.
            file_extension: Extension hint (".py", "md", ...).
            user_override: Profile key forced by the user.
            is_compound: Whether the request was decomposed into several steps.

        Returns:
            ClassificationResult. Pure with respect to text and configuration.

        Raises:
            ValueError: If user_override is not a profile key.

        Examples:
            >>> router = ModelRouter(AgentConfig())
            >>> router.classify("explain how the caching layer works").suggested_model
            'analysis'

        """
        routing = self._config.routing
        ext = _normalize_extension(file_extension)
        complexity = calculate_complexity(text, routing.weights)
        deep = requires_deep_reasoning(text, complexity, routing, is_compound=is_compound)

        def result(
            content_type: ContentType,
            confidence: float,
            profile: str,
            reasoning: str,
            override: SelectionOverride,
            scores: CategoryScores | None = None,
        ) -> ClassificationResult:
            return ClassificationResult(
                type=content_type,
                confidence=confidence,
                suggested_model=profile,
                reasoning=reasoning,
                scores=scores.as_dict() if scores else {},
                complexity=complexity,
                requires_deep_reasoning=deep,
                override=override,
            )

        if user_override:
            key = _check_profile_key(user_override)
            return result(_PROFILE_TYPES[key], 1.0, key, f"User specified {key} profile", SelectionOverride.USER)

        preferred = self._config.preferences.extension_overrides.get(ext) if ext else None
        if preferred:
            return result(
                _PROFILE_TYPES[preferred],
                PREFERENCE_CONFIDENCE,
                preferred,
                f"User preference override for {ext} files",
                SelectionOverride.PREFERENCE,
            )

        default = self.default_profile
        if not routing.auto_detect:
            return result(
                _PROFILE_TYPES[default],
                NEUTRAL_CONFIDENCE,
                default,
                "Auto-detection disabled, using default profile",
                SelectionOverride.DEFAULT,
            )

        scores = self.score(text, ext, is_compound)
        total = scores.total
        confidence = scores.maximum / total if total > 0 else NEUTRAL_CONFIDENCE

        if is_compound and deep and routing.force_analysis_for_compound:
            return result(
                ContentType.COMPOUND,
                confidence,
                "analysis",
                f"Compound operation with complexity {complexity:.2f} needs deep reasoning",
                SelectionOverride.AUTO,
                scores,
            )

        if total == 0:
            return result(
                _PROFILE_TYPES[default],
                NEUTRAL_CONFIDENCE,
                default,
                "No clear indicators found, using default profile",
                SelectionOverride.DEFAULT,
                scores,
            )

        by_type = {
            ContentType.COMPOUND: scores.compound,
            ContentType.CREATIVE: scores.creative,
            ContentType.CODE: scores.code,
            ContentType.ANALYSIS: scores.analysis,
        }
        winner = next(t for t in _TIE_BREAK if by_type[t] == scores.maximum)
        if winner is ContentType.COMPOUND:
            profile = "analysis" if deep else "code"
        else:
            profile = winner.value
        bonus = ", file extension bonus" if scores.extension_bonus else ""
        reasoning = f"{winner.value.capitalize()} content detected (score: {scores.maximum:g}{bonus})"

        if confidence < routing.confidence_threshold:
            summary = ", ".join(f"{k}={v:g}" for k, v in scores.as_dict().items())
            return result(
                ContentType.MIXED,
                confidence,
                default,
                f"Mixed signals ({summary}); confidence {confidence:.2f} below "
                f"{routing.confidence_threshold:.2f}, using default profile",
                SelectionOverride.DEFAULT,
                scores,
            )

        return result(winner, confidence, profile, reasoning, SelectionOverride.AUTO, scores)

    def select_profile(
        self,
        text: str,
        file_extension: str | None = None,
        user_override: str | None = None,
        is_compound: bool = False,
    ) -> str:
        """Profile key classify() would suggest."""
        return self.classify(text, file_extension, user_override, is_compound).suggested_model

    # Generation

    def _call(
        self,
        key: str,
        prompt: str,
        deep: bool,
        temperature: float | None,
        max_tokens: int | None,
    ) -> tuple[str, int]:
        if self._backend is None:
            raise BackendError("No inference backend configured", profile=key)

        profile = self.profile(key)
        preferences = self._config.preferences
        if temperature is None:
            temperature = preferences.preferred_temperature.get(key)
        if profile.thinking_enabled and (deep or preferences.enable_thinking_mode):
            prompt = enhance_prompt_for_thinking(prompt)

        options = InferenceOptions(temperature=temperature, max_tokens=max_tokens)
        start = time.perf_counter()
        try:
            text = self._backend.infer(prompt, profile, options)
        except BackendError as e:
            e.profile = e.profile or key
            e.model = e.model or profile.name
            status = (
                HealthStatus.UNAVAILABLE
                if isinstance(e, (ModelNotFoundError, BackendConnectionError))
                else HealthStatus.DEGRADED
            )
            self._telemetry.track_failure(key, str(e), status=status)
            raise
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        self._telemetry.track_success(key, elapsed_ms)
        return text, elapsed_ms

    def generate(
        self,
        prompt: str,
        profile: str | None = None,
        file_extension: str | None = None,
        is_compound: bool = False,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerationResult:
        """Generate text with the selected (or given) profile.

        Args:
            prompt: Prompt text.
            profile: Profile key to use; classified from the prompt when None.
            file_extension: Extension hint for classification.
            is_compound: Compound hint for classification.
            temperature: Overrides preference and profile temperature.
            max_tokens: Overrides the profile token budget.

        Returns:
            GenerationResult naming the profile that actually answered.

        Raises:
            BackendError: Backend failed (after the single fallback retry for
                a missing model).

        """
        classification: ClassificationResult | None = None
        if profile is None:
            classification = self.classify(prompt, file_extension, is_compound=is_compound)
            requested = classification.suggested_model
            deep = classification.requires_deep_reasoning
        else:
            requested = _check_profile_key(profile)
            complexity = calculate_complexity(prompt, self._config.routing.weights)
            deep = requires_deep_reasoning(prompt, complexity, self._config.routing, is_compound=is_compound)

        key = requested
        fallback = self.fallback_profile
        if key != fallback and self._telemetry.is_unavailable(key):
            logger.warning("Profile '%s' is unavailable, using fallback profile '%s'", key, fallback)
            key = fallback

        try:
            text, elapsed_ms = self._call(key, prompt, deep, temperature, max_tokens)
        except ModelNotFoundError as e:
            if key == fallback:
                raise
            logger.warning("%s Falling back to profile '%s'.", e, fallback)
            key = fallback
            text, elapsed_ms = self._call(key, prompt, deep, temperature, max_tokens)

        preferences = self._config.preferences
        text = process_thinking_text(
            text,
            show=preferences.show_thinking_text,
            format_blocks=preferences.format_thinking_text,
        )
        return GenerationResult(
            text=text,
            profile=key,
            model=self.profile(key).name,
            requested_profile=requested,
            response_time_ms=elapsed_ms,
            classification=classification,
        )

    # Health

    def check_health(self, profiles: list[str] | None = None) -> dict[str, ProfileHealth]:
        """Probe profiles with a one-token request and refresh their status.

        Returns:
            Health per checked profile.

        """
        keys = [_check_profile_key(k) for k in profiles] if profiles else list(PROFILE_KEYS)
        if not self._config.routing.enable_health_checks:
            logger.info("Health checks disabled by configuration")
            return {key: self._telemetry.health(key) for key in keys}
        if self._backend is None:
            raise BackendError("No inference backend configured")

        for key in keys:
            try:
                elapsed_ms = self._backend.health_check(self.profile(key))
            except BackendError as e:
                self._telemetry.update_health(key, HealthStatus.UNAVAILABLE, error=str(e))
                logger.debug("Health check failed for %s: %s", key, e)
            else:
                self._telemetry.update_health(key, HealthStatus.HEALTHY, response_time_ms=elapsed_ms)
        return {key: self._telemetry.health(key) for key in keys}


def build_router(config: AgentConfig, backend: InferenceBackend | None = None) -> ModelRouter:
    """Construct a router with the Ollama backend unless one is given."""
    if backend is None:
        from codeagent.providers.ollama import OllamaBackend

        backend = OllamaBackend()
    return ModelRouter(config, backend)
