"""Inference backend interface.

Backends turn a prompt into text for one model profile. They raise the
BackendError family so the router can tell a missing model (retry once on
the fallback profile) from a refused connection (mark unavailable) from
anything else (propagate).
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from codeagent.core.config.models import ModelProfile

DEFAULT_TIMEOUT = 120.0
HEALTH_CHECK_TIMEOUT = 10.0


@dataclass(frozen=True)
class InferenceOptions:
    """Per-call overrides of profile settings.

    Attributes:
        temperature: Overrides ModelProfile.temperature when set.
        max_tokens: Overrides ModelProfile.max_tokens when set.
        timeout: Request timeout in seconds.

    """

    temperature: float | None = None
    max_tokens: int | None = None
    timeout: float = DEFAULT_TIMEOUT


@runtime_checkable
class InferenceBackend(Protocol):
    """Blocking text generation against a model profile."""

    def infer(self, prompt: str, profile: ModelProfile, options: InferenceOptions | None = None) -> str:
        """Generate text.

        Raises:
            ModelNotFoundError: Backend does not know profile.name.
            BackendConnectionError: Endpoint unreachable.
            BackendTimeoutError: No answer within options.timeout.
            BackendError: Any other failure.

        """
        ...

    def health_check(self, profile: ModelProfile) -> int:
        """Send a minimal request; return response time in milliseconds."""
        ...
