"""Exception hierarchy for codeagent.

All errors raised by codeagent derive from CodeAgentError so the CLI can
catch them in one place. Lower layers (parser, resolver, router) raise or
return these; only the execution engine decides whether a run continues.
"""

__all__ = [
    "CodeAgentError",
    "ConfigError",
    "IntentError",
    "DependencyError",
    "CyclicDependencyError",
    "ExecutionError",
    "BackendError",
    "ModelNotFoundError",
    "BackendConnectionError",
    "BackendTimeoutError",
]


class CodeAgentError(Exception):
    """Base exception for all codeagent errors."""

    pass


class ConfigError(CodeAgentError):
    """Configuration file is missing required data or fails validation."""

    pass


class IntentError(CodeAgentError):
    """An Operation or CompoundIntent was constructed with invalid data."""

    pass


class DependencyError(CodeAgentError):
    """Operation dependencies cannot be satisfied."""

    pass


class CyclicDependencyError(DependencyError):
    """Operations depend on each other in a cycle.

    Attributes:
        cycle: Targets taking part in the cycle, sorted.

    """

    def __init__(self, message: str, cycle: list[str] | None = None) -> None:
        super().__init__(message)
        self.cycle: list[str] = list(cycle or [])


class ExecutionError(CodeAgentError):
    """A command handler failed or an operation cannot be dispatched."""

    pass


class BackendError(CodeAgentError):
    """Inference backend call failed.

    Attributes:
        profile: Model profile key the request was routed to.
        model: Backend model name.

    """

    def __init__(self, message: str, profile: str = "", model: str = "") -> None:
        super().__init__(message)
        self.profile = profile
        self.model = model


class ModelNotFoundError(BackendError):
    """Backend does not know the requested model name (HTTP 404)."""

    pass


class BackendConnectionError(BackendError):
    """Backend endpoint refused the connection or is unreachable."""

    pass


class BackendTimeoutError(BackendError):
    """Backend did not answer within the configured timeout."""

    pass
