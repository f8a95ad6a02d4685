"""State and result types for executing Operations.

- StepStatus / RunStatus: per-operation and per-run state machines
- StepResult: outcome of one handler call (ok/fail factories)
- ExecutionContext: mutable state owned by one run
- ExecutionResult: what the run reports back
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from codeagent.intent.types import Operation


class StepStatus(str, Enum):
    """Lifecycle of one operation within a run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class RunStatus(str, Enum):
    """Lifecycle of a whole run."""

    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    PARTIALLY_FAILED = "partially_failed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class StepResult:
    """Outcome of dispatching one operation to a handler.

    Use the factories rather than the constructor:

        >>> StepResult.ok(output="site/styles.css")
        >>> StepResult.fail("Source file not found: a.py")

    """

    success: bool
    output: Any = None
    error: str | None = None
    profile: str | None = None

    @classmethod
    def ok(cls, output: Any = None, profile: str | None = None) -> "StepResult":
        return cls(success=True, output=output, profile=profile)

    @classmethod
    def fail(cls, error: str, profile: str | None = None) -> "StepResult":
        return cls(success=False, error=error, profile=profile)


@dataclass(frozen=True)
class StepRecord:
    """Result of a completed operation, kept for later steps."""

    operation: Operation
    result: StepResult
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class ExecutionContext:
    """Mutable state for one run. Never shared between runs."""

    created_files: list[str] = field(default_factory=list)
    modified_files: list[str] = field(default_factory=list)
    context_data: dict[str, StepRecord] = field(default_factory=dict)

    def has_produced(self, path: str) -> bool:
        """True if this run created or modified the path."""
        return path in self.created_files or path in self.modified_files

    def latest_created(self, suffix: str) -> str | None:
        """Most recently created file ending with suffix."""
        for path in reversed(self.created_files):
            if path.lower().endswith(suffix):
                return path
        return None


@dataclass(frozen=True)
class OperationFailure:
    """A failed operation and its error message."""

    operation: Operation
    error: str


@dataclass
class ExecutionResult:
    """Outcome of a run.

    Attributes:
        status: Final run state.
        completed_operations: Operations that finished, in execution order.
        failed_operations: Operations that were attempted and failed.
        skipped_operations: Operations never attempted after an abort.
        warnings: Non-blocking failure notes.
        summary: Human-readable report.

    """

    status: RunStatus = RunStatus.IN_PROGRESS
    completed_operations: list[Operation] = field(default_factory=list)
    failed_operations: list[OperationFailure] = field(default_factory=list)
    skipped_operations: list[Operation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    summary: str = ""

    @property
    def success(self) -> bool:
        return not self.failed_operations

    @property
    def total_operations(self) -> int:
        return len(self.completed_operations) + len(self.failed_operations) + len(self.skipped_operations)
