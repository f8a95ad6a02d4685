"""Dependency resolution and sequential execution of Operations."""

from codeagent.core.execution.engine import ExecutionEngine, build_link_instruction
from codeagent.core.execution.handlers import CommandHandlers, FileSystemHandlers
from codeagent.core.execution.resolver import Resolution, resolve_operations, resolve_or_raise
from codeagent.core.execution.summary import generate_execution_summary
from codeagent.core.execution.types import (
    ExecutionContext,
    ExecutionResult,
    OperationFailure,
    RunStatus,
    StepRecord,
    StepResult,
    StepStatus,
)

__all__ = [
    "CommandHandlers",
    "ExecutionContext",
    "ExecutionEngine",
    "ExecutionResult",
    "FileSystemHandlers",
    "OperationFailure",
    "Resolution",
    "RunStatus",
    "StepRecord",
    "StepResult",
    "StepStatus",
    "build_link_instruction",
    "generate_execution_summary",
    "resolve_operations",
    "resolve_or_raise",
]
