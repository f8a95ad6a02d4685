"""Sequential execution of resolved Operations.

The engine is the single place that decides whether a failure stops the run:

- A dependency cycle aborts before any handler is called.
- A failed step whose target a later step depends on aborts the run; the
  remaining operations are reported as skipped.
- Any other failed step is recorded with a warning and the run continues.

Completed steps are never rolled back.
"""

import logging
import os
from collections.abc import Callable, Sequence
from pathlib import PurePosixPath
from typing import Protocol

from codeagent.core.exceptions import ExecutionError
from codeagent.core.execution.handlers import CommandHandlers
from codeagent.core.execution.resolver import produced_paths, resolve_operations
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
from codeagent.intent.types import CompoundIntent, IntentContext, IntentKind, Operation
from codeagent.routing.types import ClassificationResult

logger = logging.getLogger(__name__)

StepCallback = Callable[[int, int, Operation, StepStatus], None]

_MARKUP_SUFFIXES: dict[str, tuple[str, ...]] = {
    "html": (".html", ".htm"),
    "css": (".css",),
}


class StepRouter(Protocol):
    """The part of the model router the engine needs."""

    def classify(
        self,
        text: str,
        file_extension: str | None = None,
        user_override: str | None = None,
        is_compound: bool = False,
    ) -> ClassificationResult: ...


def build_link_instruction(stylesheet_path: str) -> str:
    """Edit instruction that links a markup file to a stylesheet."""
    name = PurePosixPath(stylesheet_path).name
    return (
        f'Remove any existing inline styles from the <style> tags and replace with a link to '
        f'the external CSS file "{name}". Add the CSS link in the <head> section as: '
        f'<link rel="stylesheet" href="{name}">. Keep all existing HTML structure intact.'
    )


def _routing_path(operation: Operation) -> str:
    if operation.intent is IntentKind.MOVE:
        return operation.move_paths[0]
    return operation.target


class ExecutionEngine:
    """Run Operations in dependency order against command handlers.

    Args:
        handlers: Side-effecting write/edit/move/plan implementation.
        router: Picks a model profile per step. When None, handlers receive
            profile=None and choose for themselves.
        exists: File-existence check for dependencies not produced in this run.
        profile_override: Profile key forced for every step.
        on_step: Progress callback (index, total, operation, status).

    """

    def __init__(
        self,
        handlers: CommandHandlers,
        router: StepRouter | None = None,
        exists: Callable[[str], bool] = os.path.exists,
        profile_override: str | None = None,
        on_step: StepCallback | None = None,
    ) -> None:
        self._handlers = handlers
        self._router = router
        self._exists = exists
        self._profile_override = profile_override
        self._on_step = on_step

    def execute(self, intent: CompoundIntent) -> ExecutionResult:
        """Resolve and run a parsed request."""
        return self.execute_operations(intent.operations, intent.context)

    def execute_operations(
        self,
        operations: Sequence[Operation],
        intent_context: IntentContext | None = None,
    ) -> ExecutionResult:
        """Resolve and run operations.

        Args:
            operations: Operations in declaration order.
            intent_context: Extracted request context (link relationships).

        Returns:
            ExecutionResult with status, per-operation outcomes and summary.

        Raises:
            KeyboardInterrupt: Propagated unchanged; the run is abandoned.

        """
        intent_context = intent_context or IntentContext()
        result = ExecutionResult()

        resolution = resolve_operations(list(operations))
        if not resolution.ok:
            for op in operations:
                if op.target in resolution.cycle_targets:
                    errors = [e for e in resolution.errors if op.target in e] or list(resolution.errors)
                    result.failed_operations.append(OperationFailure(op, "; ".join(errors)))
                else:
                    result.skipped_operations.append(op)
            result.status = RunStatus.ABORTED
            result.summary = generate_execution_summary(result)
            logger.error("Run aborted before execution: %s", "; ".join(resolution.errors))
            return result

        ordered = list(resolution.operations)
        context = ExecutionContext()
        total = len(ordered)

        for index, operation in enumerate(ordered):
            self._notify(index, total, operation, StepStatus.RUNNING)
            logger.info("Step %d/%d: %s", index + 1, total, operation.label)

            step = self._run_step(operation, context, intent_context)

            if step.success:
                self._record_success(operation, step, context)
                result.completed_operations.append(operation)
                self._notify(index, total, operation, StepStatus.COMPLETED)
                continue

            error = step.error or "Operation failed"
            result.failed_operations.append(OperationFailure(operation, error))
            self._notify(index, total, operation, StepStatus.FAILED)
            logger.warning("Step %d failed: %s", index + 1, error)

            remaining = ordered[index + 1:]
            produced = produced_paths(operation)
            if any(produced & op.dependencies for op in remaining):
                logger.warning("Aborting remaining %d operation(s) due to blocking failure", len(remaining))
                result.skipped_operations.extend(remaining)
                result.status = RunStatus.ABORTED
                break
            result.warnings.append(f"Step {index + 1} failed but continuing: {error}")

        if result.status is RunStatus.IN_PROGRESS:
            result.status = RunStatus.SUCCEEDED if result.success else RunStatus.PARTIALLY_FAILED

        result.summary = generate_execution_summary(result)
        return result

    def _notify(self, index: int, total: int, operation: Operation, status: StepStatus) -> None:
        if self._on_step is not None:
            self._on_step(index, total, operation, status)

    def _missing_dependencies(self, operation: Operation, context: ExecutionContext) -> list[str]:
        return [
            dep
            for dep in sorted(operation.dependencies)
            if dep != operation.target and not context.has_produced(dep) and not self._exists(dep)
        ]

    def _select_profile(self, operation: Operation) -> str | None:
        if self._router is None:
            return self._profile_override
        suffix = PurePosixPath(_routing_path(operation)).suffix or None
        classification = self._router.classify(
            operation.description,
            file_extension=suffix,
            user_override=self._profile_override,
        )
        logger.debug(
            "Routed %s to %s (%s, confidence %.2f)",
            operation.target,
            classification.suggested_model,
            classification.type.value,
            classification.confidence,
        )
        return classification.suggested_model

    def _edit_instruction(self, operation: Operation, context: ExecutionContext, intent_context: IntentContext) -> str:
        link = intent_context.find_relationship("link")
        if link is None:
            return operation.description
        markup_suffixes = _MARKUP_SUFFIXES.get(link.target_kind, (f".{link.target_kind}",))
        if not operation.target.lower().endswith(markup_suffixes):
            return operation.description

        source_suffixes = _MARKUP_SUFFIXES.get(link.source_kind, (f".{link.source_kind}",))
        stylesheet = None
        for suffix in source_suffixes:
            stylesheet = context.latest_created(suffix)
            if stylesheet:
                break
        if stylesheet is None:
            logger.debug("No %s file created in this run, keeping edit instruction", link.source_kind)
            return operation.description
        return build_link_instruction(stylesheet)

    def _run_step(self, operation: Operation, context: ExecutionContext, intent_context: IntentContext) -> StepResult:
        if operation.intent in (IntentKind.WRITE, IntentKind.EDIT) and not operation.has_known_target:
            return StepResult.fail("Could not determine target path from the request")

        missing = self._missing_dependencies(operation, context)
        if missing:
            return StepResult.fail(f"Dependencies not satisfied: {', '.join(missing)}")

        try:
            profile = self._select_profile(operation)
            if operation.intent is IntentKind.WRITE:
                outcome = self._handlers.write(operation.target, operation.description, profile)
            elif operation.intent is IntentKind.EDIT:
                instruction = self._edit_instruction(operation, context, intent_context)
                outcome = self._handlers.edit(operation.target, instruction, profile)
            elif operation.intent is IntentKind.MOVE:
                source, destination = operation.move_paths
                outcome = self._handlers.move(source, destination, profile)
            elif operation.intent is IntentKind.PLAN:
                outcome = self._handlers.plan(operation.description, profile)
            else:
                raise ExecutionError(f"Unsupported operation: {operation.intent.value}")
        except Exception as e:
            logger.debug("Handler raised for %s", operation.target, exc_info=True)
            return StepResult.fail(str(e) or type(e).__name__)

        if isinstance(outcome, StepResult):
            return outcome
        return StepResult.ok(output=outcome, profile=profile)

    def _record_success(self, operation: Operation, step: StepResult, context: ExecutionContext) -> None:
        if operation.intent is IntentKind.WRITE:
            context.created_files.append(operation.target)
        elif operation.intent is IntentKind.EDIT:
            context.modified_files.append(operation.target)
        elif operation.intent is IntentKind.MOVE:
            context.created_files.append(operation.move_paths[1])
        context.context_data[operation.target] = StepRecord(operation=operation, result=step)
