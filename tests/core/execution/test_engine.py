"""Tests for the execution engine and run summaries."""

from typing import Any

import pytest

from codeagent.core.config import AgentConfig
from codeagent.core.execution import (
    ExecutionEngine,
    ExecutionResult,
    RunStatus,
    StepResult,
    StepStatus,
    build_link_instruction,
    generate_execution_summary,
)
from codeagent.intent import CompoundParser, IntentKind, Operation, make_move_target
from codeagent.intent.types import UNKNOWN_TARGET
from codeagent.routing import ModelRouter

STYLESHEET_REQUEST = "in the site folder create a css file and modify index.html to link it"


def _never_exists(path: str) -> bool:
    return False


def _engine(handlers: Any, **kwargs: object) -> ExecutionEngine:
    kwargs.setdefault("exists", _never_exists)
    return ExecutionEngine(handlers, **kwargs)  # type: ignore[arg-type]


class TestStylesheetRun:
    """End-to-end: parse a stylesheet request and execute it."""

    def test_css_created_before_html_edit(self, handlers: Any) -> None:
        intent = CompoundParser().parse(STYLESHEET_REQUEST)
        result = _engine(handlers).execute(intent)

        assert result.status is RunStatus.SUCCEEDED
        assert [call[:2] for call in handlers.calls] == [
            ("write", "site/styles.css"),
            ("edit", "site/index.html"),
        ]
        instruction = handlers.calls[1][2]
        assert instruction == build_link_instruction("site/styles.css")
        assert '<link rel="stylesheet" href="styles.css">' in instruction
        assert "All operations completed successfully." in result.summary

    def test_edit_keeps_description_without_created_stylesheet(self, handlers: Any) -> None:
        """With the stylesheet already on disk, the original instruction is used."""
        intent = CompoundParser().parse(STYLESHEET_REQUEST)
        edit = intent.operations[1]

        result = _engine(handlers, exists=lambda path: True).execute_operations([edit], intent.context)

        assert result.status is RunStatus.SUCCEEDED
        assert handlers.calls == [("edit", "site/index.html", edit.description)]


class TestFailurePolicy:
    """Which failures stop a run."""

    def test_cycle_aborts_before_any_handler(self, handlers: Any) -> None:
        ops = [
            Operation(IntentKind.WRITE, "a.py", "a", frozenset({"b.py"})),
            Operation(IntentKind.WRITE, "b.py", "b", frozenset({"a.py"})),
            Operation(IntentKind.WRITE, "c.py", "c"),
        ]
        result = _engine(handlers).execute_operations(ops)

        assert handlers.calls == []
        assert result.status is RunStatus.ABORTED
        assert [f.operation.target for f in result.failed_operations] == ["a.py", "b.py"]
        assert all("between a.py and b.py" in f.error for f in result.failed_operations)
        assert [op.target for op in result.skipped_operations] == ["c.py"]
        assert result.completed_operations == []

    def test_non_blocking_failure_continues(self, handlers_cls: Any) -> None:
        handlers = handlers_cls(fail_on={"a.py": "disk full"})
        ops = [Operation(IntentKind.WRITE, "a.py", "a"), Operation(IntentKind.WRITE, "b.py", "b")]

        result = _engine(handlers).execute_operations(ops)

        assert result.status is RunStatus.PARTIALLY_FAILED
        assert [op.target for op in result.completed_operations] == ["b.py"]
        assert result.failed_operations[0].error == "disk full"
        assert result.warnings == ["Step 1 failed but continuing: disk full"]
        assert "Some operations failed" in result.summary

    def test_blocking_failure_skips_rest(self, handlers_cls: Any) -> None:
        handlers = handlers_cls(fail_on={"site/styles.css": "model offline"})
        intent = CompoundParser().parse(STYLESHEET_REQUEST)

        result = _engine(handlers).execute(intent)

        assert result.status is RunStatus.ABORTED
        assert len(handlers.calls) == 1
        assert [op.target for op in result.skipped_operations] == ["site/index.html"]
        assert "Not attempted:" in result.summary
        assert "Run aborted; completed steps were kept." in result.summary

    def test_missing_external_dependency(self, handlers: Any) -> None:
        op = Operation(IntentKind.EDIT, "index.html", "link", frozenset({"vendor/a.css", "vendor/b.css"}))

        result = _engine(handlers).execute_operations([op])

        assert handlers.calls == []
        assert result.failed_operations[0].error == "Dependencies not satisfied: vendor/a.css, vendor/b.css"
        assert result.status is RunStatus.PARTIALLY_FAILED

    def test_existing_external_dependency(self, handlers: Any) -> None:
        op = Operation(IntentKind.EDIT, "index.html", "link", frozenset({"vendor/a.css"}))
        result = _engine(handlers, exists=lambda path: path == "vendor/a.css").execute_operations([op])
        assert result.status is RunStatus.SUCCEEDED

    def test_failed_step_result_counts_as_failure(self, handlers_cls: Any) -> None:
        class RefusingHandlers(handlers_cls):
            def write(self, target: str, description: str, profile: str | None = None) -> StepResult:
                return StepResult.fail("refused")

        ops = [Operation(IntentKind.WRITE, "a.py", "a")]
        result = _engine(RefusingHandlers()).execute_operations(ops)
        assert result.failed_operations[0].error == "refused"

    def test_ask_is_not_dispatched(self, handlers: Any) -> None:
        result = _engine(handlers).execute_operations([Operation(IntentKind.ASK, "q", "why")])
        assert result.failed_operations[0].error == "Unsupported operation: ask"
        assert handlers.calls == []

    def test_unparsed_target_is_not_written(self, handlers: Any) -> None:
        """A request with no recognizable path fails instead of writing 'unknown'."""
        intent = CompoundParser().parse("write a python script that prints hello")
        assert intent.operations[0].target == UNKNOWN_TARGET

        result = _engine(handlers).execute(intent)

        assert result.status is RunStatus.PARTIALLY_FAILED
        assert result.failed_operations[0].error == "Could not determine target path from the request"
        assert handlers.calls == []

    def test_keyboard_interrupt_propagates(self, handlers_cls: Any) -> None:
        class InterruptedHandlers(handlers_cls):
            def write(self, target: str, description: str, profile: str | None = None) -> StepResult:
                raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            _engine(InterruptedHandlers()).execute_operations([Operation(IntentKind.WRITE, "a.py", "a")])


class TestMoveAndPlan:
    """Dispatch of move and plan operations."""

    def test_move_then_edit_destination(self, handlers: Any) -> None:
        move = Operation(IntentKind.MOVE, make_move_target("old.py", "new.py"), "rename")
        edit = Operation(IntentKind.EDIT, "pkg/__init__.py", "re-export", frozenset({"new.py"}))

        result = _engine(handlers).execute_operations([edit, move])

        assert result.status is RunStatus.SUCCEEDED
        assert handlers.calls[0][:3] == ("move", "old.py", "new.py")
        assert handlers.calls[1][:2] == ("edit", "pkg/__init__.py")

    def test_plan_dispatch(self, handlers: Any) -> None:
        result = _engine(handlers).execute_operations([Operation(IntentKind.PLAN, "auth", "plan the auth flow")])
        assert result.status is RunStatus.SUCCEEDED
        assert handlers.calls == [("plan", "plan", "plan the auth flow")]


class TestProfileSelection:
    """Model profile passed to handlers."""

    def test_no_router_passes_override(self, handlers: Any) -> None:
        _engine(handlers, profile_override="code").execute_operations([Operation(IntentKind.WRITE, "a.py", "a")])
        assert handlers.profiles == ["code"]

    def test_router_override_applies_to_every_step(self, handlers: Any) -> None:
        router = ModelRouter(AgentConfig())
        intent = CompoundParser().parse(STYLESHEET_REQUEST)
        _engine(handlers, router=router, profile_override="creative").execute(intent)
        assert handlers.profiles == ["creative", "creative"]

    def test_router_uses_file_extension(self, handlers: Any) -> None:
        config = AgentConfig.model_validate({"preferences": {"extension_overrides": {".md": "creative"}}})
        ops = [Operation(IntentKind.WRITE, "docs/intro.md", "an intro")]
        _engine(handlers, router=ModelRouter(config)).execute_operations(ops)
        assert handlers.profiles == ["creative"]

    def test_progress_callback(self, handlers: Any) -> None:
        events: list[tuple[int, int, str, StepStatus]] = []
        engine = _engine(handlers, on_step=lambda i, n, op, status: events.append((i, n, op.target, status)))
        engine.execute_operations([Operation(IntentKind.WRITE, "a.py", "a")])
        assert events == [(0, 1, "a.py", StepStatus.RUNNING), (0, 1, "a.py", StepStatus.COMPLETED)]


class TestSummary:
    """Tests for generate_execution_summary()."""

    def test_empty_run(self) -> None:
        summary = generate_execution_summary(ExecutionResult(status=RunStatus.SUCCEEDED))
        assert "Completed: 0/0 operations" in summary
        assert summary.endswith("Nothing to do.")

    def test_completed_artifacts_listed(self) -> None:
        result = ExecutionResult(
            status=RunStatus.SUCCEEDED,
            completed_operations=[
                Operation(IntentKind.WRITE, "a.css", "x"),
                Operation(IntentKind.EDIT, "b.html", "y"),
            ],
        )
        summary = generate_execution_summary(result)
        assert "  + a.css" in summary
        assert "  ~ b.html" in summary
        assert "Completed: 2/2 operations" in summary
