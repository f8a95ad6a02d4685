"""codeagent command-line interface.

Commands:
- `codeagent run TEXT...`: parse, order and execute a natural-language request
- `codeagent classify TEXT...`: show how a request would be parsed
- `codeagent route TEXT...`: show which model profile a text is routed to
- `codeagent ask TEXT...`: answer a question without touching files
- `codeagent models ...`: profiles, health and routing preferences
- `codeagent config ...`: configuration verification

Exit codes:
    0 = success
    1 = error (including an aborted run)
    2 = configuration error
    3 = run finished with non-blocking failures
    130 = interrupted
"""

import json
import logging
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Any

import typer
from rich.table import Table

from codeagent import __version__
from codeagent.cli_utils import (
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    EXIT_INTERRUPTED,
    EXIT_PARTIAL,
    EXIT_SUCCESS,
    _error,
    _info,
    _load_config_or_exit,
    _setup_logging,
    _validate_project_path,
    _warning,
    console,
)
from codeagent.commands.config import config_app
from codeagent.commands.models import models_app
from codeagent.core.config import PROFILE_KEYS
from codeagent.core.exceptions import BackendError
from codeagent.core.execution import (
    ExecutionEngine,
    FileSystemHandlers,
    RunStatus,
    StepStatus,
    resolve_operations,
)
from codeagent.intent import (
    CompoundIntent,
    CompoundParser,
    DecompositionStatus,
    Operation,
    classify_intent,
    extract_entities,
)
from codeagent.intent.types import MOVE_SEPARATOR
from codeagent.routing import ModelRouter, build_router

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="codeagent",
    help="Natural-language developer assistant backed by local models",
    no_args_is_help=True,
    add_completion=False,
)
app.add_typer(config_app)
app.add_typer(models_app)

_STEP_STYLES = {
    StepStatus.RUNNING: ("cyan", "..."),
    StepStatus.COMPLETED: ("green", "ok"),
    StepStatus.FAILED: ("red", "failed"),
}


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"codeagent {__version__}")
        raise typer.Exit(code=EXIT_SUCCESS)


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Natural-language developer assistant backed by local models."""


def _check_model(model: str | None) -> None:
    if model is not None and model not in PROFILE_KEYS:
        _error(f"Unknown profile '{model}'. Expected one of: {', '.join(PROFILE_KEYS)}")
        raise typer.Exit(code=EXIT_CONFIG_ERROR)


def _operations_table(operations: list[Operation] | tuple[Operation, ...], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Intent", style="cyan")
    table.add_column("Target")
    table.add_column("Depends on")
    table.add_column("Description", overflow="fold")
    for index, op in enumerate(operations, start=1):
        table.add_row(
            str(index),
            op.intent.value,
            op.target,
            ", ".join(sorted(op.dependencies)) or "-",
            op.description,
        )
    return table


def _print_step(index: int, total: int, operation: Operation, status: StepStatus) -> None:
    color, label = _STEP_STYLES.get(status, ("white", status.value))
    console.print(f"[{color}]\\[{index + 1}/{total}] {label}[/{color}] {operation.label}")


def _answer(router: ModelRouter, text: str, model: str | None) -> None:
    try:
        generated = router.generate(text, profile=model)
    except BackendError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from None
    if generated.used_fallback:
        _warning(f"'{generated.requested_profile}' unavailable, answered by '{generated.profile}'")
    if generated.classification and router.config.preferences.always_show_reasoning:
        _info(f"Routed to '{generated.requested_profile}': {generated.classification.reasoning}")
    console.print(generated.text, markup=False, highlight=False)


def _print_routing(router: ModelRouter, operations: tuple[Operation, ...], model: str | None) -> None:
    for op in operations:
        path = op.target.partition(MOVE_SEPARATOR)[0]
        classification = router.classify(op.description, Path(path).suffix or None, user_override=model)
        console.print(f"  {op.label} -> {classification.suggested_model}: {classification.reasoning}", markup=False)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, frozenset, set)):
        items = sorted(value) if isinstance(value, (frozenset, set)) else value
        return [_to_jsonable(v) for v in items]
    return value


@app.command(name="run")
def run_command(
    request: list[str] = typer.Argument(..., help="What you want done, in plain words"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Show the plan without executing it"),
    model: str | None = typer.Option(None, "--model", "-m", help="Force a model profile for every step"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to config file"),
    project: Path = typer.Option(Path("."), "--project", "-p", help="Project root for file operations"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors"),
) -> None:
    """Parse a request into file operations and execute them in order.

    Examples:
        codeagent run in the site folder create a css file and modify index.html to link it
        codeagent run --dry-run move src/old.py to src/new.py

    """
    _setup_logging(verbose=verbose, quiet=quiet)
    _check_model(model)
    text = " ".join(request).strip()
    agent_config = _load_config_or_exit(config)
    project_path = _validate_project_path(project)

    intent = CompoundParser().parse(text)

    if intent.decomposition is DecompositionStatus.UNHANDLED:
        _warning("This looks like several steps, but it could not be split; handling it as a single step.")
        _info("For separate steps, ask for one at a time.")

    router = build_router(agent_config)
    if intent.is_empty:
        if dry_run:
            _info("Question detected; nothing would be executed.")
            raise typer.Exit(code=EXIT_SUCCESS)
        _answer(router, text, model)
        raise typer.Exit(code=EXIT_SUCCESS)

    resolution = resolve_operations(intent.operations)
    if not resolution.ok:
        for message in resolution.errors:
            _error(message)
        raise typer.Exit(code=EXIT_ERROR)

    if not quiet:
        console.print(_operations_table(resolution.operations, "Planned operations"))
        if agent_config.preferences.always_show_reasoning:
            _print_routing(router, resolution.operations, model)
    if dry_run:
        raise typer.Exit(code=EXIT_SUCCESS)

    handlers = FileSystemHandlers(router, root=project_path)
    engine = ExecutionEngine(
        handlers,
        router=router,
        exists=handlers.exists,
        profile_override=model,
        on_step=None if quiet else _print_step,
    )
    try:
        result = engine.execute(intent)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted, run abandoned[/yellow]")
        raise typer.Exit(code=EXIT_INTERRUPTED) from None

    console.print(result.summary, markup=False, highlight=False)
    if result.status is RunStatus.SUCCEEDED:
        raise typer.Exit(code=EXIT_SUCCESS)
    if result.status is RunStatus.PARTIALLY_FAILED:
        raise typer.Exit(code=EXIT_PARTIAL)
    raise typer.Exit(code=EXIT_ERROR)


@app.command(name="classify")
def classify_command(
    request: list[str] = typer.Argument(..., help="Request text"),
) -> None:
    """Show the single intent, entities and parsed operations for a request."""
    text = " ".join(request).strip()
    intent: CompoundIntent = CompoundParser().parse(text)
    entities = extract_entities(text)

    console.print(f"Intent: [cyan]{classify_intent(text).value}[/cyan]")
    console.print(f"Compound: {'yes' if intent.is_compound else 'no'} ({intent.decomposition.value})")
    if intent.context.folder:
        console.print(f"Folder: {intent.context.folder}")
    if intent.context.main_action:
        console.print(f"Main action: {intent.context.main_action}")
    for relationship in intent.context.relationships:
        console.print(f"Relationship: {relationship.source_kind} -{relationship.kind}-> {relationship.target_kind}")
    if entities.files:
        console.print(f"Files: {', '.join(entities.files)}")

    if intent.operations:
        console.print(_operations_table(intent.operations, "Operations"))
    else:
        console.print("No operations to schedule.")


@app.command(name="route")
def route_command(
    text: list[str] = typer.Argument(..., help="Text to classify"),
    ext: str | None = typer.Option(None, "--ext", "-e", help="File extension hint, e.g. .py"),
    model: str | None = typer.Option(None, "--model", "-m", help="Explicit profile override"),
    compound: bool = typer.Option(False, "--compound", help="Treat as a compound request"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to config file"),
    output: str = typer.Option("text", "--output", "-o", help="Output format: text or json"),
) -> None:
    """Show which model profile a text would be routed to, and why."""
    if output not in ("text", "json"):
        _error(f"Invalid output format: '{output}'. Use 'text' or 'json'.")
        raise typer.Exit(code=EXIT_CONFIG_ERROR)
    _check_model(model)
    agent_config = _load_config_or_exit(config)

    router = ModelRouter(agent_config)
    result = router.classify(" ".join(text), file_extension=ext, user_override=model, is_compound=compound)

    if output == "json":
        console.print_json(json.dumps(_to_jsonable(asdict(result))))
        return

    profile = agent_config.models.get(result.suggested_model)
    console.print(f"Profile: [cyan]{result.suggested_model}[/cyan] ({profile.name})")
    console.print(f"Type: {result.type.value}")
    console.print(f"Confidence: {result.confidence:.0%}")
    console.print(f"Decision: {result.override.value}")
    console.print(f"Reasoning: {result.reasoning}", markup=False)
    if result.scores:
        console.print("Scores: " + ", ".join(f"{k}={v:g}" for k, v in result.scores.items()))
    console.print(f"Complexity: {result.complexity:.2f} (deep reasoning: {'yes' if result.requires_deep_reasoning else 'no'})")


@app.command(name="ask")
def ask_command(
    question: list[str] = typer.Argument(..., help="Question to answer"),
    model: str | None = typer.Option(None, "--model", "-m", help="Force a model profile"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Answer a question through the model router without changing files."""
    _setup_logging(verbose=verbose, quiet=not verbose)
    _check_model(model)
    agent_config = _load_config_or_exit(config)
    router = build_router(agent_config)
    try:
        _answer(router, " ".join(question).strip(), model)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(code=EXIT_INTERRUPTED) from None


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
