"""Command handlers: the side-effecting half of each Operation.

CommandHandlers is the interface the engine dispatches to. Any exception a
handler raises becomes that step's failure. FileSystemHandlers is the
default implementation: it asks the model router for content and writes
files under a project root.
"""

import logging
import re
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from codeagent.core.exceptions import ExecutionError
from codeagent.core.execution.types import StepResult
from codeagent.routing.types import GenerationResult

logger = logging.getLogger(__name__)

PLAN_FILE = Path(".codeagent") / "PLAN.md"

LANGUAGES: dict[str, str] = {
    ".js": "JavaScript",
    ".ts": "TypeScript",
    ".py": "Python",
    ".java": "Java",
    ".cpp": "C++",
    ".c": "C",
    ".rs": "Rust",
    ".go": "Go",
    ".php": "PHP",
    ".rb": "Ruby",
    ".swift": "Swift",
    ".kt": "Kotlin",
    ".cs": "C#",
    ".html": "HTML",
    ".css": "CSS",
    ".scss": "SCSS",
    ".vue": "Vue",
    ".jsx": "React JSX",
    ".tsx": "React TypeScript",
    ".sql": "SQL",
    ".sh": "Shell Script",
    ".md": "Markdown",
    ".json": "JSON",
    ".yaml": "YAML",
    ".yml": "YAML",
}

_FENCE_PATTERN = re.compile(r"^```[\w+\-]*\s*\n(.*?)\n?```\s*$", re.DOTALL)


@runtime_checkable
class CommandHandlers(Protocol):
    """Side effects for each schedulable intent.

    Handlers may return a StepResult (a failed one counts as a step
    failure), any other value (recorded as the step output), or raise.
    """

    def write(self, target: str, description: str, profile: str | None = None) -> Any: ...

    def edit(self, target: str, description: str, profile: str | None = None) -> Any: ...

    def move(self, source: str, destination: str, profile: str | None = None) -> Any: ...

    def plan(self, description: str, profile: str | None = None) -> Any: ...


class ContentGenerator(Protocol):
    """The part of the model router handlers need."""

    def generate(
        self,
        prompt: str,
        profile: str | None = None,
        file_extension: str | None = None,
        is_compound: bool = False,
    ) -> GenerationResult: ...


def language_for(path: str | Path) -> str:
    """Human language name for a file extension ("Text" when unknown)."""
    return LANGUAGES.get(Path(path).suffix.lower(), "Text")


def strip_code_fences(text: str) -> str:
    """Remove one surrounding markdown code fence, if present."""
    stripped = text.strip()
    match = _FENCE_PATTERN.match(stripped)
    if match:
        return match.group(1).rstrip() + "\n"
    return stripped + "\n" if stripped else ""


def build_write_prompt(target: str, description: str) -> str:
    language = language_for(target)
    name = Path(target).name
    if language == "Text":
        return (
            f'Write the content for the file "{name}".\n\n'
            f"Request: {description}\n\n"
            "Return only the file content, without commentary."
        )
    return (
        f'You are an expert {language} developer. Create the file "{name}".\n\n'
        f"Request: {description}\n\n"
        "Requirements:\n"
        f"- Follow {language} best practices\n"
        "- Produce complete, working content\n"
        "- Return only the file content, without explanations or markdown fences"
    )


def build_edit_prompt(target: str, current: str, instruction: str) -> str:
    language = language_for(target)
    return (
        f'You are an expert {language} developer. Here is the current content of "{target}":\n\n'
        f"```{language.lower()}\n{current}\n```\n\n"
        f"Task: {instruction}\n\n"
        "Requirements:\n"
        "- Maintain existing functionality unless explicitly asked to change it\n"
        f"- Follow {language} best practices\n"
        "- Keep the same file structure and imports if applicable\n\n"
        "Return the complete updated file content:"
    )


def build_plan_prompt(description: str) -> str:
    return (
        "Create a concise implementation plan in markdown for the following request.\n\n"
        f"Request: {description}\n\n"
        "Include: goal, numbered steps, files likely to change, and risks."
    )


class FileSystemHandlers:
    """Default handlers writing model output under a project root.

    Args:
        router: Generates content for write/edit/plan.
        root: Directory that relative targets resolve against.

    """

    def __init__(self, router: ContentGenerator, root: Path | None = None) -> None:
        self._router = router
        self._root = (root or Path.cwd()).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, target: str) -> Path:
        """Resolve a target under the root, rejecting paths that escape it."""
        path = (self._root / target).resolve()
        if path != self._root and self._root not in path.parents:
            raise ExecutionError(f"Path escapes project root: {target}")
        return path

    def exists(self, target: str) -> bool:
        """File-existence check for the engine."""
        try:
            return self.resolve(target).exists()
        except ExecutionError:
            return False

    def write(self, target: str, description: str, profile: str | None = None) -> StepResult:
        path = self.resolve(target)
        if target.endswith("/"):
            return self._make_directory(target, path)
        if path.exists():
            raise ExecutionError(f"File already exists: {target}. Use edit to modify existing files.")

        generated = self._router.generate(
            build_write_prompt(target, description),
            profile=profile,
            file_extension=path.suffix or None,
        )
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(strip_code_fences(generated.text), encoding="utf-8")
        logger.info("Created %s", target)
        return StepResult.ok(output=str(path), profile=generated.profile)

    def _make_directory(self, target: str, path: Path) -> StepResult:
        if path.exists():
            raise ExecutionError(f"Path already exists: {target}")
        path.mkdir(parents=True)
        logger.info("Created directory %s", target)
        return StepResult.ok(output=str(path))

    def edit(self, target: str, description: str, profile: str | None = None) -> StepResult:
        path = self.resolve(target)
        if not path.is_file():
            raise ExecutionError(f"File does not exist: {target}. Use write to create new files.")

        current = path.read_text(encoding="utf-8")
        generated = self._router.generate(
            build_edit_prompt(target, current, description),
            profile=profile,
            file_extension=path.suffix or None,
        )
        path.write_text(strip_code_fences(generated.text), encoding="utf-8")
        logger.info("Updated %s", target)
        return StepResult.ok(output=str(path), profile=generated.profile)

    def move(self, source: str, destination: str, profile: str | None = None) -> StepResult:
        src = self.resolve(source)
        dst = self.resolve(destination)
        if not src.exists():
            raise ExecutionError(f"Source file does not exist: {source}")
        if dst.exists():
            raise ExecutionError(f"Destination already exists: {destination}")

        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(dst))
        logger.info("Moved %s -> %s", source, destination)
        return StepResult.ok(output=str(dst), profile=profile)

    def plan(self, description: str, profile: str | None = None) -> StepResult:
        generated = self._router.generate(build_plan_prompt(description), profile=profile)
        plan_path = self._root / PLAN_FILE
        plan_path.parent.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M UTC")
        with open(plan_path, "a", encoding="utf-8") as f:
            f.write(f"\n## {description}\n\n_Generated {timestamp}_\n\n{generated.text.strip()}\n")
        logger.info("Plan appended to %s", plan_path)
        return StepResult.ok(output=str(plan_path), profile=generated.profile)
