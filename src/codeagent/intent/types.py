"""Data models for parsed user requests.

- IntentKind: closed set of operation kinds
- Operation: one atomic unit of scheduled work
- Relationship / IntentContext: metadata extracted from the request
- CompoundIntent: immutable parse result for one request
"""

from dataclasses import dataclass, field
from enum import Enum

from codeagent.core.exceptions import IntentError

# Separator between source and destination in a move target
MOVE_SEPARATOR = " -> "

# Target used when no path could be extracted from a request
UNKNOWN_TARGET = "unknown"


class IntentKind(str, Enum):
    """Kinds of work a request can map to.

    ASK is advisory: it is answered directly and never scheduled.
    """

    WRITE = "write"
    EDIT = "edit"
    MOVE = "move"
    ASK = "ask"
    PLAN = "plan"


class DecompositionStatus(str, Enum):
    """How the compound parser arrived at its operation list.

    - NOT_COMPOUND: no multi-step signals; single-intent path used.
    - DECOMPOSED: a decomposition strategy produced the operations.
    - UNHANDLED: multi-step signals detected but no strategy could split
      the request. The request falls back to the single-intent path and
      the status stays visible so the caller can warn the user.
    """

    NOT_COMPOUND = "not_compound"
    DECOMPOSED = "decomposed"
    UNHANDLED = "unhandled"


@dataclass(frozen=True)
class Operation:
    """One unit of work.

    Attributes:
        intent: Operation kind.
        target: Path, "folder/" for a directory, or "source -> destination"
            for moves.
        description: Instruction passed to content generation.
        dependencies: Targets that must exist before this operation runs.
        priority: Tie-break hint within the same dependency tier (lower first).

    """

    intent: IntentKind
    target: str
    description: str
    dependencies: frozenset[str] = field(default_factory=frozenset)
    priority: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.intent, IntentKind):
            try:
                object.__setattr__(self, "intent", IntentKind(self.intent))
            except ValueError as e:
                raise IntentError(f"Unknown intent: {self.intent!r}") from e
        if not isinstance(self.dependencies, frozenset):
            object.__setattr__(self, "dependencies", frozenset(self.dependencies))
        if self.intent is IntentKind.ASK and self.dependencies:
            raise IntentError("ask operations cannot declare dependencies")
        if not self.target:
            raise IntentError("Operation target must not be empty")

    @property
    def move_paths(self) -> tuple[str, str]:
        """Split a move target into (source, destination).

        Raises:
            IntentError: If this is not a well-formed move target.

        """
        source, sep, destination = self.target.partition(MOVE_SEPARATOR)
        if not sep or not source.strip() or not destination.strip():
            raise IntentError(
                f"Move operation requires source and destination, got {self.target!r}"
            )
        return source.strip(), destination.strip()

    @property
    def is_directory(self) -> bool:
        return self.target.endswith("/")

    @property
    def has_known_target(self) -> bool:
        return self.target != UNKNOWN_TARGET

    @property
    def label(self) -> str:
        """Short human-readable label, e.g. "Create site/styles.css"."""
        verbs = {
            IntentKind.WRITE: "Create",
            IntentKind.EDIT: "Modify",
            IntentKind.MOVE: "Move",
            IntentKind.PLAN: "Plan",
            IntentKind.ASK: "Ask",
        }
        return f"{verbs[self.intent]} {self.target}"


def make_move_target(source: str, destination: str) -> str:
    """Build the path-pair target string for a move operation."""
    return f"{source}{MOVE_SEPARATOR}{destination}"


@dataclass(frozen=True)
class Relationship:
    """Cross-file relationship mentioned in a request.

    Attributes:
        source_kind: File kind being referenced (e.g. "css").
        target_kind: File kind doing the referencing (e.g. "html").
        kind: "link", "import" or "reference".

    """

    source_kind: str
    target_kind: str
    kind: str = "link"


@dataclass(frozen=True)
class IntentContext:
    """Metadata extracted from a request, independent of decomposition."""

    folder: str | None = None
    main_action: str | None = None
    relationships: tuple[Relationship, ...] = ()

    def find_relationship(self, kind: str) -> Relationship | None:
        """Return the first relationship of the given kind, if any."""
        for relationship in self.relationships:
            if relationship.kind == kind:
                return relationship
        return None


@dataclass(frozen=True)
class CompoundIntent:
    """Immutable parse result for one user request.

    Attributes:
        operations: Proposed operations in insertion order.
        is_compound: True when more than one dependent action was decomposed.
        original_input: Verbatim request text.
        context: Extracted folder, main action and relationships.
        decomposition: How the operation list was produced.

    """

    operations: tuple[Operation, ...]
    is_compound: bool
    original_input: str
    context: IntentContext = field(default_factory=IntentContext)
    decomposition: DecompositionStatus = DecompositionStatus.NOT_COMPOUND

    def __post_init__(self) -> None:
        if not isinstance(self.operations, tuple):
            object.__setattr__(self, "operations", tuple(self.operations))
        if self.is_compound and any(op.intent is IntentKind.ASK for op in self.operations):
            raise IntentError("ask operations cannot be part of a compound sequence")

    @property
    def is_empty(self) -> bool:
        """True when nothing needs to be scheduled."""
        return not self.operations
