"""Compound request parsing.

CompoundParser turns one request into a CompoundIntent:

1. Requests the single-intent classifier reads as questions short-circuit
   to an empty, non-compound result.
2. Multi-step phrasings are decomposed by the first applicable strategy.
3. Multi-step phrasings no strategy understands fall back to a single
   Operation, marked UNHANDLED and logged as a warning.
4. Everything else becomes a single Operation.

Context (folder, main action, relationships) is extracted in every case.
"""

import logging
import re
from collections.abc import Callable, Sequence

from codeagent.intent.classifier import classify_intent
from codeagent.intent.strategies import DecompositionStrategy, default_strategies
from codeagent.intent.types import (
    CompoundIntent,
    DecompositionStatus,
    IntentContext,
    IntentKind,
    UNKNOWN_TARGET,
    Operation,
    Relationship,
    make_move_target,
)

logger = logging.getLogger(__name__)

COMPOUND_PATTERNS: tuple[re.Pattern[str], ...] = (
    # "create X and modify Y"
    re.compile(
        r"(?:create|make|write|generate)\s+([^,]+?)\s+and\s+(?:modify|edit|update|change)\s+([^,]+)",
        re.IGNORECASE,
    ),
    # "in FOLDER create X and modify Y"
    re.compile(
        r"in\s+(?:the\s+)?(\w+)\s+(?:folder\s+)?(?:create|make)\s+([^,]+?)\s+and\s+(?:modify|edit|update)\s+([^,]+)",
        re.IGNORECASE,
    ),
    # "create X, then modify Y"
    re.compile(
        r"(?:create|make|write)\s+([^,]+?),?\s*(?:then|and then)\s+(?:modify|edit|update)\s+([^,]+)",
        re.IGNORECASE,
    ),
    # "make X and connect it to Y"
    re.compile(
        r"(?:create|make)\s+([^,]+?)\s+and\s+(?:connect|link)\s+(?:it\s+)?to\s+([^,]+)",
        re.IGNORECASE,
    ),
)

CREATION_VERBS: tuple[str, ...] = ("create", "make", "write", "generate")
MODIFICATION_VERBS: tuple[str, ...] = ("modify", "edit", "update", "change")

_FOLDER_PATTERN = re.compile(r"in\s+(?:the\s+)?(\w+)\s+(?:folder|directory)", re.IGNORECASE)
_MAIN_ACTION_PATTERN = re.compile(r"(create|make|modify|edit|update|write|generate)", re.IGNORECASE)
_LINK_PATTERN = re.compile(r"\b(?:link|connect)\b", re.IGNORECASE)

_TARGET_FILE_PATTERN = re.compile(
    r"[\w/.\-]+\.(?:tsx|ts|jsx|js|html|css|py|java|cpp|md|json|yaml|yml|toml|txt)\b",
    re.IGNORECASE,
)
_EDIT_TARGET_PATTERN = re.compile(
    r"(?:edit|modify|change|update|refactor|fix)\s+(?:the\s+)?("
    + _TARGET_FILE_PATTERN.pattern
    + r")",
    re.IGNORECASE,
)
_TARGET_FOLDER_PATTERN = re.compile(
    r"(?:folder|directory)\s+(?:called\s+|named\s+)?"
    r"(?!(?:create|make|write|generate|modify|edit|update|change|and|to|with|for)\b)([\w\-]+)",
    re.IGNORECASE,
)
_MOVE_PAIR_PATTERN = re.compile(
    r"(?:move|rename|relocate)\s+(?:the\s+)?(?:file\s+)?([\w/.\-]+)\s+(?:to|into|as)\s+([\w/.\-]+)",
    re.IGNORECASE,
)


def extract_context(text: str) -> IntentContext:
    """Extract folder, dominant action verb and link relationships.

    Examples:
        >>> extract_context("in the site folder create a css file and link it").folder
        'site'

    """
    folder_match = _FOLDER_PATTERN.search(text)
    action_match = _MAIN_ACTION_PATTERN.search(text)
    relationships: tuple[Relationship, ...] = ()
    if _LINK_PATTERN.search(text):
        relationships = (Relationship(source_kind="css", target_kind="html", kind="link"),)

    return IntentContext(
        folder=folder_match.group(1) if folder_match else None,
        main_action=action_match.group(1).lower() if action_match else None,
        relationships=relationships,
    )


def extract_main_target(text: str, intent: IntentKind | None = None) -> str:
    """Extract the path an operation acts on.

    Move requests yield a "source -> destination" pair when both ends are
    named. Edits prefer the file right after the edit verb. Otherwise the
    first file reference, then a named folder (with a trailing "/"), then
    "unknown".
    """
    if intent is IntentKind.MOVE:
        pair = _MOVE_PAIR_PATTERN.search(text)
        if pair:
            return make_move_target(pair.group(1), pair.group(2))
    if intent is IntentKind.EDIT:
        edit_match = _EDIT_TARGET_PATTERN.search(text)
        if edit_match:
            return edit_match.group(1)

    file_match = _TARGET_FILE_PATTERN.search(text)
    if file_match:
        return file_match.group(0)

    folder_match = _TARGET_FOLDER_PATTERN.search(text)
    if folder_match:
        return f"{folder_match.group(1)}/"

    return UNKNOWN_TARGET


class CompoundParser:
    """Parse requests into CompoundIntents.

    Args:
        strategies: Decomposition strategies tried in order. Defaults to
            default_strategies().
        classifier: Single-intent classifier used for the cheap path.

    """

    def __init__(
        self,
        strategies: Sequence[DecompositionStrategy] | None = None,
        classifier: Callable[[str], IntentKind] = classify_intent,
    ) -> None:
        self._strategies = list(strategies) if strategies is not None else default_strategies()
        self._classify = classifier

    @property
    def strategies(self) -> list[DecompositionStrategy]:
        return list(self._strategies)

    def is_compound_request(self, text: str) -> bool:
        """Detect multi-step phrasing.

        True for explicit two-clause templates, phrasings a strategy
        recognizes, or text containing both a creation verb and a
        modification verb.
        """
        if any(pattern.search(text) for pattern in COMPOUND_PATTERNS):
            return True
        if any(strategy.applies(text) for strategy in self._strategies):
            return True

        lowered = text.lower()
        has_create = any(verb in lowered for verb in CREATION_VERBS)
        has_modify = any(verb in lowered for verb in MODIFICATION_VERBS)
        return has_create and has_modify

    def parse(self, text: str) -> CompoundIntent:
        """Parse one request.

        Args:
            text: Raw user request.

        Returns:
            CompoundIntent. Never raises for unrecognized phrasing.

        """
        context = extract_context(text)
        intent = self._classify(text)

        if intent is IntentKind.ASK:
            return CompoundIntent(operations=(), is_compound=False, original_input=text, context=context)

        if not self.is_compound_request(text):
            return self._single_intent(text, intent, context)

        for strategy in self._strategies:
            operations = strategy.decompose(text, context)
            if operations:
                logger.debug("Decomposed request with %s into %d operations", strategy.name, len(operations))
                return CompoundIntent(
                    operations=tuple(operations),
                    is_compound=True,
                    original_input=text,
                    context=context,
                    decomposition=DecompositionStatus.DECOMPOSED,
                )

        logger.warning("Multi-step request not decomposed, handling it as one %s step: %r", intent.value, text)
        return self._single_intent(text, intent, context, DecompositionStatus.UNHANDLED)

    def _single_intent(
        self,
        text: str,
        intent: IntentKind,
        context: IntentContext,
        decomposition: DecompositionStatus = DecompositionStatus.NOT_COMPOUND,
    ) -> CompoundIntent:
        operation = Operation(intent=intent, target=extract_main_target(text, intent), description=text)
        return CompoundIntent(
            operations=(operation,),
            is_compound=False,
            original_input=text,
            context=context,
            decomposition=decomposition,
        )
