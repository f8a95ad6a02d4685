"""Single-intent classification for natural-language requests.

Intent groups are checked in a fixed priority order:
1. plan
2. edit
3. write
4. move
5. ask

Structural patterns across all groups are tried first; only when none match
are the plain keywords tried, in the same group order. Anything left over is
treated as a question (ask).
"""

import logging
import re
from dataclasses import dataclass

from codeagent.intent.types import IntentKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntentPattern:
    """Structural patterns and fallback keywords for one intent."""

    intent: IntentKind
    patterns: tuple[re.Pattern[str], ...]
    keywords: tuple[str, ...]


_PATH = r"[\w/.\-]+"

INTENT_PATTERNS: tuple[IntentPattern, ...] = (
    IntentPattern(
        intent=IntentKind.PLAN,
        patterns=(
            re.compile(r"plan\s+(a|the|this)\s+"),
            re.compile(r"create\s+(a|the)\s+plan"),
            re.compile(r"design\s+(a|the)\s+"),
            re.compile(r"implement\s+(a|the)\s+"),
            re.compile(r"build\s+(a|the)\s+"),
            re.compile(r"develop\s+(a|the)\s+"),
        ),
        keywords=("plan", "design", "implement", "build", "develop", "create plan", "strategy"),
    ),
    IntentPattern(
        intent=IntentKind.EDIT,
        patterns=(
            re.compile(rf"edit\s+(the\s+)?{_PATH}"),
            re.compile(rf"modify\s+(the\s+)?{_PATH}"),
            re.compile(rf"change\s+(the\s+)?{_PATH}"),
            re.compile(rf"update\s+(the\s+)?{_PATH}"),
            re.compile(rf"refactor\s+(the\s+)?{_PATH}"),
            re.compile(rf"fix\s+(the\s+)?{_PATH}"),
        ),
        keywords=("edit", "modify", "change", "update", "refactor", "fix", "improve"),
    ),
    IntentPattern(
        intent=IntentKind.WRITE,
        patterns=(
            re.compile(r"write\s+(a|the)\s+"),
            re.compile(r"create\s+(a|the)\s+file"),
            re.compile(r"generate\s+(a|the)\s+"),
            re.compile(r"make\s+(a|the)\s+"),
            re.compile(r"add\s+(a|the)\s+new"),
        ),
        keywords=("write", "create", "generate", "make", "add", "new file"),
    ),
    IntentPattern(
        intent=IntentKind.MOVE,
        patterns=(
            re.compile(rf"move\s+{_PATH}"),
            re.compile(rf"rename\s+{_PATH}"),
            re.compile(rf"relocate\s+{_PATH}"),
            re.compile(r"reorganize\s+"),
        ),
        keywords=("move", "rename", "relocate", "reorganize", "restructure"),
    ),
    IntentPattern(
        intent=IntentKind.ASK,
        patterns=(
            re.compile(r"explain\s+"),
            re.compile(r"what\s+(is|are|does)"),
            re.compile(r"how\s+(does|do|can)"),
            re.compile(r"why\s+"),
            re.compile(r"where\s+(is|are)"),
            re.compile(r"tell\s+me\s+about"),
            re.compile(r"show\s+me"),
        ),
        keywords=("explain", "what", "how", "why", "where", "tell me", "show me", "help"),
    ),
)

# File references: known source/config extensions, or any quoted path
_FILE_EXTENSION_PATTERN = re.compile(
    r"[\w/.\-]+\.(?:ts|js|tsx|jsx|py|java|cpp|c|h|md|json|yml|yaml|toml|cfg|conf|html|htm|css|scss|txt)\b",
    re.IGNORECASE,
)
_QUOTED_PATH_PATTERN = re.compile(r"['\"]([\w/.\-]+)['\"]")

ACTION_WORDS: tuple[str, ...] = ("create", "delete", "modify", "update", "fix", "improve", "optimize")
TARGET_WORDS: tuple[str, ...] = ("component", "function", "class", "module", "feature", "test", "config")


@dataclass(frozen=True)
class IntentEntities:
    """Entities mentioned in a request."""

    files: tuple[str, ...]
    actions: tuple[str, ...]
    targets: tuple[str, ...]


def classify_intent(text: str) -> IntentKind:
    """Map free text to exactly one intent.

    Args:
        text: Raw user request.

    Returns:
        The first intent whose structural pattern matches, else the first
        whose keyword is contained in the text, else IntentKind.ASK.

    Examples:
        >>> classify_intent("edit src/app.py to add logging")
        IntentKind.EDIT
        >>> classify_intent("explain how the caching layer works")
        IntentKind.ASK
        >>> classify_intent("")
        IntentKind.ASK

    """
    normalized = text.strip().lower()
    if not normalized:
        return IntentKind.ASK

    for group in INTENT_PATTERNS:
        for pattern in group.patterns:
            if pattern.search(normalized):
                logger.debug("Intent %s matched pattern %r", group.intent.value, pattern.pattern)
                return group.intent

    for group in INTENT_PATTERNS:
        for keyword in group.keywords:
            if keyword in normalized:
                logger.debug("Intent %s matched keyword %r", group.intent.value, keyword)
                return group.intent

    return IntentKind.ASK


def extract_file_references(text: str) -> list[str]:
    """Return file paths mentioned in the text, de-duplicated in order."""
    found: list[str] = []
    found.extend(m.group(0) for m in _FILE_EXTENSION_PATTERN.finditer(text))
    found.extend(m.group(1) for m in _QUOTED_PATH_PATTERN.finditer(text))
    return list(dict.fromkeys(found))


def extract_entities(text: str) -> IntentEntities:
    """Extract file references, action words and target nouns."""
    lowered = text.lower()
    return IntentEntities(
        files=tuple(extract_file_references(text)),
        actions=tuple(word for word in ACTION_WORDS if word in lowered),
        targets=tuple(word for word in TARGET_WORDS if word in lowered),
    )
