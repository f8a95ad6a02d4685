"""Decomposition strategies for compound requests.

A strategy turns one multi-step request into concrete Operations. The
parser tries strategies in order and uses the first that yields anything,
so new phrasings are supported by adding a strategy rather than touching
the resolver or the engine.
"""

import logging
import re
from typing import Protocol, runtime_checkable

from codeagent.intent.types import IntentContext, IntentKind, Operation

logger = logging.getLogger(__name__)

DEFAULT_STYLESHEET_NAME = "styles.css"
DEFAULT_MARKUP_NAME = "index.html"

STYLESHEET_LINK_PATTERNS: tuple[re.Pattern[str], ...] = (
    # "create a css file and modify index.html to link it"
    re.compile(
        r"(?:create|make)\s+(?:a\s+)?css\s+file.*?(?:and\s+)?(?:modify|edit|update)\s+.*?html.*?(?:connect|link)",
        re.IGNORECASE,
    ),
    # "make a stylesheet and link it to the html"
    re.compile(
        r"(?:create|make)\s+(?:a\s+)?(?:css|stylesheet).*?(?:and\s+)?(?:link|connect).*?(?:html|index)",
        re.IGNORECASE,
    ),
    # "in the site folder create a css file, edit the html and connect it to the css"
    re.compile(
        r"in\s+(?:the\s+)?(\w+)\s+.*?(?:create|make)\s+(?:a\s+)?css\s+file.*?(?:modify|edit).*?html.*?(?:connect|link).*?css",
        re.IGNORECASE,
    ),
)

_STYLING_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?:with|do|add|include)\s+(?:some\s+)?([^.]+?)\s+styl", re.IGNORECASE),
    re.compile(
        r"(?:colorful|modern|responsive|attractive|professional|gradient|hover)\s+(?:styling|design|effects)",
        re.IGNORECASE,
    ),
)
_CSS_NAME_PATTERN = re.compile(r"([\w\-]+\.css)\b", re.IGNORECASE)
_HTML_NAME_PATTERN = re.compile(r"([\w\-]+\.html?)\b", re.IGNORECASE)


@runtime_checkable
class DecompositionStrategy(Protocol):
    """Turns a recognized multi-step phrasing into Operations."""

    name: str

    def applies(self, text: str) -> bool:
        """Return True if this strategy recognizes the phrasing."""
        ...

    def decompose(self, text: str, context: IntentContext) -> list[Operation]:
        """Produce Operations in insertion order (empty when not applicable)."""
        ...


def _join_folder(folder: str | None, filename: str) -> str:
    return f"{folder}/{filename}" if folder else filename


def extract_styling_description(text: str) -> str:
    """Pull the requested look ("colorful", "modern gradient", ...) from text."""
    for pattern in _STYLING_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1) if match.groups() else match.group(0)
    return "colorful and modern styling"


class StylesheetLinkStrategy:
    """Create a stylesheet, then edit a markup file to link it.

    The edit depends on the stylesheet target and its description names the
    stylesheet file, so the engine can later rebuild the link instruction
    from whatever file was actually created.
    """

    name = "stylesheet-link"

    def applies(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in STYLESHEET_LINK_PATTERNS)

    def decompose(self, text: str, context: IntentContext) -> list[Operation]:
        if not self.applies(text):
            return []

        css_match = _CSS_NAME_PATTERN.search(text)
        html_match = _HTML_NAME_PATTERN.search(text)
        css_name = css_match.group(1) if css_match else DEFAULT_STYLESHEET_NAME
        html_name = html_match.group(1) if html_match else DEFAULT_MARKUP_NAME
        css_path = _join_folder(context.folder, css_name)
        html_path = _join_folder(context.folder, html_name)

        styling = extract_styling_description(text)
        logger.debug("Stylesheet link decomposition: %s -> %s", css_path, html_path)

        return [
            Operation(
                intent=IntentKind.WRITE,
                target=css_path,
                description=(
                    f"Create a CSS file with {styling}. Include responsive design, "
                    "attractive colors, and professional styling."
                ),
                priority=1,
            ),
            Operation(
                intent=IntentKind.EDIT,
                target=html_path,
                description=(
                    f"Modify the HTML file to link to the CSS file ({css_name}). Remove any "
                    "existing inline styles and replace with a proper CSS link in the <head> section."
                ),
                dependencies=frozenset({css_path}),
                priority=2,
            ),
        ]


def default_strategies() -> list[DecompositionStrategy]:
    """Strategies used when the parser is built without an explicit list."""
    return [StylesheetLinkStrategy()]
