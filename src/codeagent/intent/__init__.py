"""Intent recognition: single-intent classification and compound parsing."""

from codeagent.intent.classifier import (
    IntentEntities,
    classify_intent,
    extract_entities,
    extract_file_references,
)
from codeagent.intent.parser import CompoundParser, extract_context, extract_main_target
from codeagent.intent.strategies import DecompositionStrategy, StylesheetLinkStrategy
from codeagent.intent.types import (
    CompoundIntent,
    DecompositionStatus,
    IntentContext,
    IntentKind,
    Operation,
    Relationship,
    make_move_target,
)

__all__ = [
    "CompoundIntent",
    "CompoundParser",
    "DecompositionStatus",
    "DecompositionStrategy",
    "IntentContext",
    "IntentEntities",
    "IntentKind",
    "Operation",
    "Relationship",
    "StylesheetLinkStrategy",
    "classify_intent",
    "extract_context",
    "extract_entities",
    "extract_file_references",
    "extract_main_target",
    "make_move_target",
]
