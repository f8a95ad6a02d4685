"""Tests for compound request parsing and decomposition strategies."""

import pytest

from codeagent.core.exceptions import IntentError
from codeagent.intent import (
    CompoundIntent,
    CompoundParser,
    DecompositionStatus,
    IntentContext,
    IntentKind,
    Operation,
    StylesheetLinkStrategy,
    extract_context,
    extract_main_target,
)

STYLESHEET_REQUEST = "in the site folder create a css file and modify index.html to link it"


@pytest.fixture
def parser() -> CompoundParser:
    return CompoundParser()


class TestParse:
    """Tests for CompoundParser.parse()."""

    def test_stylesheet_request_is_decomposed(self, parser: CompoundParser) -> None:
        """Stylesheet + link request yields a write then a dependent edit."""
        result = parser.parse(STYLESHEET_REQUEST)

        assert result.is_compound
        assert result.decomposition is DecompositionStatus.DECOMPOSED
        write, edit = result.operations
        assert (write.intent, write.target) == (IntentKind.WRITE, "site/styles.css")
        assert (edit.intent, edit.target) == (IntentKind.EDIT, "site/index.html")
        assert edit.dependencies == frozenset({"site/styles.css"})
        assert "styles.css" in edit.description
        assert write.priority < edit.priority

    def test_context_is_extracted(self, parser: CompoundParser) -> None:
        """Folder, main action and link relationship are recorded."""
        context = parser.parse(STYLESHEET_REQUEST).context
        assert context.folder == "site"
        assert context.main_action == "create"
        relationship = context.find_relationship("link")
        assert relationship is not None
        assert (relationship.source_kind, relationship.target_kind) == ("css", "html")

    @pytest.mark.parametrize(
        "text",
        ["explain how the caching layer works", "what is a closure", ""],
    )
    def test_questions_produce_no_operations(self, parser: CompoundParser, text: str) -> None:
        """Anything classified as ask is empty and non-compound."""
        result = parser.parse(text)
        assert result.is_empty
        assert not result.is_compound
        assert result.decomposition is DecompositionStatus.NOT_COMPOUND
        assert result.original_input == text

    def test_single_operation(self, parser: CompoundParser) -> None:
        """Non-compound requests become one operation with the text as description."""
        result = parser.parse("edit src/app.py to add logging")
        assert not result.is_compound
        (op,) = result.operations
        assert op.intent is IntentKind.EDIT
        assert op.target == "src/app.py"
        assert op.description == "edit src/app.py to add logging"
        assert op.dependencies == frozenset()

    def test_move_request_keeps_both_paths(self, parser: CompoundParser) -> None:
        """Move targets carry source and destination."""
        (op,) = parser.parse("move src/old.py to src/new.py").operations
        assert op.intent is IntentKind.MOVE
        assert op.move_paths == ("src/old.py", "src/new.py")

    def test_unhandled_compound_falls_back_to_single_step(
        self, parser: CompoundParser, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Multi-step phrasing without a strategy keeps one operation, with a warning."""
        with caplog.at_level("WARNING", logger="codeagent.intent.parser"):
            result = parser.parse("create a utils.py file and update main.py")

        assert result.decomposition is DecompositionStatus.UNHANDLED
        assert not result.is_compound
        (op,) = result.operations
        assert (op.intent, op.target) == (IntentKind.EDIT, "main.py")
        assert "not decomposed" in caplog.text

    @pytest.mark.parametrize(
        ("text", "target"),
        [
            ("update README.md to make the intro shorter", "README.md"),
            ("edit app.py to write logs to a file", "app.py"),
        ],
    )
    def test_edit_mentioning_creation_verb_is_kept(self, parser: CompoundParser, text: str, target: str) -> None:
        """A single edit that happens to contain "make" or "write" still yields the edit."""
        result = parser.parse(text)

        assert result.decomposition is DecompositionStatus.UNHANDLED
        (op,) = result.operations
        assert (op.intent, op.target, op.description) == (IntentKind.EDIT, target, text)

    def test_folder_request_targets_directory(self, parser: CompoundParser) -> None:
        (op,) = parser.parse("create a folder called testfolder").operations
        assert op.intent is IntentKind.WRITE
        assert op.target == "testfolder/"
        assert op.is_directory

    def test_custom_strategy_is_used(self) -> None:
        """Strategies are pluggable."""

        class ReadmeStrategy:
            name = "readme"

            def applies(self, text: str) -> bool:
                return "readme" in text

            def decompose(self, text: str, context: IntentContext) -> list[Operation]:
                return [
                    Operation(IntentKind.WRITE, "README.md", "write readme"),
                    Operation(IntentKind.EDIT, "setup.cfg", "point at readme", frozenset({"README.md"})),
                ]

        parser = CompoundParser(strategies=[ReadmeStrategy()])
        result = parser.parse("create a readme and update setup.cfg")
        assert [op.target for op in result.operations] == ["README.md", "setup.cfg"]
        assert result.decomposition is DecompositionStatus.DECOMPOSED


class TestIsCompoundRequest:
    """Tests for CompoundParser.is_compound_request()."""

    @pytest.mark.parametrize(
        "text",
        [
            "create a.py and modify b.py",
            "write the docs, then update the index",
            "make a stylesheet and link it to the html",
            "generate tests; change the runner",
        ],
    )
    def test_compound(self, parser: CompoundParser, text: str) -> None:
        assert parser.is_compound_request(text)

    @pytest.mark.parametrize("text", ["edit src/app.py", "move a.py to b.py"])
    def test_not_compound(self, parser: CompoundParser, text: str) -> None:
        assert not parser.is_compound_request(text)


class TestStylesheetLinkStrategy:
    """Tests for StylesheetLinkStrategy."""

    def test_explicit_names_without_folder(self) -> None:
        """Explicit file names are used; no folder means bare paths."""
        text = "create a css file theme.css and modify home.html to link it"
        ops = StylesheetLinkStrategy().decompose(text, IntentContext())
        assert [op.target for op in ops] == ["theme.css", "home.html"]
        assert ops[1].dependencies == frozenset({"theme.css"})
        assert "(theme.css)" in ops[1].description

    def test_styling_description(self) -> None:
        """Requested look is carried into the write description."""
        text = "make a stylesheet with dark neon styling and link it to index"
        write = StylesheetLinkStrategy().decompose(text, IntentContext())[0]
        assert write.description.startswith("Create a CSS file with dark neon.")

    def test_not_applicable(self) -> None:
        """Unrelated text yields nothing."""
        assert StylesheetLinkStrategy().decompose("edit main.py", IntentContext()) == []


class TestExtraction:
    """Tests for extract_context() and extract_main_target()."""

    def test_context_without_signals(self) -> None:
        context = extract_context("hello")
        assert context == IntentContext()

    def test_main_target_falls_back(self) -> None:
        """File, then folder, then 'unknown'."""
        assert extract_main_target("fix the bug in lib/util.js") == "lib/util.js"
        assert extract_main_target("make a folder called assets") == "assets/"
        assert extract_main_target("do something") == "unknown"

    def test_folder_context_is_not_a_target(self) -> None:
        """"in the src folder write ..." names where, not what."""
        assert extract_main_target("in the src folder write a helper") == "unknown"

    @pytest.mark.parametrize("text", ["add a hyperlink to the footer", "show linked issues", "fix disconnected nav"])
    def test_link_needs_whole_word(self, text: str) -> None:
        assert extract_context(text).find_relationship("link") is None

    def test_connect_word_is_a_link(self) -> None:
        assert extract_context("connect it to the page").find_relationship("link") is not None


class TestTypes:
    """Invariants enforced by the intent data types."""

    def test_ask_cannot_have_dependencies(self) -> None:
        with pytest.raises(IntentError):
            Operation(IntentKind.ASK, "q", "question", frozenset({"a.py"}))

    def test_unknown_intent_rejected(self) -> None:
        with pytest.raises(IntentError, match="Unknown intent"):
            Operation("delete", "a.py", "remove it")  # type: ignore[arg-type]

    def test_string_intent_coerced(self) -> None:
        assert Operation("write", "a.py", "x").intent is IntentKind.WRITE  # type: ignore[arg-type]

    def test_malformed_move_target(self) -> None:
        with pytest.raises(IntentError):
            _ = Operation(IntentKind.MOVE, "a.py", "move it").move_paths

    def test_compound_cannot_contain_ask(self) -> None:
        ask = Operation(IntentKind.ASK, "q", "question")
        with pytest.raises(IntentError):
            CompoundIntent(operations=(ask,), is_compound=True, original_input="q")
