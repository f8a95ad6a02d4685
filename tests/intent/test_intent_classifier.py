"""Tests for single-intent classification and entity extraction."""

import pytest

from codeagent.intent import (
    IntentKind,
    classify_intent,
    extract_entities,
    extract_file_references,
)


class TestClassifyIntent:
    """Tests for classify_intent()."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("plan the database migration", IntentKind.PLAN),
            ("implement a cache for the api", IntentKind.PLAN),
            ("edit src/app.py to add logging", IntentKind.EDIT),
            ("refactor utils.py", IntentKind.EDIT),
            ("write a haiku about rain", IntentKind.WRITE),
            ("create a file for the config", IntentKind.WRITE),
            ("move src/old.py to src/new.py", IntentKind.MOVE),
            ("rename notes.txt to todo.txt", IntentKind.MOVE),
            ("explain how the caching layer works", IntentKind.ASK),
            ("what is a closure", IntentKind.ASK),
        ],
    )
    def test_structural_patterns(self, text: str, expected: IntentKind) -> None:
        """Structural patterns map requests to their intent."""
        assert classify_intent(text) is expected

    def test_plan_beats_write(self) -> None:
        """Plan patterns are checked before write patterns."""
        assert classify_intent("write a spec and design a schema") is IntentKind.PLAN

    def test_edit_pattern_wins_over_write_keyword(self) -> None:
        """A structural edit match beats a write keyword appearing earlier."""
        assert classify_intent("in the site folder create a css file and modify index.html to link it") is IntentKind.EDIT

    def test_keyword_fallback(self) -> None:
        """Keywords are used only when no pattern matches."""
        assert classify_intent("please improve things") is IntentKind.EDIT
        assert classify_intent("make it faster") is IntentKind.WRITE

    def test_case_insensitive(self) -> None:
        """Classification ignores case."""
        assert classify_intent("EDIT Main.py") is IntentKind.EDIT

    @pytest.mark.parametrize("text", ["", "   ", "hello there"])
    def test_defaults_to_ask(self, text: str) -> None:
        """Empty or unrecognized text is a question."""
        assert classify_intent(text) is IntentKind.ASK


class TestEntityExtraction:
    """Tests for extract_file_references() and extract_entities()."""

    def test_file_references_by_extension(self) -> None:
        """Paths with known extensions are found in order."""
        refs = extract_file_references("update src/App.tsx and styles/main.css")
        assert refs == ["src/App.tsx", "styles/main.css"]

    def test_quoted_paths_and_dedup(self) -> None:
        """Quoted paths are included and duplicates dropped."""
        refs = extract_file_references('edit main.py, "config/settings" and main.py')
        assert refs == ["main.py", "config/settings"]

    def test_entities(self) -> None:
        """Actions and target nouns are collected."""
        entities = extract_entities("create a component in src/App.tsx")
        assert entities.files == ("src/App.tsx",)
        assert entities.actions == ("create",)
        assert entities.targets == ("component",)
