"""Pytest configuration and fixtures for codeagent tests."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from codeagent.core.config import AgentConfig, ModelProfile
from codeagent.core.execution.types import StepResult
from codeagent.providers.base import InferenceOptions
from codeagent.routing import ModelRouter


@pytest.fixture(autouse=True)
def isolate_user_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point user config and preferences at a temp dir and chdir into it.

    Tests never read ~/.codeagent or a codeagent.yaml from the repo.
    """
    home = tmp_path / "home" / ".codeagent"
    monkeypatch.setattr("codeagent.core.config.loader.USER_CONFIG_DIR", home)
    monkeypatch.setattr("codeagent.core.config.loader.USER_CONFIG_PATH", home / "config.yaml")
    monkeypatch.setattr("codeagent.core.config.loader.PREFERENCES_PATH", home / "preferences.yaml")
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return home


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Undo CLI logging setup so caplog sees codeagent records."""
    yield
    package_logger = logging.getLogger("codeagent")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


@pytest.fixture
def config() -> AgentConfig:
    """Default configuration."""
    return AgentConfig()


@pytest.fixture
def router(config: AgentConfig) -> ModelRouter:
    """Router with default configuration and no backend."""
    return ModelRouter(config)


class RecordingHandlers:
    """CommandHandlers fake that records calls and can be told to fail."""

    def __init__(self, fail_on: dict[str, str] | None = None) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.profiles: list[str | None] = []
        self.fail_on = fail_on or {}

    def _record(self, kind: str, target: str, *args: str, profile: str | None) -> StepResult:
        self.calls.append((kind, target, *args))
        self.profiles.append(profile)
        if target in self.fail_on:
            raise RuntimeError(self.fail_on[target])
        return StepResult.ok(output=target, profile=profile)

    def write(self, target: str, description: str, profile: str | None = None) -> StepResult:
        return self._record("write", target, description, profile=profile)

    def edit(self, target: str, description: str, profile: str | None = None) -> StepResult:
        return self._record("edit", target, description, profile=profile)

    def move(self, source: str, destination: str, profile: str | None = None) -> StepResult:
        return self._record("move", source, destination, profile=profile)

    def plan(self, description: str, profile: str | None = None) -> StepResult:
        return self._record("plan", "plan", description, profile=profile)


@pytest.fixture
def handlers() -> RecordingHandlers:
    return RecordingHandlers()


@pytest.fixture
def handlers_cls() -> type[RecordingHandlers]:
    """The recording handler class, for tests that subclass or configure it."""
    return RecordingHandlers


class FakeBackend:
    """InferenceBackend fake keyed on backend model name.

    Each entry in ``responses`` is the text to return or an exception to
    raise; unknown models answer "ok".
    """

    def __init__(self, responses: dict[str, object] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[tuple[str, str, InferenceOptions | None]] = []
        self.health_calls: list[str] = []

    def _outcome(self, profile: ModelProfile) -> object:
        outcome = self.responses.get(profile.name, "ok")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def infer(self, prompt: str, profile: ModelProfile, options: InferenceOptions | None = None) -> str:
        self.calls.append((profile.name, prompt, options))
        return str(self._outcome(profile))

    def health_check(self, profile: ModelProfile) -> int:
        self.health_calls.append(profile.name)
        self._outcome(profile)
        return 5


@pytest.fixture
def backend_cls() -> type[FakeBackend]:
    return FakeBackend
