"""Configuration file validation for `codeagent config verify`.

Each check yields a CheckResult with an [OK], [WARN] or [ERR] status so the
report shows everything wrong with a file at once instead of stopping at the
first pydantic error.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from codeagent.core.config.loader import _is_legacy, _read_yaml, convert_legacy_config
from codeagent.core.config.models import AgentConfig
from codeagent.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

KNOWN_TOP_LEVEL_KEYS: frozenset[str] = frozenset({"models", "routing", "preferences"})


class CheckStatus(str, Enum):
    """Outcome of one validation check."""

    OK = "OK"
    WARN = "WARN"
    ERR = "ERR"


@dataclass(frozen=True)
class CheckResult:
    """One line of the validation report."""

    status: CheckStatus
    message: str


def validate_config_file(path: Path) -> list[CheckResult]:
    """Run all checks against a configuration file.

    Args:
        path: YAML file to validate.

    Returns:
        Check results in report order. Never raises for invalid content.

    """
    results: list[CheckResult] = []

    try:
        raw: dict[str, Any] = _read_yaml(path)
    except ConfigError as e:
        results.append(CheckResult(CheckStatus.ERR, str(e)))
        return results
    results.append(CheckResult(CheckStatus.OK, "YAML syntax"))

    if _is_legacy(raw):
        results.append(
            CheckResult(
                CheckStatus.WARN,
                "Legacy single-model config detected; it will be converted to four profiles",
            )
        )
        raw = convert_legacy_config(raw)
    else:
        unknown = sorted(set(raw) - KNOWN_TOP_LEVEL_KEYS)
        for key in unknown:
            results.append(CheckResult(CheckStatus.WARN, f"Unknown top-level key ignored: {key}"))

    try:
        config = AgentConfig.model_validate(raw)
    except ValidationError as e:
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            results.append(CheckResult(CheckStatus.ERR, f"{location}: {error['msg']}"))
        return results
    results.append(CheckResult(CheckStatus.OK, "Schema validation"))

    endpoints = {profile.endpoint for _, profile in config.models.items()}
    for endpoint in sorted(endpoints):
        if not endpoint.startswith(("http://", "https://")):
            results.append(CheckResult(CheckStatus.ERR, f"Endpoint is not an http(s) URL: {endpoint}"))

    if config.routing.confidence_threshold >= 1.0:
        results.append(
            CheckResult(
                CheckStatus.WARN,
                "confidence_threshold of 1.0 sends every mixed request to the default profile",
            )
        )

    if not config.routing.auto_detect:
        results.append(
            CheckResult(
                CheckStatus.WARN,
                f"auto_detect is off; all requests use '{config.routing.default_profile}'",
            )
        )

    return results


def format_validation_report(results: list[CheckResult], path: Path) -> tuple[str, bool]:
    """Render results as Rich markup.

    Returns:
        Tuple of (report text, has_errors).

    """
    colors = {CheckStatus.OK: "green", CheckStatus.WARN: "yellow", CheckStatus.ERR: "red"}
    lines = [f"Verifying {path}"]
    for result in results:
        color = colors[result.status]
        lines.append(f"  [{color}]\\[{result.status.value}][/{color}] {result.message}")

    has_errors = any(r.status is CheckStatus.ERR for r in results)
    return "\n".join(lines), has_errors
