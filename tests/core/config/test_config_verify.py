"""Tests for configuration file validation reports."""

from pathlib import Path

import yaml

from codeagent.core.config.validator import (
    CheckResult,
    CheckStatus,
    format_validation_report,
    validate_config_file,
)


def _config_file(tmp_path: Path, data: object) -> Path:
    path = tmp_path / "codeagent.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


def _statuses(results: list[CheckResult]) -> list[CheckStatus]:
    return [r.status for r in results]


class TestValidateConfigFile:
    """Tests for validate_config_file()."""

    def test_valid_file(self, tmp_path: Path) -> None:
        results = validate_config_file(_config_file(tmp_path, {"routing": {"confidence_threshold": 0.7}}))
        assert _statuses(results) == [CheckStatus.OK, CheckStatus.OK]
        assert [r.message for r in results] == ["YAML syntax", "Schema validation"]

    def test_yaml_error_stops_checks(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("routing: {unclosed")
        results = validate_config_file(path)
        assert _statuses(results) == [CheckStatus.ERR]
        assert "Invalid YAML" in results[0].message

    def test_schema_errors_are_listed(self, tmp_path: Path) -> None:
        data = {"routing": {"default_profile": "gpt", "confidence_threshold": 2}}
        results = validate_config_file(_config_file(tmp_path, data))
        errors = [r.message for r in results if r.status is CheckStatus.ERR]
        assert len(errors) == 2
        assert any(m.startswith("routing.default_profile") for m in errors)
        assert any(m.startswith("routing.confidence_threshold") for m in errors)

    def test_unknown_key_warns(self, tmp_path: Path) -> None:
        results = validate_config_file(_config_file(tmp_path, {"providers": {}}))
        assert CheckResult(CheckStatus.WARN, "Unknown top-level key ignored: providers") in results

    def test_legacy_file_warns(self, tmp_path: Path) -> None:
        results = validate_config_file(_config_file(tmp_path, {"model": "coder:3b"}))
        assert results[1].status is CheckStatus.WARN
        assert "Legacy" in results[1].message
        assert results[-1] == CheckResult(CheckStatus.OK, "Schema validation")

    def test_bad_endpoint(self, tmp_path: Path) -> None:
        data = {"models": {"code": {"name": "c", "endpoint": "localhost:11434"}}}
        results = validate_config_file(_config_file(tmp_path, data))
        assert CheckResult(CheckStatus.ERR, "Endpoint is not an http(s) URL: localhost:11434") in results

    def test_policy_warnings(self, tmp_path: Path) -> None:
        data = {"routing": {"auto_detect": False, "confidence_threshold": 1.0}}
        results = validate_config_file(_config_file(tmp_path, data))
        warnings = [r.message for r in results if r.status is CheckStatus.WARN]
        assert len(warnings) == 2
        assert "auto_detect is off; all requests use 'analysis'" in warnings


class TestFormatValidationReport:
    """Tests for format_validation_report()."""

    def test_report(self, tmp_path: Path) -> None:
        results = [
            CheckResult(CheckStatus.OK, "YAML syntax"),
            CheckResult(CheckStatus.WARN, "careful"),
        ]
        report, has_errors = format_validation_report(results, tmp_path / "c.yaml")
        assert not has_errors
        assert "[OK]" in report
        assert "careful" in report

    def test_has_errors(self, tmp_path: Path) -> None:
        _, has_errors = format_validation_report([CheckResult(CheckStatus.ERR, "bad")], tmp_path)
        assert has_errors
