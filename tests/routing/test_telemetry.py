"""Tests for per-profile telemetry and thinking-text helpers."""

import pytest

from codeagent.routing import (
    HealthStatus,
    TelemetryTracker,
    enhance_prompt_for_thinking,
    process_thinking_text,
)
from codeagent.routing.thinking import has_thinking_text

PROFILES = ("code", "analysis", "creative", "fallback")


class TestTelemetryTracker:
    """Tests for TelemetryTracker."""

    def test_initial_state(self) -> None:
        tracker = TelemetryTracker(PROFILES)
        assert tracker.health("code").status is HealthStatus.UNKNOWN
        assert tracker.performance("code").success_rate == 1.0
        assert list(tracker.snapshot()) == list(PROFILES)

    def test_running_average(self) -> None:
        tracker = TelemetryTracker(PROFILES)
        tracker.track_success("code", 100)
        tracker.track_success("code", 300)
        perf = tracker.performance("code")
        assert perf.total_requests == 2
        assert perf.average_response_time_ms == pytest.approx(200.0)
        assert perf.last_used is not None
        assert tracker.health("code").status is HealthStatus.HEALTHY

    def test_failures_do_not_dilute_average(self) -> None:
        tracker = TelemetryTracker(PROFILES)
        tracker.track_failure("code", "boom")
        tracker.track_success("code", 100)
        perf = tracker.performance("code")
        assert perf.total_requests == 2
        assert perf.average_response_time_ms == pytest.approx(100.0)

    def test_failure_and_recovery(self) -> None:
        tracker = TelemetryTracker(PROFILES)
        tracker.track_failure("analysis", "boom")
        tracker.track_failure("analysis", "boom again", status=HealthStatus.UNAVAILABLE)

        health = tracker.health("analysis")
        assert health.status is HealthStatus.UNAVAILABLE
        assert health.error_rate == pytest.approx(0.2)
        assert health.last_error == "boom again"
        assert tracker.is_unavailable("analysis")
        assert tracker.performance("analysis").success_rate == 0.0

        tracker.track_success("analysis", 10)
        assert health.error_rate == pytest.approx(0.15)
        assert not tracker.is_unavailable("analysis")

    def test_error_rate_capped(self) -> None:
        tracker = TelemetryTracker(PROFILES)
        for _ in range(15):
            tracker.update_health("code", HealthStatus.DEGRADED, error="x")
        assert tracker.health("code").error_rate == 1.0

    def test_disabled_tracking_records_nothing(self) -> None:
        tracker = TelemetryTracker(PROFILES, enabled=False)
        tracker.track_success("code", 100)
        tracker.track_failure("code", "boom", status=HealthStatus.UNAVAILABLE)
        assert tracker.performance("code").total_requests == 0
        assert tracker.health("code").status is HealthStatus.UNKNOWN

    def test_unknown_profile_is_not_unavailable(self) -> None:
        assert not TelemetryTracker(PROFILES).is_unavailable("gpt")


class TestThinking:
    """Tests for thinking prompt wrapping and response cleanup."""

    def test_enhance_prompt(self) -> None:
        prompt = enhance_prompt_for_thinking("why is the sky blue")
        assert prompt.startswith("<thinking>")
        assert "1. Analyze the request: why is the sky blue" in prompt
        assert prompt.endswith("Please provide a comprehensive and well-reasoned response.")

    def test_strip_by_default(self) -> None:
        assert process_thinking_text("<think>\nsteps\n</think>\nAnswer") == "Answer"

    def test_show_formatted(self) -> None:
        out = process_thinking_text("<think> steps </think>Answer", show=True)
        assert "**Thinking:**\n```\nsteps\n```" in out
        assert out.endswith("Answer")

    def test_show_raw(self) -> None:
        raw = "<think>steps</think>Answer"
        assert process_thinking_text(raw, show=True, format_blocks=False) == raw

    def test_no_blocks_untouched(self) -> None:
        assert not has_thinking_text("plain")
        assert process_thinking_text("  plain  ") == "  plain  "
