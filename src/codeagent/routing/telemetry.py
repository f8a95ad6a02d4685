"""Per-profile performance counters and health status.

Counters are advisory and live for the lifetime of one router. They are
keyed by profile key rather than backend model name because several
profiles may share one model.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

logger = logging.getLogger(__name__)

ERROR_RATE_STEP = 0.1
RECOVERY_STEP = 0.05


class HealthStatus(str, Enum):
    """Coarse availability of a profile's backend model."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


@dataclass
class ProfilePerformance:
    """Request counters for one profile."""

    total_requests: int = 0
    successful_requests: int = 0
    average_response_time_ms: float = 0.0
    last_used: datetime | None = None

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 1.0
        return self.successful_requests / self.total_requests


@dataclass
class ProfileHealth:
    """Health status for one profile."""

    status: HealthStatus = HealthStatus.UNKNOWN
    last_checked: datetime = field(default_factory=lambda: datetime.now(UTC))
    response_time_ms: int | None = None
    error_rate: float = 0.0
    last_error: str | None = None


class TelemetryTracker:
    """Owns performance and health state for a fixed set of profiles.

    Single-writer: only the owning router updates it.
    """

    def __init__(self, profiles: tuple[str, ...] | list[str], enabled: bool = True) -> None:
        self.enabled = enabled
        self._performance = {key: ProfilePerformance() for key in profiles}
        self._health = {key: ProfileHealth() for key in profiles}

    def performance(self, profile: str) -> ProfilePerformance:
        return self._performance[profile]

    def health(self, profile: str) -> ProfileHealth:
        return self._health[profile]

    def snapshot(self) -> dict[str, tuple[ProfilePerformance, ProfileHealth]]:
        """(performance, health) per profile, in registration order."""
        return {key: (self._performance[key], self._health[key]) for key in self._performance}

    def is_unavailable(self, profile: str) -> bool:
        health = self._health.get(profile)
        return health is not None and health.status is HealthStatus.UNAVAILABLE

    def track_success(self, profile: str, response_time_ms: int) -> None:
        """Record a successful request and mark the profile healthy."""
        if not self.enabled:
            return
        perf = self._performance[profile]
        perf.total_requests += 1
        perf.successful_requests += 1
        perf.average_response_time_ms += (
            response_time_ms - perf.average_response_time_ms
        ) / perf.successful_requests
        perf.last_used = datetime.now(UTC)
        self.update_health(profile, HealthStatus.HEALTHY, response_time_ms=response_time_ms)

    def track_failure(self, profile: str, error: str, status: HealthStatus = HealthStatus.DEGRADED) -> None:
        """Record a failed request."""
        if not self.enabled:
            return
        perf = self._performance[profile]
        perf.total_requests += 1
        perf.last_used = datetime.now(UTC)
        self.update_health(profile, status, error=error)

    def update_health(
        self,
        profile: str,
        status: HealthStatus,
        error: str | None = None,
        response_time_ms: int | None = None,
    ) -> None:
        """Set health status; errors raise the error rate, successes lower it."""
        health = self._health[profile]
        previous = health.status
        health.status = status
        health.last_checked = datetime.now(UTC)
        if response_time_ms is not None:
            health.response_time_ms = response_time_ms
        if error:
            health.last_error = error
            health.error_rate = min(1.0, health.error_rate + ERROR_RATE_STEP)
        elif status is HealthStatus.HEALTHY:
            health.error_rate = max(0.0, health.error_rate - RECOVERY_STEP)
        if previous is not status:
            logger.debug("Profile %s health %s -> %s", profile, previous.value, status.value)
