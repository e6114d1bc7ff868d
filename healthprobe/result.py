"""Results of endpoint health evaluations and related events and statistics."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta

__all__ = [
    "ConditionResult",
    "Result",
    "EventType",
    "Event",
    "HourlyUptimeStatistics",
    "Uptime",
]


@dataclass
class ConditionResult:
    """The outcome of evaluating a single condition."""

    condition: str
    success: bool


@dataclass
class Result:
    """The outcome of a single evaluation of an endpoint."""

    http_status: int = 0
    dns_rcode: str = ""
    hostname: str = ""
    ip: str = ""
    connected: bool = False
    duration: timedelta = field(default_factory=timedelta)
    errors: list[str] = field(default_factory=list)
    condition_results: list[ConditionResult] = field(default_factory=list)
    success: bool = False
    timestamp: datetime | None = None
    certificate_expiration: timedelta = field(default_factory=timedelta)
    domain_expiration: timedelta = field(default_factory=timedelta)
    body: bytes = b""

    def add_error(self, error: str) -> None:
        """Record an error unless the same error was already recorded."""
        if error not in self.errors:
            self.errors.append(error)


class EventType(str, enum.Enum):
    """Kinds of events in an endpoint's history."""

    START = "START"
    HEALTHY = "HEALTHY"
    UNHEALTHY = "UNHEALTHY"


@dataclass
class Event:
    """Something that happened to an endpoint at a specific time."""

    type: EventType
    timestamp: datetime | None = None

    @classmethod
    def from_result(cls, result: Result) -> Event:
        """Create a healthy or unhealthy event from a result."""
        kind = EventType.HEALTHY if result.success else EventType.UNHEALTHY
        return cls(type=kind, timestamp=result.timestamp)


@dataclass
class HourlyUptimeStatistics:
    """Metrics collected over the course of one hour."""

    total_executions: int = 0
    successful_executions: int = 0
    total_executions_response_time: int = 0


@dataclass
class Uptime:
    """Hourly statistics keyed by the unix timestamp of each hour."""

    hourly_statistics: dict[int, HourlyUptimeStatistics] = field(default_factory=dict)