"""User interface settings for an endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import pairwise

__all__ = [
    "InvalidBadgeConfigError",
    "ResponseTime",
    "Badge",
    "UIConfig",
    "default_ui_config",
]

INVALID_BADGE_RESPONSE_TIME_MESSAGE = (
    "invalid response time badge configuration: "
    "expected parameter 'response-time' to have 5 ascending numerical values"
)
DEFAULT_RESPONSE_TIME_THRESHOLDS = (50, 200, 300, 500, 750)


class InvalidBadgeConfigError(ValueError):
    """Raised when the response time badge thresholds are malformed."""

    def __init__(self, message: str = INVALID_BADGE_RESPONSE_TIME_MESSAGE) -> None:
        super().__init__(message)


@dataclass
class ResponseTime:
    """Thresholds, in milliseconds, for the response time badge."""

    thresholds: list[int] = field(default_factory=list)


@dataclass
class Badge:
    """Badge settings."""

    response_time: ResponseTime | None = None


@dataclass
class UIConfig:
    """How an endpoint's results are presented."""

    hide_hostname: bool = False
    hide_url: bool = False
    dont_resolve_failed_conditions: bool = False
    badge: Badge | None = None

    def validate_and_set_defaults(self) -> None:
        """Check the badge thresholds, or fill in the default badge if none is set."""
        if self.badge is None:
            self.badge = default_ui_config().badge
            return
        response_time = self.badge.response_time
        thresholds = response_time.thresholds if response_time is not None else []
        if len(thresholds) != 5:
            raise InvalidBadgeConfigError()
        if any(later < earlier for earlier, later in pairwise(thresholds)):
            raise InvalidBadgeConfigError()


def default_ui_config() -> UIConfig:
    """Return a fresh UI configuration with default values."""
    return UIConfig(
        badge=Badge(response_time=ResponseTime(thresholds=list(DEFAULT_RESPONSE_TIME_THRESHOLDS)))
    )