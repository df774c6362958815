"""Points in time that durations are applied to.

`PointInTime` is the contract a duration needs from the thing it is added
to: a functional `add_duration()` and ordering. `DateTimePoint` implements
it on top of `datetime`, using python-dateutil's relativedelta for month
arithmetic and honoring the duration's end-of-month mode.
"""

import calendar
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import TYPE_CHECKING, Any, Literal

from dateutil.relativedelta import relativedelta
from typing_extensions import Self, override

from calduration.util import (
    NANOSECONDS_PER_MICROSECOND,
    NANOSECONDS_PER_SECOND,
    SECONDS_PER_MINUTE,
)

if TYPE_CHECKING:
    from calduration.duration import Duration, EndOfMonth

logger = logging.getLogger(__name__)


class PointInTime(ABC):
    """A concrete point in time that durations can be applied to.

    `add_duration()` must return a new point and leave the receiver
    untouched; `compare()` applies two durations to the same anchor.
    Ordering is derived from `<` alone, so `==` need not be overridden.
    """

    @abstractmethod
    def add_duration(self, duration: "Duration") -> Self:
        """Return this point shifted by the given duration."""
        pass

    @abstractmethod
    def __lt__(self, other: Any) -> bool:
        pass


def ordering(left: PointInTime, right: PointInTime) -> Literal[-1, 0, 1]:
    """Three-way comparison of two points: -1 (less), 0 (equal) or 1 (greater)."""
    if left < right:
        return -1
    if right < left:
        return 1
    return 0


def _last_day(moment: datetime) -> int:
    return calendar.monthrange(moment.year, moment.month)[1]


def _add_months(moment: datetime, months: int, mode: "EndOfMonth") -> datetime:
    """Shift by whole months, resolving days that fall past the target month's end.

    - limit: clamp to the last day of the target month
    - wrap: spill the overflow days into the following month
    - preserve: like limit, but the last day of a month maps to the last day
      of the target month
    """
    if not months:
        return moment

    if mode == "preserve" and moment.day == _last_day(moment):
        return moment + relativedelta(months=months, day=31)

    # relativedelta clamps the day to the end of the target month
    shifted = moment + relativedelta(months=months)
    if mode == "wrap" and shifted.day != moment.day:
        overflow = moment.day - shifted.day
        logger.debug(
            "Wrapping %d overflow day(s) past %s into the next month",
            overflow,
            shifted.date(),
        )
        return shifted + timedelta(days=overflow)
    return shifted


@dataclass(frozen=True)
class DateTimePoint(PointInTime):
    """A `datetime` with nanosecond resolution.

    Attributes:
        moment: The wall-clock datetime (naive or timezone-aware)
        nanosecond: Sub-microsecond remainder, 0 <= nanosecond < 1000

    Example:
        >>> start = DateTimePoint(datetime(2025, 1, 31))
        >>> (start + Duration(months=1, end_of_month="limit")).moment
        datetime.datetime(2025, 2, 28, 0, 0)
    """

    moment: datetime
    nanosecond: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.nanosecond < NANOSECONDS_PER_MICROSECOND:
            raise ValueError(
                f"DateTimePoint nanosecond must be in [0, "
                f"{NANOSECONDS_PER_MICROSECOND}), got {self.nanosecond}.\n"
                f"Hint: Whole microseconds belong in the datetime itself."
            )

    @classmethod
    def now(cls, tz: tzinfo | None = None) -> Self:
        """Current point, for callers that want to compare against "now"."""
        return cls(datetime.now(tz))

    @override
    def add_duration(self, duration: "Duration") -> Self:
        """Apply months (per end-of-month mode), then days, then the clock part."""
        moment = _add_months(
            self.moment, duration.delta_months, duration.end_of_month
        )
        moment += timedelta(days=duration.delta_days)

        clock_seconds = (
            duration.delta_minutes * SECONDS_PER_MINUTE + duration.delta_seconds
        )
        total_nanoseconds = (
            clock_seconds * NANOSECONDS_PER_SECOND
            + duration.delta_nanoseconds
            + self.nanosecond
        )
        microseconds, nanosecond = divmod(
            total_nanoseconds, NANOSECONDS_PER_MICROSECOND
        )
        return type(self)(moment + timedelta(microseconds=microseconds), nanosecond)

    def __add__(self, other: object) -> Any:
        # Import at runtime to avoid circular dependency
        from calduration.duration import Duration

        if isinstance(other, Duration):
            return self.add_duration(other)
        return NotImplemented

    def __sub__(self, other: object) -> Any:
        from calduration.duration import Duration

        if isinstance(other, Duration):
            return self.add_duration(other.inverse(end_of_month=other.end_of_month))
        return NotImplemented

    @override
    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, DateTimePoint):
            return NotImplemented
        return (self.moment, self.nanosecond) < (other.moment, other.nanosecond)

    def __le__(self, other: Any) -> bool:
        if not isinstance(other, DateTimePoint):
            return NotImplemented
        return (self.moment, self.nanosecond) <= (other.moment, other.nanosecond)

    def __gt__(self, other: Any) -> bool:
        if not isinstance(other, DateTimePoint):
            return NotImplemented
        return (self.moment, self.nanosecond) > (other.moment, other.nanosecond)

    def __ge__(self, other: Any) -> bool:
        if not isinstance(other, DateTimePoint):
            return NotImplemented
        return (self.moment, self.nanosecond) >= (other.moment, other.nanosecond)
