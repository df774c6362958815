"""Duration values for calendar and clock arithmetic.

A Duration keeps five signed quantities: months (years folded in), days
(weeks folded in), minutes (hours folded in), seconds and nanoseconds.
Calendar units (months, days) have no fixed length, so two durations can
only be ordered against a concrete point in time via `compare()`.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, TypeAlias, get_args

from typing_extensions import Self, override

from calduration.point import DateTimePoint, PointInTime, ordering
from calduration.util import (
    DAYS_PER_WEEK,
    MINUTES_PER_HOUR,
    MONTHS_PER_YEAR,
    NANOSECONDS_PER_MICROSECOND,
    NANOSECONDS_PER_SECOND,
    is_sentinel,
    truncate_div,
)

logger = logging.getLogger(__name__)

EndOfMonth: TypeAlias = Literal["wrap", "limit", "preserve"]

Unit: TypeAlias = Literal[
    "years",
    "months",
    "weeks",
    "days",
    "hours",
    "minutes",
    "seconds",
    "nanoseconds",
]

_END_OF_MONTH_MODES: tuple[str, ...] = get_args(EndOfMonth)
_UNITS: tuple[str, ...] = get_args(Unit)

_NO_ORDERING = (
    "Duration does not support ordering comparison (<, <=, >, >=).\n"
    "The order of two durations depends on the point they are applied to "
    "(1 month is longer than 30 days in January, shorter in February).\n"
    "Hint: Compare them against an explicit anchor:\n"
    "  compare(a, b, anchor)  # anchor: PointInTime or datetime"
)


class InvalidOperation(TypeError):
    """Raised for operations that are ill-defined on durations."""


def _normalize(seconds: int, nanoseconds: int) -> tuple[int, int]:
    """Carry whole seconds out of nanoseconds, leaving both co-signed.

    Only called when nanoseconds is non-zero. Non-finite sentinels in either
    field are passed through untouched.
    """
    if is_sentinel(seconds) or is_sentinel(nanoseconds):
        logger.debug(
            "Skipping normalization of non-finite value: seconds=%r, nanoseconds=%r",
            seconds,
            nanoseconds,
        )
        return seconds, nanoseconds

    combined = seconds * NANOSECONDS_PER_SECOND + nanoseconds
    seconds = truncate_div(combined, NANOSECONDS_PER_SECOND)
    nanoseconds = combined % NANOSECONDS_PER_SECOND
    if combined < 0 and nanoseconds:
        nanoseconds -= NANOSECONDS_PER_SECOND
    return seconds, nanoseconds


@dataclass(frozen=True, init=False)
class Duration:
    """An offset in mixed calendar and clock units.

    Durations are immutable: arithmetic returns new values and leaves the
    operands untouched. The ``delta_*`` fields are the raw stored units;
    the unit methods (`years()`, `months()`, ...) decompose them.

    Example:
        >>> d = Duration(months=14, hours=1, minutes=30)
        >>> d.years(), d.months(), d.hours(), d.minutes()
        (1, 2, 1, 30)
    """

    delta_months: int
    delta_days: int
    delta_minutes: int
    delta_seconds: int
    delta_nanoseconds: int
    end_of_month: EndOfMonth

    def __init__(
        self,
        *,
        years: int = 0,
        months: int = 0,
        weeks: int = 0,
        days: int = 0,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
        nanoseconds: int = 0,
        end_of_month: EndOfMonth | None = None,
    ) -> None:
        """
        Initialize a duration from any subset of units.

        Args:
            years: Folded into months (x12)
            months: Calendar months
            weeks: Folded into days (x7)
            days: Calendar days
            hours: Folded into minutes (x60)
            minutes: Clock minutes
            seconds: Clock seconds
            nanoseconds: Carried into seconds when |nanoseconds| >= 1e9
            end_of_month: How a point resolves a month offset landing past
                the end of the target month: "wrap", "limit" or "preserve".
                Defaults to "preserve" for negative months, "wrap" otherwise.
        """
        months = years * MONTHS_PER_YEAR + months
        days = weeks * DAYS_PER_WEEK + days
        minutes = hours * MINUTES_PER_HOUR + minutes

        if nanoseconds:
            seconds, nanoseconds = _normalize(seconds, nanoseconds)

        if end_of_month is None:
            end_of_month = "preserve" if months < 0 else "wrap"
        elif end_of_month not in _END_OF_MONTH_MODES:
            valid = ", ".join(_END_OF_MONTH_MODES)
            raise ValueError(
                f"Invalid end_of_month mode: {end_of_month!r}\n"
                f"Valid modes: {valid}"
            )

        object.__setattr__(self, "delta_months", months)
        object.__setattr__(self, "delta_days", days)
        object.__setattr__(self, "delta_minutes", minutes)
        object.__setattr__(self, "delta_seconds", seconds)
        object.__setattr__(self, "delta_nanoseconds", nanoseconds)
        object.__setattr__(self, "end_of_month", end_of_month)

    @classmethod
    def _from_units(
        cls, units: Iterable[int], end_of_month: EndOfMonth | None
    ) -> Self:
        months, days, minutes, seconds, nanoseconds = units
        return cls(
            months=months,
            days=days,
            minutes=minutes,
            seconds=seconds,
            nanoseconds=nanoseconds,
            end_of_month=end_of_month,
        )

    def _units(self) -> tuple[int, int, int, int, int]:
        return (
            self.delta_months,
            self.delta_days,
            self.delta_minutes,
            self.delta_seconds,
            self.delta_nanoseconds,
        )

    def clone(self) -> Self:
        return self._from_units(self._units(), self.end_of_month)

    def deltas(self) -> dict[str, int]:
        """Return the stored units keyed by name, without decomposition."""
        return {
            "months": self.delta_months,
            "days": self.delta_days,
            "minutes": self.delta_minutes,
            "seconds": self.delta_seconds,
            "nanoseconds": self.delta_nanoseconds,
        }

    def in_units(self, *units: Unit) -> tuple[int, ...]:
        """Express the duration in the requested units, in the order given.

        Coarser units are carried out first (years from months, weeks from
        days, hours from minutes) regardless of request order, and each
        finer unit only reports its remainder. Requesting "seconds" together
        with "nanoseconds" yields disjoint values; "nanoseconds" alone
        re-expresses the whole seconds as well.

        Example:
            >>> Duration(months=14).in_units("years", "months")
            (1, 2)
            >>> Duration(seconds=2, nanoseconds=5).in_units("nanoseconds")
            (2000000005,)

        Raises:
            ValueError: If a unit name is not recognized
        """
        for unit in units:
            if unit not in _UNITS:
                valid = ", ".join(_UNITS)
                raise ValueError(f"Invalid unit: {unit!r}\nValid units: {valid}")

        requested = set(units)
        result: dict[str, int] = {}
        months, days, minutes, seconds = (
            self.delta_months,
            self.delta_days,
            self.delta_minutes,
            self.delta_seconds,
        )

        if "years" in requested:
            result["years"] = truncate_div(months, MONTHS_PER_YEAR)
            months -= result["years"] * MONTHS_PER_YEAR

        if "months" in requested:
            result["months"] = months

        if "weeks" in requested:
            result["weeks"] = truncate_div(days, DAYS_PER_WEEK)
            days -= result["weeks"] * DAYS_PER_WEEK

        if "days" in requested:
            result["days"] = days

        if "hours" in requested:
            result["hours"] = truncate_div(minutes, MINUTES_PER_HOUR)
            minutes -= result["hours"] * MINUTES_PER_HOUR

        if "minutes" in requested:
            result["minutes"] = minutes

        if "seconds" in requested:
            result["seconds"] = seconds
            seconds = 0

        if "nanoseconds" in requested:
            result["nanoseconds"] = (
                seconds * NANOSECONDS_PER_SECOND + self.delta_nanoseconds
            )

        return tuple(result[unit] for unit in units)

    def years(self) -> int:
        return abs(self.in_units("years")[0])

    def months(self) -> int:
        return abs(self.in_units("months", "years")[0])

    def weeks(self) -> int:
        return abs(self.in_units("weeks")[0])

    def days(self) -> int:
        return abs(self.in_units("days", "weeks")[0])

    def hours(self) -> int:
        return abs(self.in_units("hours")[0])

    def minutes(self) -> int:
        return abs(self.in_units("minutes", "hours")[0])

    def seconds(self) -> int:
        return abs(self.in_units("seconds")[0])

    def nanoseconds(self) -> int:
        return abs(self.in_units("nanoseconds", "seconds")[0])

    def _has_positive(self) -> bool:
        return any(unit > 0 for unit in self._units())

    def _has_negative(self) -> bool:
        return any(unit < 0 for unit in self._units())

    def is_zero(self) -> bool:
        return all(unit == 0 for unit in self._units())

    def is_positive(self) -> bool:
        """True if no unit is negative and at least one is positive."""
        return self._has_positive() and not self._has_negative()

    def is_negative(self) -> bool:
        """True if no unit is positive and at least one is negative."""
        return not self._has_positive() and self._has_negative()

    def end_of_month_mode(self) -> EndOfMonth:
        return self.end_of_month

    def is_wrap_mode(self) -> bool:
        return self.end_of_month == "wrap"

    def is_limit_mode(self) -> bool:
        return self.end_of_month == "limit"

    def is_preserve_mode(self) -> bool:
        return self.end_of_month == "preserve"

    def calendar_duration(self) -> Self:
        """Return only the calendar part (months, days) as a new duration."""
        return type(self)(
            months=self.delta_months,
            days=self.delta_days,
            end_of_month=self.end_of_month,
        )

    def clock_duration(self) -> Self:
        """Return only the clock part (minutes, seconds, nanoseconds)."""
        return type(self)(
            minutes=self.delta_minutes,
            seconds=self.delta_seconds,
            nanoseconds=self.delta_nanoseconds,
            end_of_month=self.end_of_month,
        )

    def inverse(self, *, end_of_month: EndOfMonth | None = None) -> Self:
        """Return a duration with every unit negated.

        The end-of-month mode is not carried over: it falls back to the
        default for the negated months unless given explicitly.
        """
        # avoid -0.0 for float units
        negated = (-unit if unit else unit for unit in self._units())
        return self._from_units(negated, end_of_month)

    def add_duration(self, other: "Duration") -> Self:
        """Return the unit-wise sum of two durations, keeping this mode."""
        summed = (a + b for a, b in zip(self._units(), other._units()))
        return self._from_units(summed, self.end_of_month)

    def add(self, **units: Any) -> Self:
        """Add a duration built from keyword units, e.g. ``d.add(days=1)``."""
        return self.add_duration(type(self)(**units))

    def subtract_duration(self, other: "Duration") -> Self:
        return self.add_duration(other.inverse())

    def subtract(self, **units: Any) -> Self:
        """Subtract a duration built from keyword units."""
        return self.subtract_duration(type(self)(**units))

    def multiply(self, factor: int) -> Self:
        scaled = (unit * factor for unit in self._units())
        return self._from_units(scaled, self.end_of_month)

    def __add__(self, other: object) -> Any:
        if isinstance(other, Duration):
            return self.add_duration(other)
        if isinstance(other, PointInTime):
            return other.add_duration(self)
        if isinstance(other, datetime):
            self._check_microsecond_precision(other)
            return DateTimePoint(other).add_duration(self).moment
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, other: object) -> Any:
        if isinstance(other, Duration):
            return self.subtract_duration(other)
        if isinstance(other, (PointInTime, datetime)):
            raise InvalidOperation(
                f"Cannot subtract a point in time from a Duration.\n"
                f"Got: Duration - {type(other).__name__}\n"
                f"Hint: Subtract the duration from the point instead:\n"
                f"  point - duration"
            )
        return NotImplemented

    def __rsub__(self, other: object) -> Any:
        if isinstance(other, datetime):
            self._check_microsecond_precision(other)
            backwards = self.inverse(end_of_month=self.end_of_month)
            return DateTimePoint(other).add_duration(backwards).moment
        return NotImplemented

    def _check_microsecond_precision(self, moment: datetime) -> None:
        """Reject offsets a datetime cannot hold without dropping nanoseconds.

        Raises:
            ValueError: If the duration has a sub-microsecond remainder
        """
        nanoseconds = self.delta_nanoseconds
        if is_sentinel(nanoseconds):
            return
        if not nanoseconds % NANOSECONDS_PER_MICROSECOND:
            return
        raise ValueError(
            f"Cannot apply {self} to a datetime without losing precision.\n"
            f"Got: {nanoseconds} nanoseconds, datetime resolution is 1 microsecond\n"
            f"Hint: Use a DateTimePoint, which keeps the nanosecond remainder:\n"
            f"  DateTimePoint({moment!r}) + duration"
        )

    def __mul__(self, other: object) -> Any:
        if isinstance(other, int):
            return self.multiply(other)
        return NotImplemented

    __rmul__ = __mul__

    def __neg__(self) -> Self:
        return self.inverse()

    def __lt__(self, other: object) -> bool:
        raise InvalidOperation(_NO_ORDERING)

    def __le__(self, other: object) -> bool:
        raise InvalidOperation(_NO_ORDERING)

    def __gt__(self, other: object) -> bool:
        raise InvalidOperation(_NO_ORDERING)

    def __ge__(self, other: object) -> bool:
        raise InvalidOperation(_NO_ORDERING)

    @override
    def __str__(self) -> str:
        """Human-friendly string, e.g. ``Duration(1y 2mo 3d 4h 5m 6.5s)``."""
        years, months, days, hours, minutes = self.in_units(
            "years", "months", "days", "hours", "minutes"
        )
        parts = [
            f"{value}{suffix}"
            for value, suffix in (
                (years, "y"),
                (months, "mo"),
                (days, "d"),
                (hours, "h"),
                (minutes, "m"),
            )
            if value
        ]
        seconds = _format_seconds(self.delta_seconds, self.delta_nanoseconds)
        if seconds or not parts:
            parts.append(seconds or "0s")
        return f"Duration({' '.join(parts)})"


def _format_seconds(seconds: int, nanoseconds: int) -> str:
    if is_sentinel(seconds) or is_sentinel(nanoseconds):
        parts = [
            f"{seconds}s" if seconds else "",
            f"{nanoseconds}ns" if nanoseconds else "",
        ]
        return " ".join(part for part in parts if part)
    if not nanoseconds:
        return f"{seconds}s" if seconds else ""
    sign = "-" if seconds < 0 or nanoseconds < 0 else ""
    fraction = f"{abs(nanoseconds):09d}".rstrip("0")
    return f"{sign}{abs(seconds)}.{fraction}s"


def _coerce_anchor(anchor: Any) -> PointInTime:
    """Wrap a datetime anchor in a DateTimePoint; pass points through.

    Raises:
        TypeError: If anchor is neither a PointInTime nor a datetime
    """
    if isinstance(anchor, PointInTime):
        return anchor
    if isinstance(anchor, datetime):
        return DateTimePoint(anchor)
    raise TypeError(
        f"compare() anchor must be a PointInTime or datetime.\n"
        f"Got {type(anchor).__name__!r}: {anchor!r}\n"
        f"Examples:\n"
        f"  compare(a, b, datetime(2025, 1, 31))\n"
        f"  compare(a, b, DateTimePoint.now(timezone.utc))"
    )


def compare(
    left: Duration, right: Duration, anchor: PointInTime | datetime
) -> Literal[-1, 0, 1]:
    """Order two durations by applying both to the same anchor point.

    Returns -1 if ``anchor + left`` is earlier than ``anchor + right``,
    1 if it is later and 0 if both land on the same point.

    Example:
        >>> jan = datetime(2025, 1, 1)
        >>> compare(Duration(months=1), Duration(days=30), jan)
        1
        >>> feb = datetime(2025, 2, 1)
        >>> compare(Duration(months=1), Duration(days=30), feb)
        -1
    """
    point = _coerce_anchor(anchor)
    return ordering(point.add_duration(left), point.add_duration(right))
