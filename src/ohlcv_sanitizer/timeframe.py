"""Candle timeframes and calendar-aware period boundary arithmetic.

A timeframe is written ``"<value><unit>[:<zone>]"``, e.g. ``"5m"``, ``"1D"`` or
``"4h:America/New_York"``. Unit codes are case sensitive: ``m`` is minutes and
``M`` is months.

Timestamps are always absolute Unix seconds. The timezone only decides where
boundaries fall: a daily candle in ``America/New_York`` opens at New York
midnight, not UTC midnight.
"""

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ohlcv_sanitizer.exceptions import TimeframeFormatError

DEFAULT_TIMEZONE = "UTC"


class TimeUnit(str, Enum):
    """Timeframe unit, valued by its single-character code."""

    MINUTE = "m"
    HOUR = "h"
    DAY = "D"
    WEEK = "W"
    MONTH = "M"
    YEAR = "Y"


# Fixed minutes per unit. Months and years are approximations (30 and 365
# days) used whenever no reference time is available.
_UNIT_MINUTES: dict[TimeUnit, int] = {
    TimeUnit.MINUTE: 1,
    TimeUnit.HOUR: 60,
    TimeUnit.DAY: 1440,
    TimeUnit.WEEK: 10080,
    TimeUnit.MONTH: 30 * 1440,
    TimeUnit.YEAR: 365 * 1440,
}

_UNIT_NAMES: dict[TimeUnit, str] = {
    TimeUnit.MINUTE: "minute",
    TimeUnit.HOUR: "hour",
    TimeUnit.DAY: "day",
    TimeUnit.WEEK: "week",
    TimeUnit.MONTH: "month",
    TimeUnit.YEAR: "year",
}

_CALENDAR_UNITS = (TimeUnit.MONTH, TimeUnit.YEAR)


@lru_cache(maxsize=64)
def _load_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
        raise TimeframeFormatError(f"unknown timezone: {name!r}") from e


def _add_months(dt: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length.

    The result is a new calendar date, so an ambiguous wall time resolves to
    the earlier instant.
    """
    total = dt.month - 1 + months
    year = dt.year + total // 12
    month = total % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day, fold=0)


@dataclass(frozen=True)
class Timeframe:
    """Candle period descriptor: ``value`` units aligned in ``timezone``.

    Attributes:
        value:    Number of units per candle (positive).
        unit:     The :class:`TimeUnit`; a unit code string is accepted too.
        timezone: IANA zone name used for boundary alignment.
    """

    value: int
    unit: TimeUnit
    timezone: str = DEFAULT_TIMEZONE

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TimeframeFormatError(f"timeframe value must be an integer, got {self.value!r}")
        if self.value <= 0:
            raise TimeframeFormatError(f"timeframe value must be positive, got {self.value}")
        if not isinstance(self.unit, TimeUnit):
            try:
                object.__setattr__(self, "unit", TimeUnit(self.unit))
            except ValueError as e:
                raise TimeframeFormatError(f"unknown timeframe unit: {self.unit!r}") from e
        _load_zone(self.timezone)

    @classmethod
    def parse(cls, text: str, default_timezone: str = DEFAULT_TIMEZONE) -> "Timeframe":
        """Parse ``"<value><unit>[:<zone>]"`` into a Timeframe.

        Raises:
            TimeframeFormatError: on a missing or unknown unit, unparseable
                digits, a non-positive value or an unknown timezone.
        """
        if not isinstance(text, str) or not text.strip():
            raise TimeframeFormatError(f"empty timeframe: {text!r}")

        body, sep, zone = text.strip().partition(":")
        if sep and not zone:
            raise TimeframeFormatError(f"missing timezone after ':' in {text!r}")
        if not body:
            raise TimeframeFormatError(f"missing timeframe value in {text!r}")

        unit_code, digits = body[-1], body[:-1]
        if unit_code.isdigit():
            raise TimeframeFormatError(f"missing timeframe unit in {text!r}")
        try:
            unit = TimeUnit(unit_code)
        except ValueError as e:
            raise TimeframeFormatError(f"unknown timeframe unit {unit_code!r} in {text!r}") from e

        if not (digits.isascii() and digits.isdigit()):
            raise TimeframeFormatError(f"invalid timeframe value {digits!r} in {text!r}")

        return cls(value=int(digits), unit=unit, timezone=zone or default_timezone)

    def __str__(self) -> str:
        return f"{self.value}{self.unit.value}:{self.timezone}"

    @property
    def tz(self) -> ZoneInfo:
        return _load_zone(self.timezone)

    @property
    def label(self) -> str:
        """Human-readable form, e.g. ``"5 minutes"`` or ``"1 hour"``."""
        name = _UNIT_NAMES[self.unit]
        return f"{self.value} {name}" + ("s" if self.value != 1 else "")

    # ──────────────────────────────────────────────
    # Period length
    # ──────────────────────────────────────────────

    def period_minutes(self, reference_time: int | None = None) -> int:
        """Return the candle length in minutes.

        Month and year timeframes are calendar exact when ``reference_time``
        is given: ``value`` months/years are added to the start of the
        reference's month/year and the elapsed minutes measured. Without a
        reference they use 30-day months and 365-day years.
        """
        if self.unit in _CALENDAR_UNITS and reference_time is not None:
            start = self._local_floor(self._localize(reference_time))
            end = _add_months(start, self._calendar_months())
            return (self._to_unix(end) - self._to_unix(start)) // 60

        multiplier = _UNIT_MINUTES.get(self.unit)
        if multiplier is None:
            raise TimeframeFormatError(f"unknown timeframe unit: {self.unit!r}")
        return multiplier * self.value

    def period_seconds(self, reference_time: int | None = None) -> int:
        return self.period_minutes(reference_time) * 60

    # ──────────────────────────────────────────────
    # Boundary alignment
    # ──────────────────────────────────────────────

    def last_open(self, t: int) -> int:
        """Floor ``t`` to the most recent candle boundary (inclusive)."""
        return self._to_unix(self._local_floor(self._localize(t)))

    def next_open(self, t: int) -> int:
        """Return ``t`` if it is a boundary, otherwise the next boundary after it."""
        last = self.last_open(t)
        if t == last:
            return t
        if self.unit in _CALENDAR_UNITS:
            return self._to_unix(_add_months(self._localize(last), self._calendar_months()))
        return last + self.period_minutes() * 60

    def close_time(self, t: int) -> int:
        return self.next_open(self.last_open(t))

    def is_valid_open_time(self, t: int) -> bool:
        """True iff ``t`` falls exactly on a candle boundary."""
        return self.last_open(t) == t

    # ──────────────────────────────────────────────
    # Internal helpers
    # ──────────────────────────────────────────────

    def _calendar_months(self) -> int:
        return self.value * 12 if self.unit == TimeUnit.YEAR else self.value

    def _localize(self, t: int) -> datetime:
        return datetime.fromtimestamp(t, tz=self.tz)

    def _to_unix(self, local: datetime) -> int:
        return int(local.timestamp())

    def _local_floor(self, local: datetime) -> datetime:
        # Day and coarser starts are new wall dates and take the earlier
        # instant when ambiguous. Intraday buckets keep the fold of ``local``
        # so a time in the repeated fall-back hour floors within that pass.
        midnight = local.replace(hour=0, minute=0, second=0, microsecond=0, fold=0)

        if self.unit == TimeUnit.MINUTE:
            minute_of_day = local.hour * 60 + local.minute
            floored = minute_of_day - minute_of_day % self.value
            return midnight.replace(hour=floored // 60, minute=floored % 60, fold=local.fold)
        if self.unit == TimeUnit.HOUR:
            return midnight.replace(hour=local.hour - local.hour % self.value, fold=local.fold)
        if self.unit == TimeUnit.DAY:
            return midnight
        if self.unit == TimeUnit.WEEK:
            return midnight - timedelta(days=local.weekday())
        if self.unit == TimeUnit.MONTH:
            return midnight.replace(day=1)
        return midnight.replace(month=1, day=1)


def parse(text: str, default_timezone: str = DEFAULT_TIMEZONE) -> Timeframe:
    """Module-level alias for :meth:`Timeframe.parse`."""
    return Timeframe.parse(text, default_timezone=default_timezone)


# Timeframes most exchanges support.
COMMON_TIMEFRAMES: tuple[Timeframe, ...] = (
    Timeframe(1, TimeUnit.MINUTE),
    Timeframe(5, TimeUnit.MINUTE),
    Timeframe(15, TimeUnit.MINUTE),
    Timeframe(30, TimeUnit.MINUTE),
    Timeframe(1, TimeUnit.HOUR),
    Timeframe(4, TimeUnit.HOUR),
    Timeframe(1, TimeUnit.DAY),
)
