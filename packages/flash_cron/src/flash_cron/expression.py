"""Parsed cron expressions.

A ``CronExpression`` binds six compiled fields to a time zone. It is
immutable and can be shared freely between threads; every call to
``next_execution_time`` works on its own calendar cursor.

Example:
    >>> expr = CronExpression("0 0 7 ? * MON-FRI", "Europe/Berlin")
    >>> expr.next_execution_time(datetime(2009, 9, 26, tzinfo=timezone.utc))
    datetime.datetime(2009, 9, 28, 5, 0, tzinfo=datetime.timezone.utc)
"""

from __future__ import annotations

import re
import zoneinfo
from datetime import date, datetime, timedelta, timezone, tzinfo

from . import calculator
from .config import cron_settings
from .exceptions import CronError
from .fields import FIELD_ORDER, FieldKind, FieldSpec, parse_field, split_expression
from .logging import get_logger

logger = get_logger(__name__)

# Longest possible length of each month; February counts its leap day.
MAX_DAYS_IN_MONTH: dict[int, int] = {
    1: 31, 2: 29, 3: 31, 4: 30, 5: 31, 6: 30,
    7: 31, 8: 31, 9: 30, 10: 31, 11: 30, 12: 31,
}

# Fixed offsets are named like str(timezone(...)): UTC+02:00, UTC-09:30.
_FIXED_OFFSET = re.compile(r"UTC([+-])(\d{2}):(\d{2})(?::(\d{2}))?")


def _fixed_offset(name: str) -> timezone | None:
    match = _FIXED_OFFSET.fullmatch(name)
    if match is None:
        return None
    sign, hours, minutes, seconds = match.groups()
    offset = timedelta(hours=int(hours), minutes=int(minutes), seconds=int(seconds or 0))
    try:
        return timezone(-offset if sign == "-" else offset)
    except ValueError as e:
        msg = f"Invalid timezone offset: {name}"
        raise CronError(msg) from e


def resolve_timezone(tz: tzinfo | str | None) -> tzinfo:
    """Returns a tzinfo for a zone object, a zone name, or None (the configured default).

    Names are IANA keys (``Europe/Berlin``) or fixed offsets (``UTC+02:00``).
    """
    if tz is None:
        return cron_settings.default_timezone()
    if isinstance(tz, tzinfo):
        return tz
    if isinstance(tz, str):
        fixed = _fixed_offset(tz)
        if fixed is not None:
            return fixed
        try:
            return zoneinfo.ZoneInfo(tz)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError) as z:
            msg = f"Invalid timezone name: {tz}"
            raise CronError(msg) from z
    msg = f"Invalid timezone type: {type(tz).__name__}"
    raise CronError(msg)


def timezone_name(tz: tzinfo) -> str:
    """Name ``resolve_timezone`` reads back: the IANA key, or ``UTC±HH:MM`` for fixed offsets.

    Other tzinfo implementations fall back to ``str()``.
    """
    key = getattr(tz, "key", None)
    if key:
        return key
    if isinstance(tz, timezone):
        offset = tz.utcoffset(None)
        if not offset:
            return "UTC"
        sign = "-" if offset < timedelta(0) else "+"
        hours, rest = divmod(abs(int(offset.total_seconds())), 3600)
        minutes, seconds = divmod(rest, 60)
        name = f"UTC{sign}{hours:02d}:{minutes:02d}"
        return f"{name}:{seconds:02d}" if seconds else name
    return str(tz)


class CronExpression:
    """Six-field cron expression: second minute hour day-of-month month day-of-week.

    Two expressions are equal when their compiled fields are equal, so
    ``"57,59 * * * * *"`` equals ``"57/2 * * * * *"``. The time zone and the
    source text do not take part in equality.

    Args:
        expression: The cron text. Extra whitespace between fields is ignored.
        tz: Zone the fields are evaluated in. A tzinfo, an IANA name, or None
            for ``CRON_DEFAULT_TIMEZONE``.

    Raises:
        CronError: If the expression or the zone is invalid.
    """

    __slots__ = ("_expression", "_tz", "_fields", "_satisfiable")

    def __init__(self, expression: str, tz: tzinfo | str | None = None) -> None:
        parts = split_expression(expression)
        self._expression = " ".join(parts)
        self._tz = resolve_timezone(tz)
        self._fields: tuple[FieldSpec, ...] = tuple(
            parse_field(part, kind, self._expression)
            for part, kind in zip(parts, FIELD_ORDER)
        )
        self._satisfiable = self._check_satisfiable()

        logger.debug(
            "Parsed cron expression %r in %s", self._expression, timezone_name(self._tz)
        )

    def _check_satisfiable(self) -> bool:
        """Detects day-of-month values that no allowed month is long enough for."""
        if not self.days_of_week.is_full:
            # Any restricted weekday occurs in every month.
            return True
        longest = max(MAX_DAYS_IN_MONTH[m] for m in self.months.values)
        return self.days_of_month.first_value() <= longest

    @property
    def expression(self) -> str:
        return self._expression

    @property
    def tz(self) -> tzinfo:
        return self._tz

    @property
    def fields(self) -> tuple[FieldSpec, ...]:
        return self._fields

    @property
    def seconds(self) -> FieldSpec:
        return self._fields[0]

    @property
    def minutes(self) -> FieldSpec:
        return self._fields[1]

    @property
    def hours(self) -> FieldSpec:
        return self._fields[2]

    @property
    def days_of_month(self) -> FieldSpec:
        return self._fields[3]

    @property
    def months(self) -> FieldSpec:
        return self._fields[4]

    @property
    def days_of_week(self) -> FieldSpec:
        return self._fields[5]

    @property
    def is_satisfiable(self) -> bool:
        """False when the day and month fields can never line up."""
        return self._satisfiable

    def field(self, kind: FieldKind) -> FieldSpec:
        return self._fields[FIELD_ORDER.index(kind)]

    def day_matches(self, day: date) -> bool:
        """Checks a calendar day against the day-of-month and day-of-week fields.

        When only one of the two is restricted, it alone decides. When both
        are restricted, matching either is enough.
        """
        dom = self.days_of_month
        dow = self.days_of_week
        # Python 0=Mon -> Cron 0=Sun
        cron_weekday = (day.weekday() + 1) % 7

        if dow.is_full:
            return dom.contains(day.day)
        if dom.is_full:
            return dow.contains(cron_weekday)
        return dom.contains(day.day) or dow.contains(cron_weekday)

    def matches(self, dt: datetime) -> bool:
        """Checks whether a datetime satisfies every field.

        Aware datetimes are converted into the expression's zone first; naive
        ones are taken as wall-clock time in that zone.
        """
        if dt.tzinfo is not None:
            dt = dt.astimezone(self._tz)
        return (
            self.seconds.contains(dt.second)
            and self.minutes.contains(dt.minute)
            and self.hours.contains(dt.hour)
            and self.months.contains(dt.month)
            and self.day_matches(dt.date())
        )

    def next_execution_time(
        self, reference: datetime, *, horizon_years: int | None = None
    ) -> datetime:
        """Earliest matching instant strictly after ``reference``, in UTC.

        Raises:
            UnsatisfiableError: If nothing matches within the search horizon.
        """
        return calculator.next_execution_time(self, reference, horizon_years=horizon_years)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CronExpression):
            return self._fields == other._fields
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._fields)

    def __str__(self) -> str:
        return self._expression

    def __repr__(self) -> str:
        return f"CronExpression({self._expression!r}, tz={timezone_name(self._tz)!r})"


def is_valid_expression(expression: str) -> bool:
    """Check if a cron expression parses.

    Args:
        expression: Cron expression to check.

    Returns:
        True if valid.
    """
    try:
        CronExpression(expression, timezone.utc)
    except CronError:
        return False
    return True
