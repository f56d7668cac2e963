"""Next-execution calculation for cron expressions.

The search runs on a wall-clock cursor in the expression's time zone. Fields
are checked in the order second, minute, hour, day, month. The first field
that does not match is moved to its next allowed value, or wrapped to its
first allowed value with a carry into the next coarser field. Every finer
field is reset to its minimum and the scan restarts from seconds. When a
full pass changes nothing, the cursor is converted to an instant.

Only at that point is the time zone consulted:
    - A wall-clock time inside a daylight-saving gap does not exist. It is
      shifted forward by the gap (02:10 becomes 03:10) and scanned again, so
      ``0 10 2 * * *`` skips to 02:10 the next day while ``0 10 * * * *``
      fires at 03:10.
    - A wall-clock time repeated by a fall-back transition resolves to its
      first occurrence, or to the second if the first is not after the
      reference.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import TYPE_CHECKING

from .config import cron_settings
from .exceptions import UnsatisfiableError
from .fields import FieldKind
from .logging import get_logger

if TYPE_CHECKING:
    from .expression import CronExpression

logger = get_logger(__name__)

_TIME_FIELDS: tuple[FieldKind, ...] = (
    FieldKind.SECOND,
    FieldKind.MINUTE,
    FieldKind.HOUR,
)


class _Cursor:
    """Mutable wall-clock position used by a single search.

    Holds a naive datetime so that arithmetic happens in calendar fields,
    never in absolute time. One cursor per call; it is discarded afterwards.
    """

    __slots__ = ("moment",)

    def __init__(self, moment: datetime) -> None:
        self.moment = moment

    def get(self, kind: FieldKind) -> int:
        if kind is FieldKind.SECOND:
            return self.moment.second
        if kind is FieldKind.MINUTE:
            return self.moment.minute
        if kind is FieldKind.HOUR:
            return self.moment.hour
        if kind is FieldKind.MONTH:
            return self.moment.month
        msg = f"Cursor has no single value for the {kind.value} field"
        raise ValueError(msg)

    def advance(self, kind: FieldKind, value: int) -> None:
        """Moves a field forward to ``value``, resetting every finer field."""
        m = self.moment
        if kind is FieldKind.SECOND:
            self.moment = m.replace(second=value)
        elif kind is FieldKind.MINUTE:
            self.moment = m.replace(minute=value, second=0)
        elif kind is FieldKind.HOUR:
            self.moment = m.replace(hour=value, minute=0, second=0)
        elif kind is FieldKind.MONTH:
            self.moment = m.replace(month=value, day=1, hour=0, minute=0, second=0)
        else:
            msg = f"Cannot advance the {kind.value} field directly"
            raise ValueError(msg)

    def carry(self, kind: FieldKind, first: int) -> None:
        """Wraps a field to ``first`` and adds one unit to the next coarser field."""
        m = self.moment
        if kind is FieldKind.SECOND:
            self.moment = m.replace(second=first) + timedelta(minutes=1)
        elif kind is FieldKind.MINUTE:
            self.moment = m.replace(minute=first, second=0) + timedelta(hours=1)
        elif kind is FieldKind.HOUR:
            self.moment = m.replace(hour=first, minute=0, second=0) + timedelta(days=1)
        elif kind is FieldKind.MONTH:
            self.moment = datetime(m.year + 1, first, 1)
        else:
            msg = f"Cannot carry the {kind.value} field directly"
            raise ValueError(msg)

    def next_day(self) -> None:
        """Moves to midnight of the following calendar day."""
        self.moment = self.moment.replace(hour=0, minute=0, second=0) + timedelta(days=1)


def _roll(expression: CronExpression, cursor: _Cursor) -> bool:
    """Runs one second-to-month pass. Returns True if the cursor moved."""
    for kind in _TIME_FIELDS:
        spec = expression.field(kind)
        current = cursor.get(kind)
        value = spec.next_value(current)
        if value == current:
            continue
        if value is None:
            cursor.carry(kind, spec.first_value())
        else:
            cursor.advance(kind, value)
        return True

    # The calendar knows the month lengths, so stepping one day at a time
    # never produces a day that does not exist.
    if not expression.day_matches(cursor.moment.date()):
        cursor.next_day()
        return True

    months = expression.months
    current = cursor.get(FieldKind.MONTH)
    value = months.next_value(current)
    if value == current:
        return False
    if value is None:
        cursor.carry(FieldKind.MONTH, months.first_value())
    else:
        cursor.advance(FieldKind.MONTH, value)
    return True


def _wall_clock(instant: datetime, tz: tzinfo) -> datetime:
    return instant.astimezone(tz).replace(tzinfo=None, fold=0)


def next_execution_time(
    expression: CronExpression,
    reference: datetime,
    *,
    horizon_years: int | None = None,
) -> datetime:
    """Finds the earliest instant strictly after ``reference`` matching ``expression``.

    Args:
        expression: The parsed cron expression.
        reference: Timezone-aware point to search after. Sub-second parts are
            dropped and the search starts one second later.
        horizon_years: Years to search before giving up. Defaults to
            ``CRON_SEARCH_HORIZON_YEARS``.

    Returns:
        The matching instant as an aware UTC datetime.

    Raises:
        ValueError: If ``reference`` is naive.
        UnsatisfiableError: If no match exists within the horizon.
    """
    if reference.tzinfo is None:
        msg = "reference must be timezone-aware"
        raise ValueError(msg)

    if not expression.is_satisfiable:
        msg = (
            f"Cron expression '{expression}' can never match: "
            "no allowed month has the requested day"
        )
        logger.warning(msg)
        raise UnsatisfiableError(msg, expression.expression)

    if horizon_years is None:
        horizon_years = cron_settings.CRON_SEARCH_HORIZON_YEARS

    tz = expression.tz
    reference_utc = reference.astimezone(timezone.utc)
    start = reference_utc.replace(microsecond=0) + timedelta(seconds=1)

    cursor = _Cursor(_wall_clock(start, tz))
    last_year = cursor.moment.year + horizon_years

    while True:
        if cursor.moment.year > last_year:
            msg = (
                f"Cron expression '{expression}' has no match within "
                f"{horizon_years} years after {reference_utc.isoformat()}"
            )
            logger.warning(msg)
            raise UnsatisfiableError(msg, expression.expression)

        if _roll(expression, cursor):
            continue

        candidate = cursor.moment.replace(tzinfo=tz).astimezone(timezone.utc)
        shifted = _wall_clock(candidate, tz)
        if shifted != cursor.moment:
            # Skipped by a spring-forward transition.
            cursor.moment = shifted
            continue

        if candidate <= reference_utc:
            # Repeated by a fall-back transition; take the later occurrence.
            candidate = cursor.moment.replace(tzinfo=tz, fold=1).astimezone(timezone.utc)
            if candidate <= reference_utc:
                cursor.moment += timedelta(seconds=1)
                continue

        logger.debug(
            "Next execution of '%s' after %s is %s",
            expression,
            reference_utc.isoformat(),
            candidate.isoformat(),
        )
        return candidate
