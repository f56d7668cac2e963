"""Cron field parsing.

Each of the six positional fields of an expression is compiled into a
``FieldSpec``: an integer bit set where bit ``v`` is set when value ``v``
matches. Bit sets make membership and "next value at or above x" queries
cheap, and two fields written differently but matching the same values
compare equal.

Supported syntax per field:
    - ``*`` (every legal value), ``?`` (same as ``*``, day fields only)
    - single values: ``5``, ``MON``, ``jan``
    - ranges: ``10-15``, ``MON-FRI``
    - steps: ``*/15``, ``5/10`` (from 5 up to the field maximum), ``1-6/2``
    - comma separated lists of any of the above
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .exceptions import (
    FieldOutOfRangeError,
    MalformedExpressionError,
    MalformedRangeError,
)


class FieldKind(Enum):
    """The six positional cron fields."""

    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY_OF_MONTH = "day of month"
    MONTH = "month"
    DAY_OF_WEEK = "day of week"


@dataclass(frozen=True)
class FieldConstraints:
    """Legal values and syntax options for a cron field."""

    min_value: int
    max_value: int
    names: dict[str, int] = field(default_factory=dict)
    supports_question: bool = False
    # Highest value accepted while parsing. Day of week takes 7 as Sunday.
    parse_max: int | None = None

    @property
    def upper(self) -> int:
        return self.max_value if self.parse_max is None else self.parse_max


FIELD_CONSTRAINTS: dict[FieldKind, FieldConstraints] = {
    FieldKind.SECOND: FieldConstraints(0, 59),
    FieldKind.MINUTE: FieldConstraints(0, 59),
    FieldKind.HOUR: FieldConstraints(0, 23),
    FieldKind.DAY_OF_MONTH: FieldConstraints(1, 31, supports_question=True),
    FieldKind.MONTH: FieldConstraints(
        1, 12,
        names={
            "JAN": 1, "FEB": 2, "MAR": 3, "APR": 4,
            "MAY": 5, "JUN": 6, "JUL": 7, "AUG": 8,
            "SEP": 9, "OCT": 10, "NOV": 11, "DEC": 12,
        },
    ),
    FieldKind.DAY_OF_WEEK: FieldConstraints(
        0, 6,
        names={
            "SUN": 0, "MON": 1, "TUE": 2, "WED": 3,
            "THU": 4, "FRI": 5, "SAT": 6,
        },
        supports_question=True,
        parse_max=7,
    ),
}

# Positional order of the fields in an expression.
FIELD_ORDER: tuple[FieldKind, ...] = (
    FieldKind.SECOND,
    FieldKind.MINUTE,
    FieldKind.HOUR,
    FieldKind.DAY_OF_MONTH,
    FieldKind.MONTH,
    FieldKind.DAY_OF_WEEK,
)


def _span_bits(start: int, end: int) -> int:
    """Bit set with every bit from start to end (inclusive) set."""
    return ((1 << (end - start + 1)) - 1) << start


@dataclass(frozen=True)
class FieldSpec:
    """Immutable set of matching values for one cron field.

    Attributes:
        kind: Which field this is.
        bits: Bit ``v`` is set when value ``v`` matches.
    """

    kind: FieldKind
    bits: int

    def __post_init__(self) -> None:
        if not self.bits:
            msg = f"The {self.kind.value} field matches no values"
            raise MalformedExpressionError(msg)

    @classmethod
    def from_values(cls, kind: FieldKind, values: list[int] | set[int] | range) -> FieldSpec:
        bits = 0
        for value in values:
            bits |= 1 << value
        return cls(kind, bits)

    @classmethod
    def full(cls, kind: FieldKind) -> FieldSpec:
        constraints = FIELD_CONSTRAINTS[kind]
        return cls(kind, _span_bits(constraints.min_value, constraints.max_value))

    @property
    def constraints(self) -> FieldConstraints:
        return FIELD_CONSTRAINTS[self.kind]

    @property
    def is_full(self) -> bool:
        """True if every legal value of the field matches."""
        c = self.constraints
        return self.bits == _span_bits(c.min_value, c.max_value)

    @property
    def values(self) -> tuple[int, ...]:
        c = self.constraints
        return tuple(v for v in range(c.min_value, c.max_value + 1) if self.contains(v))

    def contains(self, value: int) -> bool:
        return value >= 0 and bool((self.bits >> value) & 1)

    def next_value(self, value: int) -> int | None:
        """Smallest matching value at or above ``value``, or None if there is none."""
        value = max(value, 0)
        remaining = self.bits >> value
        if not remaining:
            return None
        return value + (remaining & -remaining).bit_length() - 1

    def first_value(self) -> int:
        return (self.bits & -self.bits).bit_length() - 1

    def __repr__(self) -> str:
        return f"FieldSpec({self.kind.name}, {list(self.values)})"


def split_expression(expression: str) -> list[str]:
    """Splits an expression into its six fields, collapsing any whitespace."""
    parts = expression.split()
    if len(parts) != len(FIELD_ORDER):
        msg = (
            f"Invalid cron expression: '{expression}'. "
            f"Expected {len(FIELD_ORDER)} fields, got {len(parts)}."
        )
        raise MalformedExpressionError(msg, expression)
    return parts


def parse_field(text: str, kind: FieldKind, expression: str = "") -> FieldSpec:
    """Parses a single cron field (e.g. '*/15', '1,5', 'MON-FRI') into a FieldSpec.

    Args:
        text: The field text.
        kind: Which field is being parsed.
        expression: The full expression, attached to raised errors.

    Raises:
        MalformedExpressionError: On invalid syntax.
        MalformedRangeError: On a reversed range or non-positive step.
        FieldOutOfRangeError: On a value outside the field's legal range.
    """
    parser = _FieldParser(kind, expression or text)
    bits = 0
    for token in text.split(","):
        for value in parser.parse_token(token):
            bits |= 1 << value

    if kind is FieldKind.DAY_OF_WEEK and bits & (1 << 7):
        # 7 is an alias for Sunday.
        bits = (bits & ~(1 << 7)) | 1

    return FieldSpec(kind, bits)


class _FieldParser:
    """Resolves the tokens of one field against its constraints."""

    def __init__(self, kind: FieldKind, expression: str) -> None:
        self.kind = kind
        self.constraints = FIELD_CONSTRAINTS[kind]
        self.expression = expression

    def parse_token(self, token: str) -> range | tuple[int, ...]:
        if not token:
            msg = f"Empty value in {self.kind.value} field"
            raise MalformedExpressionError(msg, self.expression)

        if token == "?":
            if not self.constraints.supports_question:
                msg = f"'?' is not supported in the {self.kind.value} field"
                raise MalformedExpressionError(msg, self.expression)
            token = "*"

        if "/" in token:
            return self._parse_step(token)
        if token == "*":
            return range(self.constraints.min_value, self.constraints.max_value + 1)
        if "-" in token:
            start, end = self._parse_range(token)
            return range(start, end + 1)
        return (self._resolve_value(token),)

    def _parse_step(self, token: str) -> range:
        """Parses 'base/n' where base is '*', 'a' or 'a-b'."""
        base, _, step_text = token.partition("/")
        if not base or "/" in step_text:
            msg = f"Invalid step '{token}' in {self.kind.value} field"
            raise MalformedExpressionError(msg, self.expression)

        try:
            step = int(step_text)
        except ValueError:
            msg = f"Invalid step '{token}' in {self.kind.value} field"
            raise MalformedExpressionError(msg, self.expression) from None
        if step <= 0:
            msg = f"Step must be positive, got {step} in {self.kind.value} field"
            raise MalformedRangeError(msg, self.expression)

        if base == "*":
            start, end = self.constraints.min_value, self.constraints.upper
        elif "-" in base:
            start, end = self._parse_range(base)
        else:
            start = self._resolve_value(base)
            end = self.constraints.upper

        return range(start, end + 1, step)

    def _parse_range(self, token: str) -> tuple[int, int]:
        parts = token.split("-")
        if len(parts) != 2:
            msg = f"Invalid range '{token}' in {self.kind.value} field"
            raise MalformedExpressionError(msg, self.expression)

        start = self._resolve_value(parts[0])
        end = self._resolve_value(parts[1])
        if start > end:
            msg = (
                f"Invalid range '{token}' in {self.kind.value} field: "
                f"{start} is greater than {end}"
            )
            raise MalformedRangeError(msg, self.expression)
        return start, end

    def _resolve_value(self, text: str) -> int:
        """Resolves a number or name to an integer within the legal range."""
        name = text.upper()
        if name in self.constraints.names:
            return self.constraints.names[name]

        if not (text.isascii() and text.isdigit()):
            msg = f"Invalid value '{text}' in {self.kind.value} field"
            raise MalformedExpressionError(msg, self.expression)

        value = int(text)
        if value < self.constraints.min_value or value > self.constraints.upper:
            msg = (
                f"Value {value} out of range "
                f"[{self.constraints.min_value}, {self.constraints.upper}] "
                f"for {self.kind.value} field"
            )
            raise FieldOutOfRangeError(msg, self.kind.value, value, self.expression)
        return value
