import pytest
from flash_cron.exceptions import (
    FieldOutOfRangeError,
    MalformedExpressionError,
    MalformedRangeError,
)
from flash_cron.fields import (
    FIELD_CONSTRAINTS,
    FIELD_ORDER,
    FieldKind,
    FieldSpec,
    parse_field,
    split_expression,
)


@pytest.mark.parametrize("kind", FIELD_ORDER)
def test_star_matches_every_legal_value(kind):
    """'*' sets exactly the bits of the field's legal range."""
    constraints = FIELD_CONSTRAINTS[kind]
    spec = parse_field("*", kind)

    assert spec.values == tuple(range(constraints.min_value, constraints.max_value + 1))
    assert spec.is_full
    assert spec == FieldSpec.full(kind)


@pytest.mark.parametrize(
    ("kind", "items"),
    [
        (FieldKind.SECOND, ["0", "15", "59"]),
        (FieldKind.HOUR, ["1", "5-7", "20"]),
        (FieldKind.DAY_OF_MONTH, ["1", "15", "31"]),
        (FieldKind.MONTH, ["JAN", "6", "dec"]),
        (FieldKind.DAY_OF_WEEK, ["MON", "3", "7"]),
    ],
)
def test_list_is_union_of_its_items(kind, items):
    """'a,b,c' compiles to the union of 'a', 'b' and 'c'."""
    combined = parse_field(",".join(items), kind)

    union = 0
    for item in items:
        union |= parse_field(item, kind).bits

    assert combined.bits == union


def test_single_value_and_range():
    assert parse_field("5", FieldKind.MINUTE).values == (5,)
    assert parse_field("10-15", FieldKind.SECOND).values == (10, 11, 12, 13, 14, 15)


def test_step_from_star():
    """'*/15' starts at the field minimum."""
    assert parse_field("*/15", FieldKind.MINUTE).values == (0, 15, 30, 45)
    assert parse_field("*/10", FieldKind.DAY_OF_MONTH).values == (1, 11, 21, 31)


def test_step_from_value_runs_to_field_maximum():
    """'30/10' means 30, 40, 50."""
    assert parse_field("30/10", FieldKind.SECOND).values == (30, 40, 50)
    assert parse_field("1/3", FieldKind.MONTH).values == (1, 4, 7, 10)


def test_step_over_range():
    """'1-6/2' means 1, 3, 5."""
    assert parse_field("1-6/2", FieldKind.SECOND).values == (1, 3, 5)
    assert parse_field("0-10/5", FieldKind.SECOND).values == (0, 5, 10)


def test_step_larger_than_range_keeps_start():
    assert parse_field("30-40/100", FieldKind.MINUTE).values == (30,)


def test_names_are_case_insensitive():
    assert parse_field("Feb", FieldKind.MONTH) == parse_field("2", FieldKind.MONTH)
    assert parse_field("mon-fri", FieldKind.DAY_OF_WEEK).values == (1, 2, 3, 4, 5)
    assert parse_field("JAN-MAR", FieldKind.MONTH).values == (1, 2, 3)


def test_seven_is_sunday():
    """Day of week 7 folds into 0."""
    assert parse_field("7", FieldKind.DAY_OF_WEEK).values == (0,)
    assert parse_field("5-7", FieldKind.DAY_OF_WEEK).values == (0, 5, 6)
    assert parse_field("SUN", FieldKind.DAY_OF_WEEK) == parse_field("0", FieldKind.DAY_OF_WEEK)


def test_day_of_week_star_step():
    assert parse_field("*/2", FieldKind.DAY_OF_WEEK).values == (0, 2, 4, 6)


def test_question_mark_means_any_day():
    assert parse_field("?", FieldKind.DAY_OF_MONTH).is_full
    assert parse_field("?", FieldKind.DAY_OF_WEEK).is_full


def test_question_mark_rejected_outside_day_fields():
    with pytest.raises(MalformedExpressionError, match="not supported"):
        parse_field("?", FieldKind.SECOND)


@pytest.mark.parametrize(
    ("text", "kind", "value"),
    [
        ("77", FieldKind.SECOND, 77),
        ("44-77", FieldKind.SECOND, 77),
        ("77", FieldKind.MINUTE, 77),
        ("27", FieldKind.HOUR, 27),
        ("23-28", FieldKind.HOUR, 28),
        ("45", FieldKind.DAY_OF_MONTH, 45),
        ("0", FieldKind.DAY_OF_MONTH, 0),
        ("32", FieldKind.DAY_OF_MONTH, 32),
        ("13", FieldKind.MONTH, 13),
        ("0", FieldKind.MONTH, 0),
        ("11-13", FieldKind.MONTH, 13),
        ("8", FieldKind.DAY_OF_WEEK, 8),
    ],
)
def test_out_of_range_values(text, kind, value):
    with pytest.raises(FieldOutOfRangeError, match="out of range") as exc:
        parse_field(text, kind)

    assert exc.value.field == kind.value
    assert exc.value.value == value


def test_reversed_range_rejected():
    with pytest.raises(MalformedRangeError, match="greater than"):
        parse_field("15-10", FieldKind.SECOND)


@pytest.mark.parametrize("text", ["*/0", "5/0", "1-10/-2"])
def test_non_positive_step_rejected(text):
    with pytest.raises(MalformedRangeError, match="Step must be positive"):
        parse_field(text, FieldKind.MINUTE)


@pytest.mark.parametrize("text", ["", "1,,2", "abc", "1-2-3", "1/2/3", "/5", "*/x", "-5", "1.5"])
def test_malformed_tokens_rejected(text):
    with pytest.raises(MalformedExpressionError):
        parse_field(text, FieldKind.MINUTE)


def test_unknown_name_rejected():
    with pytest.raises(MalformedExpressionError, match="Invalid value 'FOO'"):
        parse_field("FOO", FieldKind.MONTH)


def test_errors_carry_expression():
    with pytest.raises(FieldOutOfRangeError) as exc:
        parse_field("99", FieldKind.SECOND, "99 * * * * *")
    assert exc.value.expression == "99 * * * * *"


def test_next_value_and_first_value():
    spec = parse_field("0,15,30,45", FieldKind.MINUTE)

    assert spec.first_value() == 0
    assert spec.next_value(0) == 0
    assert spec.next_value(16) == 30
    assert spec.next_value(45) == 45
    assert spec.next_value(46) is None


def test_contains():
    spec = parse_field("MON-FRI", FieldKind.DAY_OF_WEEK)

    assert spec.contains(1)
    assert spec.contains(5)
    assert not spec.contains(0)
    assert not spec.contains(6)
    assert not spec.is_full


def test_empty_field_spec_rejected():
    with pytest.raises(MalformedExpressionError, match="matches no values"):
        FieldSpec(FieldKind.HOUR, 0)


def test_from_values_and_repr():
    spec = FieldSpec.from_values(FieldKind.HOUR, [9, 12])

    assert spec == parse_field("9,12", FieldKind.HOUR)
    assert repr(spec) == "FieldSpec(HOUR, [9, 12])"


def test_split_expression_collapses_whitespace():
    assert split_expression("  *  *  * *  1 *  ") == ["*", "*", "*", "*", "1", "*"]


@pytest.mark.parametrize("text", ["* * * * *", "* * * * * * *", "", "Too few fields"])
def test_split_expression_wrong_field_count(text):
    with pytest.raises(MalformedExpressionError, match="Expected 6 fields"):
        split_expression(text)
