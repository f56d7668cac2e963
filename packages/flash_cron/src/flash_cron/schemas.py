"""Pydantic schemas/data contracts for cron triggers."""

from datetime import datetime, timezone, tzinfo
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    field_serializer,
    field_validator,
)

from .expression import CronExpression, resolve_timezone, timezone_name


def validate_timezone(v: Any) -> Any:
    """Ensure the value is a tzinfo, or a name that resolves to one."""
    if isinstance(v, (tzinfo, str)):
        return resolve_timezone(v)
    msg = f"Invalid timezone type: {type(v).__name__}"
    raise ValueError(msg)


# Annotated type to handle timezone validation explicitly.
# We use Any here because Pydantic V2 cannot generate a core schema for the
# datetime.timezone class specifically. The BeforeValidator handles the actual
# type enforcement and conversion.
TzType = Annotated[Any, BeforeValidator(validate_timezone)]


class CronTriggerConfig(BaseModel):
    """Configuration for cron-based triggers.

    Expressions have six fields: second minute hour day month day_of_week

    Aliases:
        - Days: SUN, MON, TUE, WED, THU, FRI, SAT (7 is also Sunday)
        - Months: JAN, FEB, MAR, APR, MAY, JUN, JUL, AUG, SEP, OCT, NOV, DEC

    Examples:
        - "0 */15 * * * *" - Every 15 minutes at :00
        - "30 0 9 * * MON-FRI" - 9:00:30 AM weekdays
        - "0 0 0 1 JAN,JUL ?" - Midnight on the first day of January and July

    A missing tz falls back to CRON_DEFAULT_TIMEZONE.
    """

    trigger_type: Literal["cron"] = "cron"
    expression: str
    tz: TzType | None = None

    @field_validator("expression")
    @classmethod
    def validate_expression(cls, v: str) -> str:
        # Parse errors are ValueErrors and surface as ValidationError.
        return CronExpression(v, timezone.utc).expression

    @field_serializer("tz")
    def serialize_timezone(self, v: Any) -> str | None:
        """Convert the zone to the name validate_timezone reads back."""
        if isinstance(v, tzinfo):
            return timezone_name(v)
        if v is None:
            return None
        msg = f"Expected a tzinfo, got {type(v).__name__}"
        raise ValueError(msg)


class TriggerContext(BaseModel):
    """Execution history a trigger uses to pick its reference time.

    All times must be timezone-aware. The scheduler owning the job updates
    the context after each run; triggers only read it.
    """

    model_config = ConfigDict(validate_assignment=True)

    last_scheduled_execution_time: datetime | None = None
    last_actual_execution_time: datetime | None = None
    last_completion_time: datetime | None = None

    @field_validator(
        "last_scheduled_execution_time",
        "last_actual_execution_time",
        "last_completion_time",
    )
    @classmethod
    def validate_timezone(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            msg = "execution times must be timezone-aware"
            raise ValueError(msg)
        return v

    def update(
        self,
        last_scheduled_execution_time: datetime | None,
        last_actual_execution_time: datetime | None,
        last_completion_time: datetime | None,
    ) -> None:
        """Replaces all three times after a run."""
        self.last_scheduled_execution_time = last_scheduled_execution_time
        self.last_actual_execution_time = last_actual_execution_time
        self.last_completion_time = last_completion_time

    def is_empty(self) -> bool:
        return (
            self.last_scheduled_execution_time is None
            and self.last_actual_execution_time is None
            and self.last_completion_time is None
        )
