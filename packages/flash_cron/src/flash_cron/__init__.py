from .config import CronSettings, cron_settings
from .exceptions import (
    CronError,
    FieldOutOfRangeError,
    MalformedExpressionError,
    MalformedRangeError,
    UnsatisfiableError,
)
from .expression import CronExpression, is_valid_expression
from .fields import FieldKind, FieldSpec, parse_field
from .schemas import CronTriggerConfig, TriggerContext
from .triggers import CronTrigger, Trigger

__all__ = [
    "CronError",
    "CronExpression",
    "CronSettings",
    "CronTrigger",
    "CronTriggerConfig",
    "FieldKind",
    "FieldOutOfRangeError",
    "FieldSpec",
    "MalformedExpressionError",
    "MalformedRangeError",
    "Trigger",
    "TriggerContext",
    "UnsatisfiableError",
    "cron_settings",
    "is_valid_expression",
    "parse_field",
]
