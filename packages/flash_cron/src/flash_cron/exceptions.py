class CronError(ValueError):
    """Base class for all Flash Cron exceptions."""

    def __init__(self, message: str, expression: str = "") -> None:
        self.expression = expression
        super().__init__(message)


class MalformedExpressionError(CronError):
    """Raised when an expression or one of its fields is syntactically invalid."""


class MalformedRangeError(MalformedExpressionError):
    """Raised for a reversed range (``5-2``) or a non-positive step (``*/0``)."""


class FieldOutOfRangeError(CronError):
    """Raised when a value falls outside its field's legal range."""

    def __init__(self, message: str, field: str, value: int, expression: str = "") -> None:
        self.field = field
        self.value = value
        super().__init__(message, expression)


class UnsatisfiableError(CronError):
    """Raised when a well-formed expression never matches a calendar date."""
