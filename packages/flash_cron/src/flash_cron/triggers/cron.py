"""CronTrigger - Fires based on cron expressions."""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo

from flash_cron.expression import CronExpression
from flash_cron.logging import get_logger
from flash_cron.schemas import CronTriggerConfig, TriggerContext

from .base import Trigger

logger = get_logger(__name__)


class CronTrigger(Trigger):
    """
    Trigger that fires based on a six-field cron expression.

    Format: [second] [minute] [hour] [day] [month] [day_of_week]

    Examples:
        >>> # 1. Every 15 minutes, on the minute
        >>> trigger = CronTrigger.from_string("0 */15 * * * *")

        >>> # 2. 7:00 AM on weekdays, Berlin time
        >>> trigger = CronTrigger.from_string("0 0 7 ? * MON-FRI", tz="Europe/Berlin")

        >>> # 3. From a validated config
        >>> trigger = CronTrigger(CronTriggerConfig(expression="0 0 0 1 * *"))

        >>> # 4. Ask for the next run after the last one finished
        >>> context = TriggerContext(last_completion_time=finished_at)
        >>> trigger.next_execution_time(context)

    Two triggers are equal when their expressions match the same instants.
    """

    def __init__(self, config: CronTriggerConfig):
        self.expression = CronExpression(config.expression, config.tz)

    @classmethod
    def from_string(
        cls,
        expr: str,
        tz: tzinfo | str | None = None,
    ) -> CronTrigger:
        """
        Creates a CronTrigger from a cron string.

        Args:
            expr: The cron expression string (e.g. "0 0 9 * * MON").
            tz: Timezone to use. Defaults to CRON_DEFAULT_TIMEZONE.

        Raises:
            CronError: If the expression or time zone is invalid.
        """
        # Parse first so callers get the CronError rather than a ValidationError.
        expression = CronExpression(expr, tz)
        return cls(
            config=CronTriggerConfig(expression=expression.expression, tz=expression.tz),
        )

    @staticmethod
    def reference_time(context: TriggerContext, now: datetime | None = None) -> datetime:
        """
        Picks the instant to search after.

        The latest of the last completion and last scheduled time wins, so a
        run that finished early does not fire again for the same slot. An
        empty history falls back to now.
        """
        known = [
            t
            for t in (context.last_completion_time, context.last_scheduled_execution_time)
            if t is not None
        ]
        if known:
            return max(known, key=lambda t: t.astimezone(timezone.utc))
        return now if now is not None else datetime.now(timezone.utc)

    def next_execution_time(
        self,
        context: TriggerContext,
        now: datetime | None = None,
    ) -> datetime:
        """Calculates the next scheduled time as an aware UTC datetime."""
        reference = self.reference_time(context, now)
        next_time = self.expression.next_execution_time(reference)
        logger.debug("Trigger %s fires next at %s", self.expression, next_time.isoformat())
        return next_time
