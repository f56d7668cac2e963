"""
Trigger System.

Triggers compute the next fire time from a job's execution history:
- Last scheduled, actual and completion times (or nothing before the first run)
- Current time (now)

All triggers are deterministic - same inputs always produce same outputs.
No I/O, no asyncio calls, no side effects.
"""

from .base import Trigger
from .cron import CronTrigger

__all__ = [
    "Trigger",
    "CronTrigger",
]
