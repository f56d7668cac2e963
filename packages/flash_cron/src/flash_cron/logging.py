import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from .config import cron_settings


class UTCFormatter(logging.Formatter):
    """
    Formatter that stamps records in ISO-8601 UTC.
    """

    def __init__(self, fmt: str | None = None, datefmt: str | None = None):
        super().__init__(fmt, datefmt)
        # Fire times are computed across zones; log timestamps stay in UTC.
        self.converter = time.gmtime

    def formatTime(self, record, datefmt=None):
        ct = self.converter(record.created)
        if datefmt:
            return time.strftime(datefmt, ct)
        t = time.strftime("%Y-%m-%dT%H:%M:%S", ct)
        return "%s.%03dZ" % (t, record.msecs)


def get_logger(name: str) -> logging.Logger:
    """
    Returns a standard logger instance.

    Name loggers with dot-notation matching the module path:
    >>> logger = get_logger(__name__)
    """
    return logging.getLogger(name)


def setup_logging(
    level: Union[int, str, None] = None,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = 10_485_760,  # 10MB
    backup_count: int = 10,
    capture_roots: bool = False,
    module_name: str = "flash_cron",
) -> None:
    """
    Logging configuration for applications embedding the cron engine.

    The library itself never calls this; it only emits records.

    Args:
        level: Logging level (INFO, DEBUG, etc.). Defaults to LOG_LEVEL.
        log_file: Path to write logs to. Defaults to LOG_FILE.
        capture_roots: If True, configures the root logger.
                       If False, only configures 'flash_cron.*' loggers.
    """
    if level is None:
        level = cron_settings.LOG_LEVEL
    if log_file is None:
        log_file = cron_settings.LOG_FILE
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    target_logger = (
        logging.getLogger() if capture_roots else logging.getLogger(module_name)
    )

    # Reset handlers so repeated calls (tests) do not stack them.
    target_logger.handlers.clear()
    target_logger.setLevel(level)

    formatter = UTCFormatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    target_logger.addHandler(console)

    if log_file:
        file_path = Path(log_file).resolve()
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            target_logger.addHandler(file_handler)
        except OSError as e:
            # Read-only file systems still get console logging.
            sys.stderr.write(f"Failed to setup log file: {e}\n")

    if not capture_roots:
        target_logger.propagate = False
