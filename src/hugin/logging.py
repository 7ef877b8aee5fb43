"""Logging configuration for Hugin.

Supports two formats:
- text: one line per record, structured context appended as key=value
- json: one JSON object per record for log aggregation

Structured context is passed through `extra` (see hugin.logging_schema).
"""

import logging
import sys
import time
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger import json as jsonlogger

from hugin import __version__
from hugin.config import LoggingConfig

# Record attributes appended to text lines, in this order
CONTEXT_FIELDS = (
    "event",
    "command",
    "server",
    "container",
    "channel_id",
    "operation",
    "outcome",
    "error_code",
    "error_message",
)

# Context that makes two records with the same message distinct
RATE_LIMIT_KEY_FIELDS = ("event", "container", "operation", "channel_id", "command")


class RateLimitFilter(logging.Filter):
    """Drop repeats of the same message within a time window.

    A Docker endpoint that is down makes every status query log the same
    failure; one line per window is enough. Records are keyed by logger,
    rendered message and the RATE_LIMIT_KEY_FIELDS context, so the same
    message about another operation, channel or command still passes.
    ERROR and above always pass.

    Args:
        rate_limit_seconds: Minimum seconds between identical records
        max_cache_size: Number of keys remembered (least recent evicted first)
    """

    def __init__(
        self,
        rate_limit_seconds: float = 5.0,
        max_cache_size: int = 1000,
        name: str = "",
    ) -> None:
        super().__init__(name)
        self._rate_limit = rate_limit_seconds
        self._max_cache = max_cache_size
        self._last_log: OrderedDict[tuple[str, ...], float] = OrderedDict()

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= logging.ERROR:
            return True

        key = (
            record.name,
            record.getMessage(),
            *(str(getattr(record, field, "")) for field in RATE_LIMIT_KEY_FIELDS),
        )
        now = time.monotonic()
        last_time = self._last_log.get(key)
        if last_time is not None and now - last_time < self._rate_limit:
            return False

        self._last_log[key] = now
        self._last_log.move_to_end(key)
        while len(self._last_log) > self._max_cache:
            self._last_log.popitem(last=False)
        return True


class HuginTextFormatter(logging.Formatter):
    """Text formatter that appends structured context fields."""

    def __init__(self) -> None:
        super().__init__("[%(asctime)s] %(levelname)s %(name)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = " ".join(
            f"{field}={getattr(record, field)}"
            for field in CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        )
        if not context:
            return line
        # Keep tracebacks after the context
        head, sep, tail = line.partition("\n")
        return f"{head} [{context}]{sep}{tail}"


class HuginJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with standard fields for log aggregation.

    Adds timestamp (ISO 8601, UTC), level, logger, service, version and pid.
    Extra fields passed to the logger are kept as top-level keys.
    """

    def __init__(self, config: LoggingConfig, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._service = config.service_name

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = self._service
        log_record["version"] = __version__
        log_record["pid"] = record.process

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        # uvicorn duplicates the message with ANSI colors
        log_record.pop("color_message", None)


def setup_logging(config: LoggingConfig) -> None:
    """Configure the root and uvicorn loggers.

    Safe to call more than once; existing root handlers are replaced.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    if config.format == "json":
        formatter: logging.Formatter = HuginJsonFormatter(config)
    else:
        formatter = HuginTextFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(RateLimitFilter(rate_limit_seconds=5.0))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in ("uvicorn", "uvicorn.error"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.propagate = False
        uv_logger.addHandler(handler)

    # Discord retries and polls a lot; request lines are noise
    logging.getLogger("uvicorn.access").disabled = True

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
