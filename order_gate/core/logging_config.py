"""Structured logging configuration.

JSON-formatted log lines carry the pipeline context (run id, customer id,
validator, resulting state) so a single gate decision can be followed
across the validator calls it made.
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_FIELDS = (
    "trace_id",
    "run_id",
    "customer_id",
    "validator",
    "validation_state",
    "phase",
    "cache_hit",
    "duration_ms",
    "http_status",
    "error_code",
    "service",
)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Outputs logs as JSON with standard fields plus any whitelisted extra
    context provided via the 'extra' parameter in logger calls.

    Example:
        >>> logger.info("Step passed", extra={"run_id": "abc", "validator": "customerExists"})
        # Output: {"timestamp": "...", "level": "INFO", "message": "Step passed",
        #          "run_id": "abc", "validator": "customerExists", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.process:
            log_data["process_id"] = record.process

        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)


def configure_structured_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatter (True) or plain text (False)
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler()

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
