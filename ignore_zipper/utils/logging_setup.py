"""
Logging configuration for ignore-zipper.

Provides environment-aware logging that:
- Writes to stderr so archive listings on stdout stay clean
- Outputs JSON when IGNORE_ZIPPER_LOG_JSON is set (CI and container logs)
- Provides human-readable output for interactive use
- Includes custom TRACE level for per-rule matching detail
"""

import sys
import logging
import json
import os
from datetime import datetime, timezone
from typing import Optional, Any

# Define TRACE level (lower number = more detailed)
TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")


def trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE_LEVEL):
        self._log(TRACE_LEVEL, message, args, **kwargs)


logging.Logger.trace = trace

DEFAULT_LOG_LEVEL = 'WARNING'


def add_trace_to_logger():
    """Ensure trace method is available on all logger instances"""
    if not hasattr(logging.Logger, 'trace'):
        logging.Logger.trace = trace


class JsonFormatter(logging.Formatter):
    """JSON formatter for machine-read logs"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'component': record.name,
            'message': record.getMessage(),
            'pid': os.getpid(),
        }

        if hasattr(record, 'extra'):
            log_data.update(record.extra)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def resolve_log_level(log_level: Optional[str] = None) -> int:
    """
    Turn a level name into a numeric level.

    Args:
        log_level: Level name; falls back to IGNORE_ZIPPER_LOG_LEVEL, then
            LOG_LEVEL, then WARNING

    Returns:
        Numeric logging level (TRACE understood)
    """
    level_str = (
        log_level
        or os.environ.get('IGNORE_ZIPPER_LOG_LEVEL')
        or os.environ.get('LOG_LEVEL', DEFAULT_LOG_LEVEL)
    )
    if level_str.upper() == 'TRACE':
        return TRACE_LEVEL
    return getattr(logging, level_str.upper(), logging.WARNING)


def configure_logging(log_level: Optional[str] = None,
                      json_output: Optional[bool] = None) -> None:
    """
    Configure root logging for a command invocation.

    Args:
        log_level: Override log level (defaults to IGNORE_ZIPPER_LOG_LEVEL env var or WARNING)
        json_output: Force JSON output on or off (defaults to IGNORE_ZIPPER_LOG_JSON env var)
    """
    add_trace_to_logger()
    level = resolve_log_level(log_level)

    if json_output is None:
        json_output = os.environ.get('IGNORE_ZIPPER_LOG_JSON', '').lower() in ('true', '1', 'yes')

    root_logger = logging.getLogger()
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter('%(levelname)s: %(name)s: %(message)s'))

    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    logger = logging.getLogger('ignore-zipper')
    logger.debug(f"Logging configured - Level: {logging.getLevelName(level)}, JSON: {json_output}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    add_trace_to_logger()
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any
) -> None:
    """
    Log a message with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (e.g., logging.INFO)
        message: Log message
        **context: Additional fields to include in structured logs
    """
    extra = {'extra': context} if context else {}
    logger.log(level, message, extra=extra)
