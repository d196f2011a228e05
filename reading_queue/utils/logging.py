import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import structlog

QUEUE_LOGGER_NAME = "reading_queue.events"


def setup_logging(
    log_level: str = "INFO", log_to_file: bool = True, log_dir: str = "logs"
) -> None:
    """Set up logging for the reading queue.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to files in addition to console
        log_dir: Directory for the rotating log files
    """
    level = getattr(logging, log_level.upper())

    renderers = (
        [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        if log_to_file
        else [structlog.dev.ConsoleRenderer()]
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.set_exc_info,
            *renderers,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_to_file:
        logs_dir = Path(log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        # General log file
        app_handler = logging.handlers.RotatingFileHandler(
            logs_dir / "queue.log", maxBytes=5 * 1024 * 1024, backupCount=5  # 5MB
        )
        app_handler.setLevel(logging.INFO)
        app_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
            )
        )
        root_logger.addHandler(app_handler)

        # Error-only log file
        error_handler = logging.handlers.RotatingFileHandler(
            logs_dir / "errors.log", maxBytes=5 * 1024 * 1024, backupCount=10  # 5MB
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s - %(exc_info)s"
            )
        )
        root_logger.addHandler(error_handler)


def get_queue_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Get a structured logger for queue events.

    Args:
        name: Logger name (defaults to the shared queue events logger)
    """
    return structlog.get_logger(name or QUEUE_LOGGER_NAME)


def log_queue_load_failure(
    error: Exception,
    context: Dict[str, Any],
    logger: Optional[structlog.BoundLogger] = None,
) -> None:
    """Record that a queue load degraded to an empty queue.

    This is the only trace of a corrupt queue document: the caller still gets
    an empty, usable queue.
    """
    if logger is None:
        logger = get_queue_logger()

    logger.error(
        "Queue load failed, using empty queue",
        error_type=type(error).__name__,
        error_message=str(error),
        timestamp=datetime.now().isoformat(),
        exc_info=error,
        **context,
    )


class QueueOperationLogContext:
    """Context manager logging start, success or failure of a queue mutation."""

    def __init__(self, operation: str, **context):
        self.operation = operation
        self.context = context
        self.logger = get_queue_logger()
        self.start_time: Optional[datetime] = None

    def __enter__(self):
        self.start_time = datetime.now()
        self.logger.debug(
            f"Queue operation: {self.operation} - START",
            operation=self.operation,
            **self.context,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = (datetime.now() - self.start_time).total_seconds()

        if exc_type is not None:
            self.logger.error(
                f"Queue operation failed: {self.operation}",
                operation=self.operation,
                error_type=exc_type.__name__,
                error_message=str(exc_val),
                processing_time_seconds=elapsed,
                **self.context,
            )
        else:
            self.logger.info(
                f"Queue operation completed: {self.operation}",
                operation=self.operation,
                processing_time_seconds=elapsed,
                **self.context,
            )
        # never swallow the exception
        return False
