"""
component_10_logging_config.py

Central logging system for Aris.
Provides structured logging with per-handler log levels and formatting.

Features:
- Console and file based logging
- Separate error-only log file
- Structured formatting with timestamps and component names
- Performance tracking for long-running document operations
- Contextual logging information via `extra`

Usage:
    from component_10_logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Batch committed", extra={"kind": "remove", "records": 4})
    logger.error("Undo failed", extra={"line_number": 7})
"""

import logging
import logging.handlers
import os
import sys
import traceback
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, Literal, MutableMapping, Optional, Tuple, Type

LOG_DIR: Path = Path(os.environ.get("ARIS_LOG_DIR", "logs"))

DEFAULT_LOG_FILE: Path = LOG_DIR / "aris.log"
ERROR_LOG_FILE: Path = LOG_DIR / "aris_errors.log"
PERFORMANCE_LOG_FILE: Path = LOG_DIR / "aris_performance.log"

CONSOLE_LOG_LEVEL: int = logging.INFO
FILE_LOG_LEVEL: int = logging.DEBUG


class ArisLogFormatter(logging.Formatter):
    """
    Formatter for structured log output.
    Adds colors for console output (optional).
    """

    COLORS: Dict[str, str] = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, use_colors: bool = False, include_extra: bool = True) -> None:
        self.use_colors: bool = use_colors
        self.include_extra: bool = include_extra

        # Format: [TIMESTAMP] [LEVEL] [COMPONENT] MESSAGE
        fmt = "[%(asctime)s] [%(levelname)-8s] [%(name)s] %(message)s"
        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        log_message = super().format(record)

        if self.include_extra and hasattr(record, "extra_info"):
            extra_str = " | ".join(f"{k}={v}" for k, v in record.extra_info.items())
            if extra_str:
                log_message += f" | {extra_str}"

        if self.use_colors:
            color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            reset = self.COLORS["RESET"]
            log_message = f"{color}{log_message}{reset}"

        return log_message


class PerformanceLogger:
    """
    Context manager for timing document operations.

    Usage:
        with PerformanceLogger(logger.logger, "remove_subproof", lines=12):
            document.remove_subproof(opener)
    """

    def __init__(
        self, logger: logging.Logger, operation_name: str, **context: Any
    ) -> None:
        self.logger: logging.Logger = logger
        self.operation_name: str = operation_name
        self.context: Dict[str, Any] = context
        self.start_time: Optional[datetime] = None

    def __enter__(self) -> "PerformanceLogger":
        self.start_time = datetime.now()
        self.logger.debug(
            f"START: {self.operation_name}", extra={"extra_info": self.context}
        )
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> Literal[False]:
        assert (
            self.start_time is not None
        ), "PerformanceLogger was not entered correctly"
        duration_ms = (datetime.now() - self.start_time).total_seconds() * 1000

        if exc_type is None:
            self.logger.debug(
                f"END: {self.operation_name} (duration: {duration_ms:.2f}ms)",
                extra={"extra_info": {**self.context, "duration_ms": duration_ms}},
            )

            perf_logger = logging.getLogger("aris.performance")
            perf_logger.info(
                f"{self.operation_name}: {duration_ms:.2f}ms",
                extra={"extra_info": {**self.context, "duration_ms": duration_ms}},
            )
        else:
            self.logger.warning(
                f"FAILED: {self.operation_name} (duration: {duration_ms:.2f}ms)",
                extra={
                    "extra_info": {
                        **self.context,
                        "duration_ms": duration_ms,
                        "error": str(exc_val),
                    }
                },
            )

        # Propagate the exception
        return False


class StructuredLogger(logging.LoggerAdapter):
    """
    Logger adapter that carries structured extra information.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        # Move the 'extra' dict into the 'extra_info' attribute of the LogRecord
        extra = kwargs.get("extra", {})
        if extra:
            kwargs["extra"] = {"extra_info": extra}
        return msg, kwargs

    def log_exception(self, exc: Exception, message: str = "", **context: Any) -> None:
        """
        Logs an exception with its full traceback and context.
        """
        tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

        self.error(f"{message}: {type(exc).__name__}: {exc}\n{tb_str}", extra=context)


def setup_logging(
    console_level: int = CONSOLE_LOG_LEVEL,
    file_level: int = FILE_LOG_LEVEL,
    log_file: Optional[Path] = None,
    enable_performance_logging: bool = True,
) -> None:
    """
    Configures the global logging system for Aris.

    Args:
        console_level: Log level for console output
        file_level: Log level for file output
        log_file: Path of the main log file (default: logs/aris.log)
        enable_performance_logging: Enables the separate performance log
    """
    file_path = Path(log_file) if log_file else DEFAULT_LOG_FILE
    file_path.parent.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture everything, filter per handler

    # Remove existing handlers (prevents duplicates on repeated setup)
    root_logger.handlers.clear()

    # === Console handler ===
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(ArisLogFormatter(use_colors=True))
    root_logger.addHandler(console_handler)

    # === Main log file ===
    file_handler = logging.handlers.RotatingFileHandler(
        file_path, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(ArisLogFormatter(use_colors=False))
    root_logger.addHandler(file_handler)

    # === Error-only log file ===
    error_handler = logging.handlers.RotatingFileHandler(
        ERROR_LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(ArisLogFormatter(use_colors=False))
    root_logger.addHandler(error_handler)

    # === Performance logger ===
    if enable_performance_logging:
        perf_logger = logging.getLogger("aris.performance")
        perf_logger.setLevel(logging.INFO)
        perf_logger.propagate = False
        perf_logger.handlers.clear()

        perf_handler = logging.handlers.RotatingFileHandler(
            PERFORMANCE_LOG_FILE,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        perf_handler.setFormatter(ArisLogFormatter(use_colors=False))
        perf_logger.addHandler(perf_handler)

    logger = logging.getLogger("aris.logging_config")
    logger.info(
        "Logging initialised",
        extra={
            "extra_info": {
                "console_level": logging.getLevelName(console_level),
                "file_level": logging.getLevelName(file_level),
                "log_file": str(file_path),
                "performance_logging": enable_performance_logging,
            }
        },
    )


def get_logger(name: str) -> StructuredLogger:
    """
    Creates a structured logger for a component.

    Args:
        name: Name of the component (usually __name__)

    Returns:
        StructuredLogger instance

    Example:
        logger = get_logger(__name__)
        logger.info("Line inserted", extra={"line_number": 4})
    """
    return StructuredLogger(logging.getLogger(name), {})


# Automatic initialisation on import.
# Can be overridden by an explicit setup_logging() call.
if not logging.getLogger().handlers:
    setup_logging()
