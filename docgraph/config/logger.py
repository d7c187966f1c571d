"""
Loguru setup for DocGraph.

Console output is always on. File sinks under ``settings.LOG_DIR`` split the stream into
an application log, an error log, a request log (lines tagged ``REQUEST``) and a
performance log (lines tagged ``PERFORMANCE``). Records emitted through the stdlib
``logging`` module by uvicorn, SQLAlchemy and the neo4j driver are forwarded to loguru.
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from fastapi import Request
from loguru import logger

from docgraph.config.settings import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
DETAILED_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
TAGGED_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"

INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "sqlalchemy.engine", "neo4j")


def _tagged(tag: str) -> Callable[[dict], bool]:
    return lambda record: record["message"].startswith(tag)


@dataclass(frozen=True)
class FileSink:
    filename: str
    level: str
    rotation: str
    retention: str
    format: str = DETAILED_FORMAT
    filter: Optional[Callable[[dict], bool]] = None


FILE_SINKS: List[FileSink] = [
    FileSink("docgraph.log", "DEBUG", "10 MB", "7 days"),
    FileSink("errors.log", "ERROR", "5 MB", "30 days"),
    FileSink("requests.log", "INFO", "20 MB", "14 days", TAGGED_FORMAT, _tagged("REQUEST")),
    FileSink("performance.log", "INFO", "10 MB", "7 days", TAGGED_FORMAT, _tagged("PERFORMANCE")),
]


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


class LoguruConfig:
    """Owns the loguru sinks for one process."""

    def __init__(self, logs_dir: str = "logs", to_file: bool = True):
        self.logs_dir = Path(logs_dir)
        self.to_file = to_file

    def setup_logger(self, log_level: str = "INFO", intercept_stdlib: bool = True) -> None:
        logger.remove()
        logger.add(sys.stdout, format=CONSOLE_FORMAT, level=log_level, colorize=True, backtrace=True, diagnose=False)

        if self.to_file:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            for sink in FILE_SINKS:
                logger.add(
                    self.logs_dir / sink.filename,
                    format=sink.format,
                    level=sink.level,
                    rotation=sink.rotation,
                    retention=sink.retention,
                    compression="zip",
                    encoding="utf-8",
                    filter=sink.filter,
                    diagnose=False,
                )

        if intercept_stdlib:
            self.intercept_stdlib(log_level)

    @staticmethod
    def intercept_stdlib(log_level: str) -> None:
        handler = InterceptHandler()
        for name in INTERCEPTED_LOGGERS:
            std_logger = logging.getLogger(name)
            std_logger.handlers = [handler]
            std_logger.propagate = False
        # SQLAlchemy echoes every statement at INFO
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("neo4j").setLevel(log_level)


def log_request_start(request: Request) -> None:
    logger.info(
        "REQUEST START: {method} {path} from {client}",
        method=request.method,
        path=request.url.path,
        client=request.client.host if request.client else "-",
    )


def log_request_end(request: Request, status_code: int, process_time: float) -> None:
    logger.info(
        "REQUEST END: {method} {path} - {status_code} ({process_time:.4f}s)",
        method=request.method,
        path=request.url.path,
        status_code=status_code,
        process_time=process_time,
    )


def log_request_error(request: Request, error: Exception, process_time: float) -> None:
    logger.error(
        "REQUEST ERROR: {method} {path} - {error_type}: {error} ({process_time:.4f}s)",
        method=request.method,
        path=request.url.path,
        error_type=type(error).__name__,
        error=str(error),
        process_time=process_time,
    )


def log_performance(operation: str, duration: float, **kwargs) -> None:
    """Record a timing line for ``operation``; extra keyword arguments are appended as key=value."""
    details = " ".join(f"{key}={value}" for key, value in kwargs.items())
    logger.info(
        "PERFORMANCE: {operation} completed in {duration:.4f}s {details}",
        operation=operation,
        duration=duration,
        details=details,
    )


loguru_config = LoguruConfig(settings.LOG_DIR, settings.LOG_TO_FILE)
loguru_config.setup_logger(settings.LOG_LEVEL, settings.LOG_INTERCEPT_STDLIB)

app_logger = logger
