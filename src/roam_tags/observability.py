"""Logging setup and operation timing for Roam Tags.

Every module logs through ``logging.getLogger(__name__)``; the handlers are
installed once on the ``roam_tags`` package logger by :func:`configure_logging`.
Tag operations are wrapped in :func:`timed_operation` (or decorated with
:func:`traced`), which logs START/END lines sharing a short correlation id
and feeds the in-process :data:`metrics`.
"""
import functools
import logging
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "roam_tags"
DEFAULT_LOG_DIR = Path.home() / ".roam-tags" / "logs"
LOG_FILE_NAME = "roam-tags.log"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

F = TypeVar("F", bound=Callable[..., Any])

# Handlers installed by configure_logging, replaced on reconfiguration
_installed_handlers: list = []


def configure_logging(
    log_dir: Optional[Union[str, Path]] = None,
    level: int = logging.INFO,
    max_bytes: int = 2 * 1024 * 1024,
    backup_count: int = 3,
    console: bool = True,
) -> Path:
    """Send ``roam_tags`` log records to a rotating file (and stderr).

    Calling it again replaces the handlers from the previous call.

    Args:
        log_dir: Directory for ``roam-tags.log``. Defaults to ~/.roam-tags/logs/
        level: Level for the package logger and its handlers
        max_bytes: Size at which the log file is rotated
        backup_count: Rotated files kept
        console: Also log to stderr

    Returns:
        Path to the log directory

    Raises:
        OSError: If the log directory cannot be created or opened.
    """
    log_path = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
    log_path.mkdir(parents=True, exist_ok=True)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in _installed_handlers:
        package_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list = [
        RotatingFileHandler(
            log_path / LOG_FILE_NAME,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
        _installed_handlers.append(handler)
    package_logger.setLevel(level)

    package_logger.debug(f"Logging to {log_path / LOG_FILE_NAME}")
    return log_path


def is_logging_configured() -> bool:
    return bool(_installed_handlers)


@dataclass
class OperationStats:
    """Running totals for one operation name."""
    calls: int = 0
    errors: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0
    results: int = 0
    last_error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "count": self.calls,
            "success_count": self.calls - self.errors,
            "error_count": self.errors,
            "avg_duration_ms": round(self.total_ms / self.calls, 2) if self.calls else 0,
            "max_duration_ms": round(self.max_ms, 2),
            "result_count": self.results,
            "last_error": self.last_error,
        }


class MetricsCollector:
    """In-process counters for tag operations (create_tag, list_tags, ...)."""

    def __init__(self):
        self._stats: Dict[str, OperationStats] = {}

    def record_operation(
        self,
        operation: str,
        duration_ms: float,
        success: bool,
        error: Optional[str] = None,
        result_count: int = 0,
    ) -> None:
        stats = self._stats.setdefault(operation, OperationStats())
        stats.calls += 1
        stats.total_ms += duration_ms
        stats.max_ms = max(stats.max_ms, duration_ms)
        stats.results += result_count
        if not success:
            stats.errors += 1
            stats.last_error = error

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Snapshot of every operation seen so far, keyed by name."""
        return {name: stats.as_dict() for name, stats in self._stats.items()}

    def reset(self) -> None:
        self._stats.clear()


metrics = MetricsCollector()


@contextmanager
def timed_operation(operation: str, **context):
    """Time a block, log it and record it in :data:`metrics`.

    Yields a dict the block may fill in; ``result_count`` is added to the
    operation's totals and every key is logged on the END line.

    Example:
        with timed_operation("list_tags") as op:
            tags = repository.list_tags()
            op["result_count"] = len(tags)
    """
    info: Dict[str, Any] = {"correlation_id": uuid.uuid4().hex[:8]}
    tag_info = " ".join(f"{k}={v}" for k, v in context.items())
    logger.debug(f"[{info['correlation_id']}] START {operation} {tag_info}".rstrip())

    started = time.perf_counter()
    error: Optional[str] = None
    try:
        yield info
    except Exception as e:
        error = str(e)
        raise
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        metrics.record_operation(
            operation,
            elapsed_ms,
            error is None,
            error,
            int(info.get("result_count", 0)),
        )
        extra = " ".join(
            f"{k}={v}" for k, v in info.items() if k != "correlation_id"
        )
        outcome = "OK" if error is None else f"ERROR: {error}"
        logger.debug(
            f"[{info['correlation_id']}] END {operation} "
            f"{elapsed_ms:.2f}ms {outcome} {extra}".rstrip()
        )


def traced(operation_name: Optional[str] = None) -> Callable[[F], F]:
    """Run the decorated method inside :func:`timed_operation`.

    The tag being worked on (a ``tag`` keyword, or the first string
    argument after ``self``) is logged with the operation.

    Example:
        @traced("create_tag")
        def create_tag(self, tag: str) -> str:
            ...
    """
    def decorator(func: F) -> F:
        name = operation_name or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            tag = kwargs.get("tag")
            if tag is None and len(args) > 1 and isinstance(args[1], str):
                tag = args[1]
            context = {"tag": tag[:50]} if isinstance(tag, str) else {}

            with timed_operation(name, **context) as op:
                result = func(*args, **kwargs)
                if isinstance(result, (list, tuple)):
                    op["result_count"] = len(result)
                return result

        return wrapper  # type: ignore
    return decorator
