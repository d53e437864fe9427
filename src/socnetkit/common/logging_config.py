"""
Logging configuration for the socnetkit library.

Every module obtains its logger through :func:`get_logger` with its own
``__name__``, which places it below the ``socnetkit`` root logger. Hosts
embedding the library call :func:`setup_logging` once to attach handlers;
until then records propagate to Python's default configuration.

Configuration is resolved from explicit arguments first, then from the
``SNK_LOG_*`` environment variables, then from the defaults below.
"""

import json
import logging
import logging.handlers
import os
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any


ROOT_LOGGER_NAME = "socnetkit"
PERFORMANCE_LOGGER_NAME = "socnetkit.performance"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s:%(lineno)d | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5

ENV_LOG_LEVEL = "SNK_LOG_LEVEL"
ENV_LOG_FILE = "SNK_LOG_FILE"
ENV_LOG_DIR = "SNK_LOG_DIR"
ENV_LOG_FORMAT = "SNK_LOG_FORMAT"
ENV_LOG_CONSOLE = "SNK_LOG_CONSOLE"
ENV_LOG_JSON = "SNK_LOG_JSON"
ENV_LOG_PERFORMANCE = "SNK_LOG_PERFORMANCE"


class PerformanceFilter(logging.Filter):
    """
    Keep only records that report timings or iteration counts.

    Attached to the ``socnetkit.performance`` logger when performance
    logging is enabled, so that benchmark output can be routed to its own
    file.
    """

    KEYWORDS = (
        "performance", "elapsed", "duration", "iterations", "converged",
        "vertices", "timing"
    )

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage().lower()
        return any(keyword in message for keyword in self.KEYWORDS)


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    _RESERVED = {
        "name", "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "lineno", "funcName", "created",
        "msecs", "relativeCreated", "thread", "threadName",
        "processName", "process", "getMessage", "exc_info", "exc_text",
        "stack_info", "message", "taskName"
    }

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in self._RESERVED:
                log_obj[key] = value

        return json.dumps(log_obj, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Parameters
    ----------
    name : str
        The name for the logger (typically ``__name__``)

    Returns
    -------
    logging.Logger
        Logger inheriting the ``socnetkit`` root configuration

    Examples
    --------
    >>> logger = get_logger(__name__)
    >>> logger.debug("Running BFS from vertex %d", 3)
    """
    return logging.getLogger(name)


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console: Optional[bool] = None,
    json_format: Optional[bool] = None,
    performance_logging: Optional[bool] = None,
    format_string: Optional[str] = None,
    date_format: Optional[str] = None,
    max_file_size: Optional[int] = None,
    backup_count: Optional[int] = None,
    force_setup: bool = False
) -> logging.Logger:
    """
    Configure the ``socnetkit`` root logger.

    Parameters
    ----------
    level : str, optional
        Logging level name. Falls back to ``SNK_LOG_LEVEL`` then INFO.
    log_file : str, optional
        Path of a rotating log file. Falls back to ``SNK_LOG_FILE``.
    log_dir : str, optional
        Directory for ``socnetkit.log`` when no explicit file is given.
        Falls back to ``SNK_LOG_DIR``. Without file or directory no file
        handler is attached.
    console : bool, optional
        Attach a stdout handler. Falls back to ``SNK_LOG_CONSOLE`` then True.
    json_format : bool, optional
        Emit JSON lines. Falls back to ``SNK_LOG_JSON`` then False.
    performance_logging : bool, optional
        Filter the performance logger to timing records and, when file
        logging is active, write them to ``performance.log`` next to the
        main log. Falls back to ``SNK_LOG_PERFORMANCE`` then False.
    format_string : str, optional
        Custom format. Falls back to ``SNK_LOG_FORMAT``.
    date_format : str, optional
        Timestamp format.
    max_file_size : int, optional
        Rotation threshold in bytes.
    backup_count : int, optional
        Number of rotated files to keep.
    force_setup : bool, default False
        Reconfigure even when handlers are already attached.

    Returns
    -------
    logging.Logger
        The configured root logger

    Raises
    ------
    ValueError
        If the logging level name is unknown
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)

    if not force_setup and root_logger.handlers:
        return root_logger

    if force_setup:
        root_logger.handlers.clear()

    config = _resolve_logging_config(
        level=level,
        log_file=log_file,
        log_dir=log_dir,
        console=console,
        json_format=json_format,
        performance_logging=performance_logging,
        format_string=format_string,
        date_format=date_format,
        max_file_size=max_file_size,
        backup_count=backup_count
    )

    log_level = getattr(logging, str(config["level"]).upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Invalid logging level: {config['level']}")
    root_logger.setLevel(log_level)

    if config["json_format"]:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt=config["format_string"],
            datefmt=config["date_format"]
        )

    if config["console"]:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    log_path = None
    if config["log_file"]:
        log_path = Path(config["log_file"])
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config["max_file_size"],
            backupCount=config["backup_count"],
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if config["performance_logging"]:
        perf_filter = PerformanceFilter()
        perf_logger = logging.getLogger(PERFORMANCE_LOGGER_NAME)
        perf_logger.filters.clear()
        perf_logger.addFilter(perf_filter)

        if log_path is not None:
            perf_handler = logging.handlers.RotatingFileHandler(
                filename=str(log_path.parent / "performance.log"),
                maxBytes=config["max_file_size"],
                backupCount=config["backup_count"],
                encoding="utf-8"
            )
            perf_handler.setFormatter(formatter)
            perf_handler.addFilter(perf_filter)
            perf_logger.addHandler(perf_handler)

    root_logger.propagate = False

    root_logger.info(
        "Logging configured: level=%s, console=%s, file=%s, json=%s",
        config["level"], config["console"],
        config["log_file"] or "None", config["json_format"]
    )

    return root_logger


def _resolve_logging_config(**kwargs) -> Dict[str, Any]:
    """Merge arguments, environment variables and defaults."""
    def _get_bool_env(env_var: str, default: bool) -> bool:
        value = os.getenv(env_var, "").lower()
        if value in ("true", "yes", "1", "on"):
            return True
        elif value in ("false", "no", "0", "off"):
            return False
        else:
            return default

    level = kwargs.get("level") or os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL)

    log_dir = kwargs.get("log_dir") or os.getenv(ENV_LOG_DIR)
    log_file = kwargs.get("log_file") or os.getenv(ENV_LOG_FILE)

    if not log_file and log_dir:
        log_file = os.path.join(log_dir, "socnetkit.log")

    console = kwargs.get("console")
    if console is None:
        console = _get_bool_env(ENV_LOG_CONSOLE, True)

    json_format = kwargs.get("json_format")
    if json_format is None:
        json_format = _get_bool_env(ENV_LOG_JSON, False)

    performance_logging = kwargs.get("performance_logging")
    if performance_logging is None:
        performance_logging = _get_bool_env(ENV_LOG_PERFORMANCE, False)

    format_string = (
        kwargs.get("format_string") or
        os.getenv(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT)
    )

    return {
        "level": level,
        "log_file": log_file,
        "console": console,
        "json_format": json_format,
        "performance_logging": performance_logging,
        "format_string": format_string,
        "date_format": kwargs.get("date_format") or DEFAULT_DATE_FORMAT,
        "max_file_size": kwargs.get("max_file_size") or DEFAULT_MAX_FILE_SIZE,
        "backup_count": kwargs.get("backup_count") or DEFAULT_BACKUP_COUNT,
    }


def log_function_entry(func_name: str, **kwargs) -> None:
    """
    Log function entry with its parameters at DEBUG level.

    Examples
    --------
    >>> log_function_entry("compute_geodesics", vertices=12, weighted=False)
    """
    logger = get_logger("socnetkit.debug")
    if logger.isEnabledFor(logging.DEBUG):
        param_str = ", ".join([f"{k}={v}" for k, v in kwargs.items()])
        logger.debug("Entering %s(%s)", func_name, param_str)


def log_performance_metric(
    operation: str,
    duration: float,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log the elapsed time of an operation on the performance logger.

    Parameters
    ----------
    operation : str
        Name of the operation that was timed
    duration : float
        Duration in seconds
    details : Dict[str, Any], optional
        Sizes or parameters of the operation (vertex count, iterations...)
    """
    logger = get_logger(PERFORMANCE_LOGGER_NAME)

    message = f"Performance: {operation} completed in {duration:.3f}s"

    if details:
        detail_str = ", ".join([f"{k}={v}" for k, v in details.items()])
        message += f" ({detail_str})"

    logger.info(message, extra={"operation": operation, "duration": duration})


class LoggingTimer:
    """
    Context manager timing a block and reporting it to the performance logger.

    Examples
    --------
    >>> with LoggingTimer("compute_geodesics", {"vertices": 1000}):
    ...     pass
    """

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None):
        self.operation = operation
        self.details = details or {}
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self) -> "LoggingTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is not None:
            self.duration = time.perf_counter() - self.start_time
            log_performance_metric(self.operation, self.duration, self.details)
