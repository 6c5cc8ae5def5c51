"""
Logging Module - Centralized logging configuration
=================================================

Every component logs under the ``eliza`` logger namespace. Console
output goes to stderr so replies printed on stdout stay clean; when a
log directory is configured, a full log and an error-only log are
written there as well.

Context passed to get_logger() (for example the rule source being
loaded) travels on each record as ``extra_data`` and is emitted by
the JSON formatter.
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any
import json


ROOT_LOGGER_NAME = "eliza"
LOG_FILE = "eliza.log"
ERROR_LOG_FILE = "errors.log"
PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"


class JSONFormatter(logging.Formatter):
    """
    Formats each record as a single JSON object per line.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        context = getattr(record, "extra_data", None)
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


class ColoredFormatter(logging.Formatter):
    """
    Console formatter with a colored level tag.

    Colors are only used when the target stream is a terminal.
    """

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__(datefmt="%H:%M:%S")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        level = f"[{record.levelname}]"
        if self.use_color and record.levelname in self.LEVEL_COLORS:
            level = f"{self.LEVEL_COLORS[record.levelname]}{level}{self.RESET}"

        line = f"{level} {self.formatTime(record, self.datefmt)} {record.name} | {record.getMessage()}"

        context = getattr(record, "extra_data", None)
        if context:
            line += " " + " ".join(f"{key}={value}" for key, value in context.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


class LoggerAdapter(logging.LoggerAdapter):
    """
    Adapter that merges bound context with per-call ``extra`` values
    into a single ``extra_data`` attribute on the record.
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        context = dict(self.extra or {})
        context.update(kwargs.get("extra") or {})
        kwargs["extra"] = {"extra_data": context} if context else {}
        return msg, kwargs

    def bind(self, **extra) -> "LoggerAdapter":
        """Return an adapter for the same logger with more context."""
        merged = dict(self.extra or {})
        merged.update(extra)
        return LoggerAdapter(self.logger, merged)


_loggers: Dict[str, logging.Logger] = {}
_configured = False


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: str = "INFO",
    json_format: bool = False,
    console_output: bool = True
) -> None:
    """
    Configure the ``eliza`` logger tree.

    Only the first call has an effect.

    Args:
        log_dir: Directory for eliza.log and errors.log (optional)
        log_level: Minimum level name, e.g. "INFO"
        json_format: Write eliza.log as JSON lines
        console_output: Also log to stderr
    """
    global _configured

    if _configured:
        return

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root.handlers.clear()

    if console_output:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ColoredFormatter(use_color=sys.stderr.isatty()))
        root.addHandler(console)

    if log_dir:
        directory = Path(log_dir).expanduser()
        directory.mkdir(parents=True, exist_ok=True)

        main_formatter = JSONFormatter() if json_format else logging.Formatter(PLAIN_FORMAT)
        root.addHandler(_file_handler(directory / LOG_FILE, logging.DEBUG, main_formatter))
        root.addHandler(_file_handler(directory / ERROR_LOG_FILE, logging.ERROR, JSONFormatter()))

    _configured = True


def get_logger(name: str, **extra) -> LoggerAdapter:
    """
    Get a logger under the ``eliza`` namespace.

    Args:
        name: Component name; "eliza." is prepended when missing
        **extra: Context attached to every record from this logger

    Example:
        logger = get_logger("rules.loader")
        logger.bind(source="rules.txt").warning("Line dropped")
    """
    prefix = ROOT_LOGGER_NAME + "."
    full_name = name if name == ROOT_LOGGER_NAME or name.startswith(prefix) else prefix + name

    if full_name not in _loggers:
        _loggers[full_name] = logging.getLogger(full_name)

    return LoggerAdapter(_loggers[full_name], extra)
