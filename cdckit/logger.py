"""Console and file logging, stats snapshots and forwarding of process output."""

from __future__ import annotations

import gzip
import json
import logging
import logging.handlers
import os
import re
import shutil
import sys
import threading
import time
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO

import psutil

LOGGER_NAME = "cdckit"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "cdckit.log"
MAX_LOG_BYTES = 100 * 1024 * 1024
MAX_LOG_BACKUPS = 5
MAX_LOG_AGE_SECONDS = 30 * 24 * 60 * 60

_RESET = "\033[0m"
_RED = "\033[31m"
_GRAY = "\033[90m"

LEVEL_COLORS = {
    "debug": "\033[36m",
    "info": "\033[32m",
    "warn": "\033[33m",
    "error": "\033[31m",
    "fatal": "\033[31m",
}

_LEVEL_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}

_logger = logging.getLogger(LOGGER_NAME)
_logger.setLevel(logging.DEBUG)
_logger.propagate = False
_logger.addHandler(logging.NullHandler())

_config_folder: str | None = None


def _level_name(record: logging.LogRecord) -> str:
    return _LEVEL_NAMES.get(record.levelno, record.levelname.lower())


def _utc_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class ConsoleFormatter(logging.Formatter):
    """Colourised ``<time> <LEVEL> <message>`` lines for a terminal.

    Messages that are not strings are written as compact JSON; error
    and fatal messages are shown in red.
    """

    def format(self, record: logging.LogRecord) -> str:
        level = _level_name(record)
        color = LEVEL_COLORS.get(level, "")
        timestamp = f"{_GRAY}{_utc_time(record).strftime(TIME_FORMAT)}{_RESET}"
        level_text = f"{color}{level.upper()}{_RESET}"

        if isinstance(record.msg, str):
            message = record.getMessage()
            if level in ("error", "fatal"):
                message = f"{_RED}{message}{_RESET}"
        else:
            try:
                message = json.dumps(record.msg, separators=(",", ":"), default=str)
            except (TypeError, ValueError) as exc:
                message = str(exc)
        return f"{timestamp} {level_text} {message}"


class _JSONLineFormatter(logging.Formatter):
    """One JSON object per record, for the log file."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.msg if not isinstance(record.msg, str) else record.getMessage()
        entry = {
            "level": _level_name(record),
            "time": _utc_time(record).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "message": message,
        }
        return json.dumps(entry, separators=(",", ":"), default=str)


def _gzip_namer(name: str) -> str:
    return name + ".gz"


def _gzip_rotator(source: str, dest: str) -> None:
    with open(source, "rb") as src, gzip.open(dest, "wb") as out:
        shutil.copyfileobj(src, out)
    os.remove(source)
    cutoff = time.time() - MAX_LOG_AGE_SECONDS
    for old in Path(dest).parent.glob("*.gz"):
        try:
            if old.stat().st_mtime < cutoff:
                old.unlink()
        except OSError:
            pass


def configure(config_folder: str | None = None) -> logging.Logger:
    """Set up logging to stdout and, when a folder is given, to a rotating file.

    The file goes to ``<config_folder>/logs/sync_<UTC timestamp>/``.
    Calling it again replaces the previous handlers.
    """
    global _config_folder
    _config_folder = config_folder or None

    for handler in list(_logger.handlers):
        _logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ConsoleFormatter())
    _logger.addHandler(console)

    if _config_folder:
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H-%M-%S")
        log_dir = Path(_config_folder) / "logs" / f"sync_{stamp}"
        log_dir.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=MAX_LOG_BYTES,
            backupCount=MAX_LOG_BACKUPS,
            encoding="utf-8",
        )
        rotating.namer = _gzip_namer
        rotating.rotator = _gzip_rotator
        rotating.setFormatter(_JSONLineFormatter())
        _logger.addHandler(rotating)

    return _logger


def _message(args: tuple[Any, ...]) -> Any:
    if len(args) == 1 and not isinstance(args[0], str):
        return args[0]
    return "".join(str(arg) for arg in args)


def info(*args: Any) -> None:
    """Log at INFO; a single non-string argument is logged as JSON."""
    _logger.info(_message(args))


def debug(*args: Any) -> None:
    """Log at DEBUG."""
    _logger.debug(_message(args))


def warn(*args: Any) -> None:
    """Log at WARN."""
    _logger.warning(_message(args))


def error(*args: Any) -> None:
    """Log at ERROR."""
    _logger.error(_message(args))


def fatal(*args: Any) -> None:
    """Log at FATAL and exit with status 1."""
    _logger.critical(_message(args))
    raise SystemExit(1)


def _resolve_folder(config_folder: str | None) -> str:
    folder = config_folder or _config_folder or os.environ.get("CONFIG_FOLDER", "")
    if not folder:
        raise ValueError("config folder is not set")
    return folder


def file_logger(
    content: Any,
    file_name: str,
    file_extension: str,
    config_folder: str | None = None,
) -> Path:
    """Write ``content`` as JSON to ``<folder>/<file_name><file_extension>``, replacing it.

    The folder is the given one, else the configured one, else the
    ``CONFIG_FOLDER`` environment variable. Raises ValueError when none
    is set or the content cannot be serialised.
    """
    folder = _resolve_folder(config_folder)
    try:
        payload = json.dumps(content, separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"failed to marshal content: {exc}") from exc

    path = Path(folder) / f"{file_name}{file_extension}"
    path.write_text(payload, encoding="utf-8")
    return path


def format_stats(
    synced_records: int,
    running_threads: int,
    records_to_sync: int,
    elapsed_seconds: float,
    memory_bytes: int,
) -> dict[str, Any]:
    """Build the sync-progress snapshot that the stats file holds."""
    speed = synced_records / elapsed_seconds if elapsed_seconds > 0 else 0.0
    remaining = records_to_sync - synced_records
    estimated = "Not Determined"
    if speed > 0 and remaining >= 0:
        estimated = f"{remaining / speed:.2f} s"
    return {
        "Running Threads": running_threads,
        "Synced Records": synced_records,
        "Memory": f"{memory_bytes // (1024 * 1024)} mb",
        "Speed": f"{speed:.2f} rps",
        "Seconds Elapsed": f"{elapsed_seconds:.2f}",
        "Estimated Remaining Time": estimated,
    }


def stats_logger(
    stop_event: threading.Event,
    stats_func: Callable[[], tuple[int, int, int]],
    config_folder: str | None = None,
    interval: float = 2.0,
) -> threading.Thread:
    """Write a stats snapshot to ``stats.json`` every ``interval`` seconds until stopped.

    ``stats_func`` returns ``(synced_records, running_threads, records_to_sync)``.
    Returns the background thread.
    """
    start = time.monotonic()
    process = psutil.Process()

    def run() -> None:
        while not stop_event.wait(interval):
            synced, threads, to_sync = stats_func()
            stats = format_stats(
                synced,
                threads,
                to_sync,
                time.monotonic() - start,
                process.memory_info().rss,
            )
            try:
                file_logger(stats, "stats", ".json", config_folder)
            except (OSError, ValueError) as exc:
                error(f"failed to write stats in file: {exc}")
                return
        info("Monitoring stopped")

    thread = threading.Thread(target=run, name="stats-logger", daemon=True)
    thread.start()
    return thread


_ERROR_LINE = re.compile(
    r"(?i)(ERROR|FATAL|Exception|Error:|Failed to|java\.lang\.\w+Exception|^\s*Caused by:)"
)
_STACK_TRACE_LINE = re.compile(r"^\s*at\s+[\w$.]+\([\w$]+\.java:\d+\)")


class ProcessOutputReader:
    """Forwards the lines of a process's output to the logger.

    Without ``source`` a pipe is created; hand :attr:`writer` to the
    process as its output. Lines that look like errors or stack traces
    are logged as errors, the rest as info.
    """

    def __init__(self, name: str, is_error: bool = False, source: BinaryIO | None = None) -> None:
        self.name = name
        self.is_error = is_error
        self.writer: BinaryIO | None = None
        if source is None:
            read_fd, write_fd = os.pipe()
            self._source: BinaryIO = os.fdopen(read_fd, "rb")
            self.writer = os.fdopen(write_fd, "wb")
        else:
            self._source = source
        self._in_stack_trace = False
        self._close_lock = threading.Lock()
        self.closed = False

    def classify(self, line: str) -> bool:
        """Tell whether ``line`` should be logged as an error, tracking stack traces."""
        is_error_line = self.is_error or bool(_ERROR_LINE.search(line))
        is_stack_line = bool(_STACK_TRACE_LINE.search(line))
        if is_error_line or is_stack_line:
            self._in_stack_trace = True
        elif self._in_stack_trace and not line.strip().startswith("at "):
            self._in_stack_trace = False
        return is_error_line or is_stack_line or self._in_stack_trace

    def _lines(self) -> Iterable[str]:
        for raw in self._source:
            text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
            yield text.removesuffix("\n").removesuffix("\r")

    def start_reading(self) -> threading.Thread:
        """Read and log lines in a background thread; the reader closes at end of input."""

        def run() -> None:
            try:
                for line in self._lines():
                    message = f"[{self.name}] {line}"
                    if self.classify(line):
                        error(message)
                    else:
                        info(message)
            finally:
                self.close()

        thread = threading.Thread(target=run, name=f"output-{self.name}", daemon=True)
        thread.start()
        return thread

    def close(self) -> None:
        """Close the read end; later calls do nothing."""
        with self._close_lock:
            if self.closed:
                return
            self.closed = True
        try:
            self._source.close()
        except OSError as exc:
            print(f"Error closing ProcessOutputReader: {exc}")