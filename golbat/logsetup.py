"""Logging to stdout and, optionally, to a size-rotated log file."""

from __future__ import annotations

import gzip
import logging
import os
import shutil
import sys
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path

LOGGER_NAME = "golbat"
LOG_FILE_NAME = "golbat.log"
_MEGABYTE = 1024 * 1024
_DEFAULT_MAX_SIZE_MB = 100
_BACKUP_TIME_FORMAT = "%Y-%m-%dT%H-%M-%S.%f"

_handlers: list[logging.Handler] = []
_file_handler: _RotatingLogFileHandler | None = None


class PlainFormatter(logging.Formatter):
    """Formats records as ``LEVEL timestamp message``."""

    def __init__(self, timestamp_format: str = "%Y-%m-%d %H:%M:%S") -> None:
        super().__init__()
        self.timestamp_format = timestamp_format

    @staticmethod
    def _level_desc(levelno: int) -> str:
        if levelno > logging.CRITICAL:
            return "PANC"
        if levelno >= logging.CRITICAL:
            return "FATL"
        if levelno >= logging.ERROR:
            return "ERRO"
        if levelno >= logging.WARNING:
            return "WARN"
        if levelno >= logging.INFO:
            return "INFO"
        return "DEBG"

    def format(self, record: logging.LogRecord) -> str:
        timestamp = time.strftime(self.timestamp_format, time.localtime(record.created))
        return f"{self._level_desc(record.levelno)} {timestamp} {record.getMessage()}"


class _RotatingLogFileHandler(logging.FileHandler):
    """A log file rotated by size into timestamped backups.

    Backups are named ``<stem>-<UTC time><suffix>``, optionally gzipped, and
    pruned by count (``max_backups``) and age in days (``max_age``); zero
    disables either limit.
    """

    def __init__(
        self,
        filename: Path,
        max_size_mb: int,
        max_age_days: int,
        max_backups: int,
        compress: bool,
    ) -> None:
        super().__init__(filename, mode="a", encoding="utf-8", delay=True)
        size = max_size_mb if max_size_mb > 0 else _DEFAULT_MAX_SIZE_MB
        self.max_bytes = size * _MEGABYTE
        self.max_age_days = max_age_days
        self.max_backups = max_backups
        self.compress = compress
        self._path = Path(self.baseFilename)

    def _open(self):
        self._path.parent.mkdir(parents=True, exist_ok=True)
        return super()._open()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            size = len((self.format(record) + self.terminator).encode("utf-8"))
            current = self._path.stat().st_size if self._path.exists() else 0
            if current > 0 and current + size > self.max_bytes:
                self.rotate()
        except Exception:
            self.handleError(record)
            return
        super().emit(record)

    def _backup_path(self) -> Path:
        stamp = datetime.now(timezone.utc)
        while True:
            text = stamp.strftime(_BACKUP_TIME_FORMAT)[:-3]
            candidate = self._path.with_name(f"{self._path.stem}-{text}{self._path.suffix}")
            gz = candidate.with_name(candidate.name + ".gz")
            if not candidate.exists() and not gz.exists():
                return candidate
            stamp += timedelta(milliseconds=1)

    def rotate(self) -> None:
        """Move the current file to a backup and start a new one."""
        self.acquire()
        try:
            if self.stream is not None:
                self.stream.close()
                self.stream = None
            if self._path.exists():
                backup = self._backup_path()
                os.replace(self._path, backup)
                if self.compress:
                    with open(backup, "rb") as src, gzip.open(
                        backup.with_name(backup.name + ".gz"), "wb"
                    ) as dst:
                        shutil.copyfileobj(src, dst)
                    backup.unlink()
            self._prune()
        finally:
            self.release()

    def _backups(self) -> list[tuple[datetime, Path]]:
        prefix = f"{self._path.stem}-"
        found = []
        if not self._path.parent.is_dir():
            return found
        for entry in self._path.parent.iterdir():
            name = entry.name
            for ending in (self._path.suffix + ".gz", self._path.suffix):
                if name.startswith(prefix) and name.endswith(ending):
                    stamp_text = name[len(prefix):len(name) - len(ending)]
                    try:
                        stamp = datetime.strptime(stamp_text, _BACKUP_TIME_FORMAT)
                    except ValueError:
                        break
                    found.append((stamp.replace(tzinfo=timezone.utc), entry))
                    break
        found.sort(reverse=True)
        return found

    def _prune(self) -> None:
        backups = self._backups()
        doomed: list[Path] = []
        if self.max_backups > 0:
            doomed.extend(path for _, path in backups[self.max_backups:])
            backups = backups[:self.max_backups]
        if self.max_age_days > 0:
            cutoff = datetime.now(timezone.utc) - timedelta(days=self.max_age_days)
            doomed.extend(path for stamp, path in backups if stamp < cutoff)
        for path in doomed:
            try:
                path.unlink()
            except FileNotFoundError:
                pass


def setup_logger(
    level: int,
    file_logging_enabled: bool = False,
    max_size: int = 0,
    max_age: int = 0,
    max_backups: int = 0,
    compress: bool = False,
    log_dir: str | os.PathLike[str] = "logs",
) -> logging.Logger:
    """Configure the package logger and return it.

    Output goes to stdout and, when enabled, to ``<log_dir>/golbat.log``
    rotated at ``max_size`` megabytes.
    """
    global _file_handler
    logger = logging.getLogger(LOGGER_NAME)
    for handler in _handlers:
        logger.removeHandler(handler)
        handler.close()
    _handlers.clear()
    _file_handler = None

    formatter = PlainFormatter()
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    _handlers.append(console)

    if file_logging_enabled:
        _file_handler = _RotatingLogFileHandler(
            Path(log_dir) / LOG_FILE_NAME, max_size, max_age, max_backups, compress
        )
        _file_handler.setFormatter(formatter)
        _handlers.append(_file_handler)

    for handler in _handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def rotate_logs() -> None:
    """Rotate the log file now, if file logging is enabled."""
    if _file_handler is not None:
        _file_handler.rotate()