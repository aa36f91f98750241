"""Logging configuration for the schema gate.

The hook runs inside `git commit` and in CI, where the checker's own output
is what the user needs to see. The console handler therefore defaults to
WARNING and writes to stderr; diagnostics at INFO/DEBUG appear only with
``-v``/``-vv`` or SCHEMAGATE_LOG_LEVEL. Records logged with ``extra=NOTICE`` are
user-facing notices: always shown on the console, without a level prefix.

File logging is opt-in (SCHEMAGATE_LOG_DIR) and rotates:
- Max file size: 10 MB per log file
- Backup count: 5 (keeps schemagate.log, schemagate.log.1, ..., schemagate.log.5)
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_FILE = "schemagate.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB per file
DEFAULT_BACKUP_COUNT = 5
DEFAULT_CONSOLE_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = "schemagate: %(levelname)s: %(message)s"
DEFAULT_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
NOTICE_FORMAT = "schemagate: %(message)s"

# Pass as extra= to show an informational record regardless of console level
NOTICE = {"notice": True}

_configured = False


class ConsoleFilter(logging.Filter):
    """Pass records at or above ``level``, plus notices."""

    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= self.level or getattr(record, "notice", False)


class ConsoleFormatter(logging.Formatter):
    """Plain text for notices, level-prefixed text for everything else."""

    def __init__(self):
        super().__init__(DEFAULT_LOG_FORMAT)
        self._notice = logging.Formatter(NOTICE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if getattr(record, "notice", False):
            return self._notice.format(record)
        return super().format(record)


def configure_logging(
    console_level: int = DEFAULT_CONSOLE_LEVEL,
    log_dir: str | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    stream=None,
) -> logging.Logger:
    """Configure gate logging.

    Args:
        console_level: Level for the stderr handler (default: WARNING)
        log_dir: Directory for a rotating log file; None disables file logging
        log_file: Log file name (default: schemagate.log)
        max_bytes: Maximum size per log file before rotation (default: 10 MB)
        backup_count: Number of backup files to keep (default: 5)
        stream: Console stream (default: sys.stderr at call time)

    Returns:
        The root schemagate logger instance.
    """
    global _configured

    root_logger = logging.getLogger("schemagate")
    root_logger.setLevel(logging.DEBUG)

    # Clear existing handlers to avoid duplicates on reconfiguration
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console_handler.addFilter(ConsoleFilter(console_level))
    console_handler.setFormatter(ConsoleFormatter())
    root_logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(os.path.expanduser(log_dir))
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path / log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(DEFAULT_FILE_FORMAT))
        root_logger.addHandler(file_handler)

    # Prevent propagation to root logger
    root_logger.propagate = False

    _configured = True

    root_logger.debug(f"Logging configured: console={logging.getLevelName(console_level)}, log_dir={log_dir}")

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a gate component.

    Args:
        name: Component name (e.g., 'git', 'checker', 'gate')

    Returns:
        A logger instance under the schemagate namespace.
    """
    if not _configured:
        configure_logging()

    return logging.getLogger(f"schemagate.{name}")


def level_from_verbosity(verbosity: int, default: int | str = DEFAULT_CONSOLE_LEVEL) -> int:
    """Map repeated -v flags onto a console level.

    Args:
        verbosity: Number of -v flags given
        default: Level used when no flag is given (int or name like "INFO")
    """
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    if isinstance(default, str):
        return getattr(logging, default.upper())
    return default
