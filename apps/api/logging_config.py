"""
Logging configuration for ChefOS API.
Console output plus rotating app/error log files.
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


def _default_log_dir() -> Path:
    override = os.getenv("CHEFOS_LOG_DIR")
    if override:
        return Path(override)
    return Path("/var/log/chefos") if Path("/var").exists() else Path("./logs")


LOG_DIR = _default_log_dir()

ERROR_LOG_FILE = LOG_DIR / "error.log"
APP_LOG_FILE = LOG_DIR / "app.log"

DETAILED_FORMAT = "%(asctime)s [%(name)s:%(lineno)d] %(levelname)s - %(message)s"
SIMPLE_FORMAT = "%(levelname)s - %(message)s"

MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5


def _add_file_handler(root_logger: logging.Logger, path: Path, level: int) -> None:
    """Attach a rotating file handler, warning instead of failing if the file can't be opened."""
    try:
        handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUP_COUNT)
    except OSError as e:
        print(f"Warning: Could not setup log file {path}: {e}")
        return
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(DETAILED_FORMAT))
    root_logger.addHandler(handler)


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture everything at root level

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
    root_logger.addHandler(console_handler)

    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"Warning: Could not create log directory {LOG_DIR}: {e}")
    else:
        _add_file_handler(root_logger, APP_LOG_FILE, logging.DEBUG)
        _add_file_handler(root_logger, ERROR_LOG_FILE, logging.ERROR)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
