"""
Logging setup shared by the API, the middleware and the db layer.

Handlers are attached to the root logger once, in app.py; every module then
asks for a named logger and inherits them.
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_DIR = Path(__file__).parent.parent.parent / "logs"
LOG_FILE = "inkwell.log"

# 10MB per file, five rotations kept
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def configure_app_logging(
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_file: str = LOG_FILE,
) -> None:
    """Send records to stdout and, when log_to_file is set, to logs/<log_file>.

    Calling it again replaces the handlers installed by the previous call.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()

    root.addHandler(_handler(logging.StreamHandler(sys.stdout), level))

    if not log_to_file:
        return

    LOG_DIR.mkdir(parents=True, exist_ok=True)
    root.addHandler(_handler(
        RotatingFileHandler(
            LOG_DIR / log_file,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        ),
        level,
    ))
