"""
Logging setup for the POI sync service.

All modules log through the root logger, which gets two handlers:
a rotating file under LOG_DIR and a stderr stream for warnings. Every
record carries the correlation id of the request it was logged in.
"""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ..middleware.correlation_id import get_correlation_id

LOG_FILE_NAME = "app.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

FILE_FORMAT = (
    "[%(asctime)s] %(levelname)s in %(module)s:%(lineno)d [%(threadName)s] [%(correlation_id)s] - %(message)s"
)
CONSOLE_FORMAT = "%(levelname)s [%(correlation_id)s] - %(message)s"


class CorrelationIdFilter(logging.Filter):
    """Stamp ``record.correlation_id`` so the formats can print it."""

    def filter(self, record):
        record.correlation_id = get_correlation_id()
        return True


def _resolve_level(app):
    if app.debug:
        return logging.DEBUG
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    return level if isinstance(level, int) else logging.INFO


def _build_file_handler(log_path, level):
    # Opened lazily on the first record
    handler = RotatingFileHandler(
        log_path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
        delay=True
    )
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _build_console_handler():
    handler = logging.StreamHandler()
    handler.setLevel(logging.WARNING)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def setup_logging(app):
    """Attach file and console handlers to the root logger.

    Existing root handlers are dropped first so that building the app
    twice in one process does not duplicate every line.
    """
    log_dir = Path(app.config.get("LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME
    level = _resolve_level(app)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(_build_file_handler(log_path, level))
    root.addHandler(_build_console_handler())

    app.logger.setLevel(level)
    app.logger.propagate = True
    app.logger.info(f"[LOGGING] POI sync service logging to {log_path} at {logging.getLevelName(level)}")

    return app
