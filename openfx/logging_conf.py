"""
Logging setup for the OpenFX service.

Configures the root logger once at startup: stdout always, plus a rotating
log file when ``LOG_FILE`` is set.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Level name ("INFO", "DEBUG", ...) or numeric level.
        log_file: Optional path to a log file (enables rotating file output).
        max_bytes: Maximum size per log file before rotation.
        backup_count: Number of rotated files to keep.
    """
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [stdout_handler]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logging.basicConfig(level=level, handlers=handlers, force=True)

    logger = logging.getLogger(__name__)
    logger.info("Logging configured: file=%s, level=%s", log_file or "-", logging.getLevelName(level))
