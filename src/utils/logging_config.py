"""
Logging Configuration

Root logger setup shared by entry points.
"""

import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: Union[int, str] = logging.INFO, log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Configure the root logger with a console handler and optional file handler.

    Args:
        level: Logging level name or number.
        log_file: Optional file that also receives every record.

    Returns:
        The configured root logger.
    """
    handlers = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    # Pillow logs every PNG chunk at DEBUG
    logging.getLogger("PIL").setLevel(logging.WARNING)
    return logging.getLogger()
