import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from ..config.config import settings

LOG_FORMAT = "%(asctime)s - [%(name)s] - %(levelname)s - %(message)s"

# Client libraries that log every request at INFO; the station only wants their problems.
CHATTY_LOGGERS = ("httpx", "httpcore", "apscheduler")


def _resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = settings.LOG_LEVEL
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        return resolved
    return level


def setup_logging(level: Union[int, str, None] = None, log_dir: Optional[Path] = None) -> Path:
    """
    Sends station logs to stdout and to a rotating file, and returns the file path.

    The level, directory, file name and rotation limits come from the LOG_*
    settings unless passed in.
    """
    log_dir = Path(log_dir or settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / settings.LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(_resolve_level(level))

    # Replace uvicorn's handlers and any installed by an earlier call.
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [
        logging.StreamHandler(sys.stdout),
        RotatingFileHandler(log_file, maxBytes=settings.LOG_MAX_BYTES, backupCount=settings.LOG_BACKUP_COUNT),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
