import logging
import os
import sys
from datetime import datetime
from typing import Optional

from app.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str = "mediator",
    level: Optional[str] = None,
    log_dir: Optional[str] = None,
    log_to_file: Optional[bool] = None,
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # Repeated calls must not stack handlers
    if any(getattr(h, "_mediator_handler", False) for h in logger.handlers):
        return logger

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level or settings.LOG_LEVEL)
    console_handler.setFormatter(formatter)
    console_handler._mediator_handler = True
    logger.addHandler(console_handler)

    # File handler
    if settings.LOG_TO_FILE if log_to_file is None else log_to_file:
        directory = log_dir or settings.LOG_DIR
        os.makedirs(directory, exist_ok=True)
        file_handler = logging.FileHandler(
            os.path.join(directory, f"mediator_{datetime.now().strftime('%Y%m%d')}.log")
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        file_handler._mediator_handler = True
        logger.addHandler(file_handler)

    return logger
