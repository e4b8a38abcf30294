import logging
import os
from logging.handlers import TimedRotatingFileHandler

from execfork_common.env import APP_NAME


def attach_file_handler(logger: logging.Logger, log_dir: str):
    os.makedirs(log_dir, exist_ok=True)

    handler = TimedRotatingFileHandler(
        filename=os.path.join(log_dir, f"{APP_NAME}.log"), when="D", interval=1,
        backupCount=14, encoding="utf-8", delay=True
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s"))

    logger.addHandler(handler)
