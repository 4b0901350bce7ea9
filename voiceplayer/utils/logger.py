"""Logging setup for voiceplayer."""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    max_size: int = 10485760,
    backup_count: int = 5
) -> logging.Logger:
    """
    Configure the root logger for the bot.

    Args:
        log_level: Level name such as ``INFO`` or ``DEBUG``
        log_file: Optional path of a rotating log file
        max_size: Maximum size of the log file in bytes before rotating
        backup_count: Number of rotated log files to keep

    Returns:
        The ``voiceplayer`` logger
    """
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # Reduce discord.py noise unless debugging
    if level > logging.DEBUG:
        logging.getLogger('discord').setLevel(logging.WARNING)
        logging.getLogger('discord.voice_state').setLevel(logging.WARNING)

    return logging.getLogger("voiceplayer")
