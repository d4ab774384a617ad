import logging
from pathlib import Path

from diski.config import Settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Color:
    """A class for terminal color codes."""

    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    DIM = "\033[2m"
    END = "\033[0m"


_LEVEL_COLORS = {
    logging.DEBUG: Color.DIM,
    logging.WARNING: Color.YELLOW,
    logging.ERROR: Color.RED,
    logging.CRITICAL: Color.RED,
}


class ColorLogFormatter(logging.Formatter):
    """A class for formatting colored logs."""

    def format(self, record):
        log_entry = super().format(record)
        color = _LEVEL_COLORS.get(record.levelno)
        if color:
            log_entry = f"{color}{log_entry}{Color.END}"
        return log_entry


def rotate_log_files(log_file: Path, keep: int = 5) -> None:
    for i in range(keep, 0, -1):
        old_log = log_file.with_name(f"{log_file.name}.{i}")
        if not old_log.exists():
            continue
        if i == keep:
            old_log.unlink()
        else:
            old_log.rename(log_file.with_name(f"{log_file.name}.{i + 1}"))

    # Rename the current log file if it exists
    if log_file.exists():
        log_file.rename(log_file.with_name(f"{log_file.name}.1"))


def initialize_logging(settings: Settings) -> logging.Logger:
    logger = logging.getLogger()
    logger.setLevel(settings.log_level)

    # Clear existing handlers
    logger.handlers = []

    # CONSOLE/TERMINAL
    console_handler = logging.StreamHandler()
    console_handler.setLevel(settings.log_level)
    console_handler.setFormatter(ColorLogFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    # LOG FILE
    log_file = settings.log_file
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        rotate_log_files(log_file)
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setLevel(settings.log_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    # keep bus library chatter out of --verbose output
    logging.getLogger("dbus_fast").setLevel(max(settings.log_level, logging.INFO))

    return logger
