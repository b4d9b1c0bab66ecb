import logging
import re
import sys
from datetime import datetime
from functools import cache
from pathlib import Path

from colorama import Fore, Style, just_fix_windows_console

from nexus.shared.config import Config, load_config

config: Config = load_config()

CONSOLE_FORMAT = (
    f"{Style.BRIGHT}%(levelname)-10s "
    + f"{Style.DIM}%(name)-24s "
    + "%(module)s.%(funcName)-24s "
    + f"{Style.RESET_ALL}%(message)s"
)
FILE_FORMAT = re.sub(r"\x1b\[[0-9;]*m", "", "%(asctime)s - " + CONSOLE_FORMAT)


class ColorFormatter(logging.Formatter):
    color_map = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.MAGENTA,
    }

    def format(self, record):
        color = self.color_map.get(record.levelno, Fore.WHITE)
        message = super().format(record)
        return f"{color}{message}{Style.RESET_ALL}"


@cache
def process_handlers(log_dir: str) -> tuple[logging.Handler, ...]:
    """One dated file handler and one console handler per log directory."""
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    just_fix_windows_console()

    file_handler = logging.FileHandler(
        Path(log_dir) / f"nexus-{datetime.now().strftime('%Y-%m-%d')}.log",
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColorFormatter(CONSOLE_FORMAT))

    return file_handler, console_handler


class Logger:
    def __init__(self, name, log_dir=config.paths.logs, level=config.logging.level):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        for handler in process_handlers(str(log_dir)):
            if handler not in self.logger.handlers:
                self.logger.addHandler(handler)

    def get_logger(self):
        return self.logger
