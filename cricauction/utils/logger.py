"""
Logging for cricauction.

Console output is colored with colorlog; a plain copy can go to
``auction.log``. Every record carries a ``clock`` field: wall-clock time,
or the auction's scheduler time once a clock is bound, so a simulated run
reads ``t=   25.0s [cricauction.engine] INFO ... SOLD``.
"""

import logging
import sys
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

import colorlog

ROOT_LOGGER = "cricauction"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

CONSOLE_FORMAT = "%(log_color)s%(clock)s [%(name)s] %(levelname)-8s%(reset)s %(message)s"
FILE_FORMAT = "%(clock)s [%(name)s] %(levelname)-8s %(message)s"


class ClockFilter(logging.Filter):
    """Stamps each record with wall-clock or simulated auction time."""

    def __init__(self):
        super().__init__()
        self.clock: Optional[Callable[[], float]] = None

    def filter(self, record: logging.LogRecord) -> bool:
        if self.clock is None:
            record.clock = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(record.created))
        else:
            record.clock = f"t={self.clock():7.1f}s"
        return True


def parse_levels(spec: Optional[str]) -> Dict[str, int]:
    """
    Parse per-subsystem levels such as ``"ai=DEBUG,timer=WARNING"``.

    Raises:
        ValueError: on a malformed entry or unknown level name
    """
    levels: Dict[str, int] = {}
    if not spec:
        return levels
    for entry in spec.split(","):
        name, sep, level_name = entry.strip().partition("=")
        level = logging.getLevelName(level_name.strip().upper())
        if not sep or not name.strip() or not isinstance(level, int):
            raise ValueError(f"Invalid log level entry {entry!r}")
        levels[name.strip()] = level
    return levels


class AuctionLogger:
    """Owns the handlers of the ``cricauction`` logger tree."""

    _initialized = False
    _log_dir: Optional[Path] = None
    _clock_filter = ClockFilter()
    _overridden: List[str] = []

    @classmethod
    def setup(
        cls,
        level: int = logging.INFO,
        log_dir: Optional[str] = None,
        log_to_file: bool = False,
        levels: Optional[Dict[str, int]] = None,
    ):
        """
        Install console (and optionally file) handlers once.

        Args:
            level: Level of the ``cricauction`` logger
            log_dir: Directory for ``auction.log``; ./logs if None
            log_to_file: Whether to write ``auction.log``
            levels: Subsystem overrides, e.g. ``{"ai": logging.DEBUG}``
        """
        if cls._initialized:
            return

        root_logger = logging.getLogger(ROOT_LOGGER)
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        console_handler = colorlog.StreamHandler(sys.stdout)
        console_handler.setFormatter(
            colorlog.ColoredFormatter(CONSOLE_FORMAT, log_colors=LOG_COLORS)
        )
        handlers: List[logging.Handler] = [console_handler]

        if log_to_file:
            cls._log_dir = Path(log_dir) if log_dir else Path("logs")
            cls._log_dir.mkdir(exist_ok=True, parents=True)
            file_handler = logging.FileHandler(cls._log_dir / "auction.log", encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            handlers.append(file_handler)

        # Handler filters also see records from child loggers
        for handler in handlers:
            handler.addFilter(cls._clock_filter)
            root_logger.addHandler(handler)

        for name, sub_level in (levels or {}).items():
            logging.getLogger(f"{ROOT_LOGGER}.{name}").setLevel(sub_level)
            cls._overridden.append(name)

        cls._initialized = True

    @classmethod
    def bind_clock(cls, clock: Optional[Callable[[], float]]) -> None:
        """Stamp records with ``clock()`` seconds instead of wall time (None restores it)."""
        cls._clock_filter.clock = clock

    @classmethod
    def reset(cls):
        """Remove handlers, subsystem overrides and the bound clock."""
        root_logger = logging.getLogger(ROOT_LOGGER)
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()
        for name in cls._overridden:
            logging.getLogger(f"{ROOT_LOGGER}.{name}").setLevel(logging.NOTSET)
        cls._overridden = []
        cls._clock_filter.clock = None
        cls._initialized = False
        cls._log_dir = None

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Logger for a subsystem ('engine', 'retention', 'ai', ...)."""
        if not cls._initialized:
            cls.setup()

        return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def get_logger(name: str) -> logging.Logger:
    return AuctionLogger.get_logger(name)


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    log_to_file: bool = False,
    levels: Optional[Dict[str, int]] = None,
):
    """Replace any existing configuration."""
    AuctionLogger.reset()
    AuctionLogger.setup(level=level, log_dir=log_dir, log_to_file=log_to_file, levels=levels)
