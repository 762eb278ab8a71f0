"""
Logging for the MMR engine.

All loggers hang off the ``mmr`` root: ``mmr.engine`` for appends and
proof generation, ``mmr.proof`` for verifier rejections, ``mmr.storage``
for the SQLite node store. Console output is coloured by colorlog; a plain
``mmr.log`` file can be added for long-running writers.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, Optional

import colorlog

ROOT_LOGGER = "mmr"
LOG_FILE = "mmr.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def _console_handler(level: int) -> logging.Handler:
    handler = colorlog.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(colorlog.ColoredFormatter(
        "%(log_color)s%(asctime)s %(levelname)-8s%(reset)s %(name)-12s %(message)s",
        datefmt=DATE_FORMAT,
        log_colors=LEVEL_COLORS,
    ))
    return handler


def _file_handler(log_dir: Path, level: int) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / LOG_FILE, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)-8s %(name)s %(threadName)s %(message)s",
        datefmt=DATE_FORMAT,
    ))
    return handler


class MMRLogger:
    """Owns the handlers attached to the ``mmr`` root logger."""

    _configured = False
    log_file: Optional[Path] = None

    @classmethod
    def setup(
        cls,
        level: int = logging.INFO,
        log_dir: Optional[str] = None,
        log_to_file: bool = False,
        subsystem_levels: Optional[Dict[str, int]] = None,
        force: bool = False,
    ):
        """
        Attach handlers to the ``mmr`` logger.

        Args:
            level: Level for the root and both handlers
            log_dir: Directory for ``mmr.log`` (./logs if None)
            log_to_file: Also write to ``mmr.log``
            subsystem_levels: Per-subsystem overrides, e.g. ``{"engine": logging.DEBUG}``
            force: Replace handlers installed by an earlier call
        """
        if cls._configured and not force:
            return

        root = logging.getLogger(ROOT_LOGGER)
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        root.setLevel(level)
        root.addHandler(_console_handler(level))

        cls.log_file = None
        if log_to_file:
            directory = Path(log_dir) if log_dir else Path("logs")
            root.addHandler(_file_handler(directory, level))
            cls.log_file = directory / LOG_FILE

        for name, sub_level in (subsystem_levels or {}).items():
            logging.getLogger(f"{ROOT_LOGGER}.{name}").setLevel(sub_level)

        cls._configured = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Logger for one subsystem, configuring defaults on first use."""
        if not cls._configured:
            cls.setup()
        return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def get_logger(name: str) -> logging.Logger:
    return MMRLogger.get_logger(name)


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    log_to_file: bool = False,
    subsystem_levels: Optional[Dict[str, int]] = None,
):
    """Reconfigure logging, e.g. from an MMRConfig."""
    MMRLogger.setup(
        level=level,
        log_dir=log_dir,
        log_to_file=log_to_file,
        subsystem_levels=subsystem_levels,
        force=True,
    )
