"""
Centralized logging configuration for electrum-peers.

Provides colored console output and separate loggers for the
client subsystems (transport, exchange, discovery, cli).

Components never log through a process-wide instance directly: each one
takes a ``logging.Logger`` at construction and only falls back to
``get_logger(<subsystem>)`` when none is supplied.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import colorlog


ROOT_LOGGER_NAME = "electrum_peers"


class ElectrumLogger:
    """Centralized logger for electrum-peers components"""

    _initialized = False
    _log_dir: Optional[Path] = None

    @classmethod
    def setup(
        cls,
        level: int = logging.INFO,
        log_dir: Optional[str] = None,
        log_to_file: bool = False,
    ):
        """
        Setup logging configuration.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_dir: Directory for log files. If None, uses ./logs
            log_to_file: Whether to write logs to file
        """
        if cls._initialized:
            return

        if log_to_file:
            cls._log_dir = Path(log_dir) if log_dir else Path("logs")
            cls._log_dir.mkdir(exist_ok=True, parents=True)

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        # Diagnostics go to stderr so stdout stays clean for command output
        console_handler = colorlog.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_formatter = colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

        if log_to_file and cls._log_dir:
            file_handler = logging.FileHandler(cls._log_dir / "electrum_peers.log")
            file_handler.setLevel(level)
            file_formatter = logging.Formatter(
                "%(asctime)s [%(name)s] %(levelname)-8s %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
            file_handler.setFormatter(file_formatter)
            root_logger.addHandler(file_handler)

        cls._initialized = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get a logger for a specific subsystem.

        Unlike setup(), this never installs handlers: library code that
        only asks for a logger leaves handler wiring to the application.

        Args:
            name: Subsystem name (e.g., 'transport', 'discovery')

        Returns:
            Logger instance
        """
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    @classmethod
    def reset(cls) -> None:
        """Drop installed handlers so setup() can run again."""
        logging.getLogger(ROOT_LOGGER_NAME).handlers.clear()
        cls._initialized = False
        cls._log_dir = None


# Convenience functions
def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific subsystem"""
    return ElectrumLogger.get_logger(name)


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    log_to_file: bool = False,
):
    """Setup logging configuration"""
    ElectrumLogger.setup(level=level, log_dir=log_dir, log_to_file=log_to_file)
