"""
Logging configuration for repositories and scripts.

Provides a collection-tagged logger so every message names the
database and collection it concerns. Supports a DEBUG_MODE switch for
verbose per-operation logging.
"""

import logging
import os
import sys
from typing import Optional


# Global debug mode flag - can be set via environment or at runtime
_GLOBAL_DEBUG_MODE = os.getenv("DEBUG_MODE", "false").lower() == "true"


def set_global_debug_mode(enabled: bool) -> None:
    """Set global debug mode."""
    global _GLOBAL_DEBUG_MODE
    _GLOBAL_DEBUG_MODE = enabled


def is_debug_mode() -> bool:
    """Check if debug mode is enabled globally."""
    return _GLOBAL_DEBUG_MODE


class RepositoryLogger:
    """
    Logger that prefixes messages with the bound [database.collection].

    The binding can change when a repository is re-configured.
    """

    def __init__(
        self,
        name: str,
        namespace: Optional[str] = None,
        debug_mode: Optional[bool] = None,
    ):
        """
        Args:
            name: Logger name (usually __name__)
            namespace: "database.collection" the repository is bound to
            debug_mode: If True, enables DEBUG level for this logger.
                       If None, uses global debug mode setting.
        """
        self.logger = logging.getLogger(name)
        self.namespace = namespace

        self._debug_mode = debug_mode if debug_mode is not None else is_debug_mode()
        if self._debug_mode:
            self.logger.setLevel(logging.DEBUG)

    def bind(self, namespace: Optional[str]) -> None:
        """Switch the namespace used as message prefix."""
        self.namespace = namespace

    def _format_message(self, message: str) -> str:
        if self.namespace:
            return f"[{self.namespace}] {message}"
        return message

    def debug(self, message: str, **kwargs):
        self.logger.debug(self._format_message(message), **kwargs)

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_message(message), **kwargs)

    def warning(self, message: str, **kwargs):
        self.logger.warning(self._format_message(message), **kwargs)

    def error(self, message: str, **kwargs):
        self.logger.error(self._format_message(message), **kwargs)


def setup_logging(level: str = "INFO", format: str = "simple") -> None:
    """
    Configure global logging settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Log format ("simple" or "json")
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Remove existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    if format == "json":
        formatter = logging.Formatter(
            '{"time": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}'
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)


def get_logger(
    name: str,
    namespace: Optional[str] = None,
    debug_mode: Optional[bool] = None,
) -> RepositoryLogger:
    """
    Get a repository logger instance.

    Args:
        name: Logger name (usually __name__)
        namespace: Optional "database.collection" prefix
        debug_mode: If True, enables DEBUG level. If None, uses global setting.
    """
    return RepositoryLogger(name, namespace, debug_mode)
