"""
Centralized logging configuration for the mongod supervisor.

setup_logging configures the root logger with:
- Console output on stdout
- File output to logs/{service_name}.log when a service name is given
- Quiet third-party loggers
"""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Optional

from .config import env_bool

# Thread-safe lock for logging configuration
_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)
_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _close_handlers(logger: logging.Logger) -> None:
    """Close all handlers for a logger, logging any errors."""
    for handler in list(logger.handlers):
        try:
            handler.close()
        except OSError as e:  # Best-effort cleanup operation  # policy_guard: allow-silent-handler
            _MODULE_LOGGER.debug("Handler close failed for logger '%s': %s", logger.name, e)
    logger.handlers = []


def _build_console_handler(level: int) -> logging.Handler:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    console_handler.setLevel(level)
    return console_handler


def _build_file_handler(service_name: str, logs_dir: Path) -> logging.Handler:
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"{service_name}.log"
    file_mode = "a" if env_bool("LOG_APPEND", or_value=False) else "w"
    file_handler = logging.handlers.WatchedFileHandler(log_path, mode=file_mode)
    file_handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    file_handler.setLevel(logging.DEBUG)
    return file_handler


def _suppress_noisy_third_parties() -> None:
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("psutil").setLevel(logging.WARNING)


def setup_logging(
    service_name: Optional[str] = None,
    *,
    level: int = logging.INFO,
    logs_dir: Optional[Path] = None,
) -> None:
    """Configure logging for the application.

    mongod's own log goes to its ``--logpath``; this only covers the
    supervisor. Calling it again replaces the previous handlers.
    """
    with _config_lock:
        root_logger = logging.getLogger()
        _close_handlers(root_logger)

        root_logger.addHandler(_build_console_handler(level))
        if service_name:
            target_dir = logs_dir if logs_dir is not None else Path.cwd() / "logs"
            root_logger.addHandler(_build_file_handler(service_name, target_dir))

        root_logger.setLevel(min(level, logging.DEBUG) if service_name else level)
        _suppress_noisy_third_parties()
