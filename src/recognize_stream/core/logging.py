"""Logging for recognize-stream.

Module loggers are children of the ``recognize_stream`` package logger, which
owns the only handler: a QueueHandler drained by a background QueueListener.
Socket callbacks on the event loop therefore never wait on file I/O. The sink
writes to ``recognize-stream.log`` under RECOGNIZE_STREAM_LOG_DIR (default
``~/.recognize-stream/logs``) and, when RECOGNIZE_STREAM_CONSOLE_LOGS is set,
to stderr so transcripts on stdout stay clean.
"""

import atexit
import logging
import os
import sys
import threading
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import SimpleQueue
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import ConfigLoader

PACKAGE_LOGGER = "recognize_stream"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_lock = threading.Lock()
_listener: QueueListener | None = None


def _logs_dir() -> Path | None:
    logs_dir = Path(os.environ.get("RECOGNIZE_STREAM_LOG_DIR") or Path.home() / ".recognize-stream" / "logs")
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        return None
    return logs_dir


def _sink_handlers() -> list[logging.Handler]:
    handlers: list[logging.Handler] = []

    logs_dir = _logs_dir()
    if logs_dir is not None:
        try:
            handlers.append(RotatingFileHandler(logs_dir / "recognize-stream.log", maxBytes=10 * 1024 * 1024, backupCount=3))
        except OSError:
            pass

    if os.environ.get("RECOGNIZE_STREAM_CONSOLE_LOGS", "").strip().lower() in {"1", "true", "yes"}:
        handlers.append(logging.StreamHandler(sys.stderr))

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _stop_listener() -> None:
    global _listener
    if _listener is not None:
        _listener.stop()
        _listener = None


def _install_sink(package: logging.Logger) -> None:
    global _listener
    package.propagate = False
    handlers = _sink_handlers()
    if not handlers:
        package.addHandler(logging.NullHandler())
        return

    queue: SimpleQueue = SimpleQueue()
    package.addHandler(QueueHandler(queue))
    _listener = QueueListener(queue, *handlers)
    _listener.start()
    atexit.register(_stop_listener)


def configure_logging(config: "ConfigLoader | None" = None, level: str | None = None) -> logging.Logger:
    """Install the package sink once and apply a level to it.

    Args:
        config: Source of ``logging.level``; the global config by default
        level: Explicit level name, overriding the configured one

    Returns:
        The package logger

    """
    if level is None:
        if config is None:
            from .config import get_config

            config = get_config()
        level = config.log_level

    package = logging.getLogger(PACKAGE_LOGGER)
    with _lock:
        if not package.handlers:
            _install_sink(package)
    package.setLevel(getattr(logging, level.upper()))
    return package


def setup_logging(module_name: str) -> logging.Logger:
    """Logger for a recognize-stream module, installing the sink on first use."""
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        configure_logging()
    return logging.getLogger(module_name)


def get_logger(module_name: str) -> logging.Logger:
    return setup_logging(module_name)


__all__ = ["configure_logging", "setup_logging", "get_logger"]
