"""Console and file logging for probe runs."""

from __future__ import annotations

import atexit
import importlib.util
import logging
import logging.handlers
from pathlib import Path
import queue
from typing import Any

LOGGER_NAME = "kafkaprobe"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

if importlib.util.find_spec("rich") is not None:
    from rich.console import Console
    from rich.logging import RichHandler
    from rich.text import Text
else:
    Console = RichHandler = Text = None


def _console_handler() -> logging.Handler:
    if RichHandler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s: %(message)s"))
        return handler
    handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    return handler


def setup_logging() -> logging.Logger:
    """Return the probe logger with a single console handler attached."""

    probe_logger = logging.getLogger(LOGGER_NAME)
    probe_logger.setLevel(logging.INFO)
    if not probe_logger.handlers:
        probe_logger.addHandler(_console_handler())
    probe_logger.propagate = False
    return probe_logger


logger = setup_logging()


def configure_logging(level_name: str) -> None:
    """Set the probe logger level by name. Unknown names fall back to INFO."""

    level = logging.getLevelName(level_name.upper())
    logger.setLevel(level if isinstance(level, int) else logging.INFO)


class _FileSink:
    """Queue-fed file handler owned by a background listener."""

    def __init__(self, path: Path) -> None:
        self.path = path
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        records: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
        self.handler = logging.handlers.QueueHandler(records)
        self.handler.setLevel(logging.DEBUG)
        self.listener = logging.handlers.QueueListener(records, file_handler)

    def start(self) -> None:
        self.listener.start()
        logger.addHandler(self.handler)

    def stop(self) -> None:
        logger.removeHandler(self.handler)
        # QueueListener.stop() leaves its handlers open.
        self.listener.stop()
        for handler in self.listener.handlers:
            handler.close()


_file_sink: _FileSink | None = None


def enable_file_logging(log_path: Path) -> None:
    """Mirror probe logging into ``log_path`` at DEBUG level."""

    global _file_sink

    log_path = log_path.expanduser()
    if _file_sink is not None:
        if _file_sink.path == log_path:
            return
        disable_file_logging()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    _file_sink = _FileSink(log_path)
    _file_sink.start()


def disable_file_logging() -> None:
    """Flush and detach the file log, if one is active."""

    global _file_sink

    if _file_sink is not None:
        _file_sink.stop()
        _file_sink = None


atexit.register(disable_file_logging)


def _styled(message: str, style: str) -> Any:
    return message if Text is None else Text(message, style=style)


def log_info(message: str, style: str = "bold white") -> None:
    logger.info(_styled(message, style))


def log_success(message: str) -> None:
    log_info(message, style="bold green")


def log_warning(message: str) -> None:
    logger.warning(_styled(message, "bold yellow"))


def log_error(message: str) -> None:
    logger.error(_styled(message, "bold red"))
