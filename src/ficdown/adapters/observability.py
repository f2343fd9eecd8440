"""Runtime logging configuration and the console diagnostic sink."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from ficdown.config import RuntimeSettings

_CONFIGURED = False


def configure_runtime_logging(settings: RuntimeSettings, *, debug: bool = False) -> None:
    """Configure console + optional rotating file logs once per process."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    default_level = logging.DEBUG if debug else logging.INFO
    level = getattr(logging, settings.log_level or "", default_level)
    if not isinstance(level, int):
        level = default_level

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(stream_handler)

    if settings.log_path is not None:
        settings.log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=settings.log_path,
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    _CONFIGURED = True


class ConsoleDiagnostics:
    """Diagnostic sink backed by `logging`, with raw lines on standard output."""

    def __init__(self, name: str = "ficdown") -> None:
        self._logger = logging.getLogger(name)

    def log(self, message: str) -> None:
        self._logger.info(message)

    def debug(self, message: str) -> None:
        self._logger.debug(message)

    def error(self, message: str) -> None:
        self._logger.error(message)

    def exception(self, message: str) -> None:
        self._logger.exception(message)

    def raw(self, line: str) -> None:
        print(line)
