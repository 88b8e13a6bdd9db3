"""stderr logging for the credential_process command."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from vault_aws_credentials.config import load_settings

_logger = logging.getLogger(__name__)

_FORMATTER = logging.Formatter(
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)


def _open_log_file(path: str) -> tuple[logging.Handler | None, OSError | None]:
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path), None
    except OSError as exc:
        return None, exc


def configure_logging() -> None:
    """Route log records to stderr, and to ``LOG_FILE`` when it is set.

    stdout is left alone: it carries the credential document.
    """
    settings = load_settings().logging
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    file_error = None
    if settings.file:
        file_handler, file_error = _open_log_file(settings.file)
        if file_handler is not None:
            handlers.append(file_handler)

    for handler in handlers:
        handler.setFormatter(_FORMATTER)
    logging.basicConfig(
        level=getattr(logging, settings.level.upper(), logging.INFO),
        handlers=handlers,
        force=True,
    )

    if file_error is not None:
        _logger.warning("Failed to open log file %s: %s", settings.file, file_error)
