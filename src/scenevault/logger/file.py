from __future__ import annotations

import logging
from pathlib import Path

from . import state as _state

FILE_FORMAT = "%(asctime)s | [%(levelname)s] | %(name)s | %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


class RedactSecretsFilter(logging.Filter):
    """Replace registered credentials in the rendered message with a preview."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not _state.SECRETS:
            return True

        message = record.getMessage()
        masked = message
        for secret in _state.SECRETS:
            if secret in masked:
                masked = masked.replace(secret, f"{secret[:4]}***")

        if masked != message:
            record.msg = masked
            record.args = None
        return True


def build_file_handler(logfile: Path) -> logging.FileHandler:
    logfile.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(logfile, encoding="utf-8", delay=True)
    handler.setLevel(logging.NOTSET)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
    handler.addFilter(RedactSecretsFilter())
    return handler


def repoint_file_handler(handler: logging.FileHandler, new_logfile: Path) -> None:
    """Move an existing handler to a new run log without re-adding it to root."""
    new_logfile.parent.mkdir(parents=True, exist_ok=True)

    handler.acquire()
    try:
        handler.close()
        handler.baseFilename = str(new_logfile)
        handler.stream = handler._open()
    finally:
        handler.release()
