from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from scenevault.env import get_logging_env

# Shared by RichHandler, rich tables and progress bars so output interleaves.
# No fixed file: writes go to whatever sys.stdout is at print time.
UI_CONSOLE = Console(soft_wrap=True)


class ConsoleGateFilter(logging.Filter):
    """
    Drop console records when quiet mode is on, and records logged with
    extra={"file_only": True}.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "file_only", False):
            return False
        return not get_logging_env().quiet


def build_console_handler(level: int = logging.INFO) -> logging.Handler:
    handler = RichHandler(
        console=UI_CONSOLE,
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setLevel(level)

    # RichHandler renders the level column; the formatter must not repeat it.
    handler.setFormatter(logging.Formatter("%(message)s"))

    handler.addFilter(ConsoleGateFilter())
    return handler
