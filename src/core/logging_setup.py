"""Logging setup.

Standard-library loggers per module, rendered on the console with Rich so
warnings share the look of the rest of the CLI output.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

NOISY_LOGGERS = [
    "httpx",
    "httpcore",
]


def configure_logging(level: str | int = logging.WARNING, *, console: Console | None = None) -> None:
    """Configure the root logger once per process.

    Calling it again replaces the previous Rich handler instead of stacking.
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
