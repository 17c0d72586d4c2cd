"""
Logging configuration for the checker and the bot.
"""

import logging
import sys

from .config import settings


def setup_logging(level: str | None = None) -> None:
    """
    Configure basic logging for the whole application.

    - Logs to stdout so Docker can capture output.
    - Level comes from LOG_LEVEL (INFO by default).
    - httpx is noisy at INFO (python-telegram-bot polls through it), keep it at WARNING.
    """
    logging.basicConfig(
        stream=sys.stdout,
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
