"""Root logger setup for the command line."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "INFO", console: Optional[Console] = None) -> None:
    """Route all logging through a rich handler at ``level``."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # google-genai and aiohttp are chatty at INFO
    for noisy in ("httpx", "google_genai", "aiohttp"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
