"""Logging configuration for the application."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger to write to stdout.

    The scraping libraries log every outbound request at DEBUG, so they
    are pinned to WARNING regardless of ``level``.
    """
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("play_scraper").setLevel(logging.WARNING)
    logging.getLogger("google_play_scraper").setLevel(logging.WARNING)
    logging.getLogger("playstore_api").setLevel(level.upper())
