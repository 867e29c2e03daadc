from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "REVENUE_ENGINE_LOG_LEVEL"


def setup_logging(level: str | int | None = None) -> None:
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
