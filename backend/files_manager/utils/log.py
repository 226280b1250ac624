"""Logging setup shared by the API process and the thumbnail worker."""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Noisy third-party loggers
    for noisy in ("pymongo", "redis", "PIL", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
