from __future__ import annotations

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def configure_logging(level: int = logging.INFO, log_path: Optional[str] = None) -> None:
    """Attach console (and optionally file) handlers to the root logger once.

    Later calls only adjust the level.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    if getattr(logger, "_osresolve_configured", False):
        return

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_path:
        handlers.append(logging.FileHandler(log_path))

    for handler in handlers:
        handler.setFormatter(fmt)
        logger.addHandler(handler)

    setattr(logger, "_osresolve_configured", True)
    logging.getLogger(__name__).debug("Logging initialized (level=%s, file=%s)", logging.getLevelName(level), log_path)
