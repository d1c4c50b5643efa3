"""Console logging setup using Rich.

Call ``setup_logging()`` once at startup, before the server begins accepting
requests. Module code only ever does ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

# Third-party loggers that are chatty at INFO
NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "pymongo",
    "uvicorn.access",
]


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a Rich console handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR). Unknown names
            fall back to INFO.
    """
    level = level.upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level = "INFO"

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="[%X]"))

    logging.basicConfig(level=getattr(logging, level), handlers=[handler], force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # Route uvicorn's own loggers through the same handler
    for name in ("uvicorn", "uvicorn.error"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers = [handler]
        uv_logger.propagate = False
