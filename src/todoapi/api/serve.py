"""Run the todo API under uvicorn.

Used by ``python -m todoapi`` and the ``todoapi`` console script. Logging is
configured by the caller; uvicorn is told not to install its own config.
"""

from __future__ import annotations

import logging

from todoapi.config import Settings

logger = logging.getLogger(__name__)


def run_api_server(
    settings: Settings,
    host: str | None = None,
    port: int | None = None,
    dev: bool = False,
    log_level: str | None = None,
) -> None:
    """Start the API server and block until it exits.

    In dev mode the reloader builds the app in a child process from the
    environment; only host, port and ``log_level`` are taken from the caller.
    """
    import uvicorn

    host = host or settings.host
    port = port or settings.port

    logger.info("Server running on port %d", port)
    display_host = "localhost" if host == "0.0.0.0" else host
    logger.info("API docs: http://%s:%d/api-docs", display_host, port)

    if dev:
        import pathlib

        src_dir = str(pathlib.Path(__file__).resolve().parent.parent)
        uvicorn.run(
            "todoapi.api.app:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            reload_dirs=[src_dir],
            reload_includes=["*.py"],
            log_level=(log_level or settings.log_level).lower(),
            log_config=None,
        )
    else:
        from todoapi.api.app import create_app

        uvicorn.run(create_app(settings), host=host, port=port, log_config=None)
