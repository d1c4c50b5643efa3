"""todoapi entry point.

Examples:
  todoapi                        Start the API on $HOST:$PORT (default 0.0.0.0:5001)
  todoapi --port 8080            Override the port
  todoapi --dev                  Auto-reload on code changes
  python -m todoapi              Same as ``todoapi``
"""

import argparse
import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

from todoapi.config import get_settings
from todoapi.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _package_version() -> str:
    try:
        return get_version("todoapi")
    except PackageNotFoundError:
        return "unknown"


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Todo API - authenticated personal todo lists over REST",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--host", default=None, help="Bind address (default: $HOST or 0.0.0.0)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Port (default: $PORT or 5001)")
    parser.add_argument("--dev", action="store_true", help="Auto-reload on code changes")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {_package_version()}")

    args = parser.parse_args()

    settings = get_settings()
    setup_logging(level=args.log_level or settings.log_level)

    from todoapi.api.serve import run_api_server

    try:
        run_api_server(
            settings,
            host=args.host,
            port=args.port,
            dev=args.dev,
            log_level=args.log_level,
        )
    except KeyboardInterrupt:
        logger.info("Todo API stopped")


if __name__ == "__main__":
    main()
