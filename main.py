# -*- coding: utf-8 -*-

# Shapegate
# Copyright (C) 2025 Jwadow
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Shapegate - request validation pipeline demo server.

Application entry point. Creates the FastAPI app and starts uvicorn.

Usage:
    # Using default settings (host: 0.0.0.0, port: 8000)
    python main.py

    # With CLI arguments (highest priority)
    python main.py --port 9000
    python main.py --host 127.0.0.1 --port 9000

    # With environment variables (medium priority)
    SERVER_PORT=9000 python main.py

Priority: CLI args > Environment variables > Default values
"""

import argparse
import logging
import sys
from typing import Tuple

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from shapegate.config import (
    APP_DESCRIPTION,
    APP_TITLE,
    APP_VERSION,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
    LOG_LEVEL,
    SERVER_HOST,
    SERVER_PORT,
)
from shapegate.errors import guard_fault_response
from shapegate.routes import router
from shapegate.validation import GuardFault

# --- Loguru Configuration ---
logger.remove()
logger.add(
    sys.stderr,
    level=LOG_LEVEL,
    colorize=True,
    format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
)


class InterceptHandler(logging.Handler):
    """
    Intercepts logs from standard logging and redirects them to loguru.

    This allows capturing uvicorn logs and displaying them
    in the same format as the application logs.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging_intercept() -> None:
    """Route uvicorn and other stdlib loggers through loguru."""
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False


def create_app() -> FastAPI:
    """Create the FastAPI application with all routes registered."""
    app = FastAPI(title=APP_TITLE, description=APP_DESCRIPTION, version=APP_VERSION)

    @app.exception_handler(GuardFault)
    async def guard_fault_handler(request: Request, exc: GuardFault) -> JSONResponse:
        logger.opt(exception=exc).error(
            "[GuardFault] Guard predicate raised on {} {}", request.method, request.url.path
        )
        return guard_fault_response(exc)

    app.include_router(router)
    return app


app = create_app()


def parse_cli_args() -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Namespace with host and port (None when not given on the command line)
    """
    parser = argparse.ArgumentParser(
        description=f"{APP_TITLE} - {APP_DESCRIPTION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                         # Use defaults (0.0.0.0:8000)
  python main.py --port 9000             # Custom port
  python main.py -H 127.0.0.1 -p 9000    # Local only, custom port
  SERVER_PORT=9000 python main.py        # Port from environment
        """,
    )
    parser.add_argument(
        "-H",
        "--host",
        type=str,
        default=None,
        help=f"Server host address (default: {DEFAULT_SERVER_HOST}, env: SERVER_HOST)",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=None,
        help=f"Server port (default: {DEFAULT_SERVER_PORT}, env: SERVER_PORT)",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {APP_VERSION}",
    )
    return parser.parse_args()


def resolve_server_config(args: argparse.Namespace) -> Tuple[str, int]:
    """
    Resolve host and port: CLI args > environment > defaults.

    Each value is resolved independently.

    Args:
        args: Parsed command-line arguments

    Returns:
        (host, port)
    """
    if args.host is not None:
        host = args.host
        logger.debug(f"Host from CLI argument: {host}")
    elif SERVER_HOST != DEFAULT_SERVER_HOST:
        host = SERVER_HOST
        logger.debug(f"Host from environment: {host}")
    else:
        host = DEFAULT_SERVER_HOST
        logger.debug(f"Host from default: {host}")

    if args.port is not None:
        port = args.port
        logger.debug(f"Port from CLI argument: {port}")
    elif SERVER_PORT != DEFAULT_SERVER_PORT:
        port = SERVER_PORT
        logger.debug(f"Port from environment: {port}")
    else:
        port = DEFAULT_SERVER_PORT
        logger.debug(f"Port from default: {port}")

    return host, port


def print_startup_banner(host: str, port: int) -> None:
    """
    Print the startup banner with server URLs.

    Args:
        host: Bind host (0.0.0.0 is displayed as localhost)
        port: Bind port
    """
    display_host = "localhost" if host == "0.0.0.0" else host
    url = f"http://{display_host}:{port}"

    print()
    print(f"  {APP_TITLE} v{APP_VERSION}")
    print()
    print(f"  Server running at: {url}")
    print(f"  API Docs:          {url}/docs")
    print(f"  Health Check:      {url}/health")
    print()


def main() -> None:
    args = parse_cli_args()
    host, port = resolve_server_config(args)

    print_startup_banner(host, port)
    setup_logging_intercept()

    logger.info(f"Starting {APP_TITLE} on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
