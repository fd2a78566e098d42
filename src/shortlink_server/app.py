#!/usr/bin/env python3
"""
Standalone URL shortener server with an in-memory mapping store.

Mappings live for the process lifetime only.

Usage:
    python -m shortlink_server

Environment variables:
    HOST - Interface to bind (default 0.0.0.0)
    PORT - Port to listen on (default 8080)
    BASE_URL - Prefix for returned short URLs (default http://localhost:PORT)
    LOG_LEVEL - Logging level
"""

import os
import sys

import uvicorn
from aws_lambda_powertools import Logger

from shortlink_commons.http_utils import SERVICE_NAME
from shortlink_commons.store import LockedInMemoryStore
from .app_factory import create_app

DEFAULT_HOST = '0.0.0.0'
DEFAULT_PORT = 8080

logger = Logger(service=SERVICE_NAME)


def load_settings(environ=None) -> dict:
    """Read server settings from the environment."""
    environ = os.environ if environ is None else environ

    port_value = environ.get('PORT', str(DEFAULT_PORT))
    try:
        port = int(port_value)
    except ValueError:
        raise ValueError(f"PORT must be an integer, got: '{port_value}'")

    return {
        'host': environ.get('HOST', DEFAULT_HOST),
        'port': port,
        'base_url': environ.get('BASE_URL') or f"http://localhost:{port}",
        'log_level': environ.get('LOG_LEVEL', 'INFO').lower(),
    }


def main():
    """Main entry point."""
    try:
        settings = load_settings()
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    app = create_app(store=LockedInMemoryStore(), base_url=settings['base_url'])

    logger.info(f"Starting server on {settings['host']}:{settings['port']}")
    uvicorn.run(
        app,
        host=settings['host'],
        port=settings['port'],
        log_level=settings['log_level'],
    )


if __name__ == "__main__":
    main()
