#!/usr/bin/env python3
"""
Launcher for the Bookshelf API server.

Usage:
    python run_api.py           Serve the API with the configured settings
    python run_api.py --check   Print the effective settings and exit
"""

import sys
from pathlib import Path
from typing import Any, Dict

import uvicorn

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from api.config import APIConfig, config
from utilities.logger import get_logger, setup_logging

logger = get_logger(__name__)


def server_options(settings: APIConfig) -> Dict[str, Any]:
    """
    Translate API settings into uvicorn.run keyword arguments.

    uvicorn's own logging config is disabled so its records go through the
    structlog setup done at application startup.
    """
    return {
        "host": settings.host,
        "port": settings.port,
        "reload": settings.debug,
        "log_level": settings.log_level.lower(),
        "log_config": None,
        "access_log": settings.debug,
    }


def describe(settings: APIConfig) -> Dict[str, Any]:
    """Summarize the settings that decide where the server listens and stores."""
    return {
        "host": settings.host,
        "port": settings.port,
        "debug": settings.debug,
        "database": settings.mongodb_database,
        "collection": settings.mongodb_collection,
        "tls_credentials": bool(settings.mongodb_tls_certificate_key_file),
    }


def main():
    """Run the API server."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file,
        debug=config.debug
    )

    if len(sys.argv) > 1:
        if sys.argv[1] == '--check':
            logger.info("Effective settings", **describe(config))
            return
        print(f"Unknown argument: {sys.argv[1]}")
        print(__doc__)
        sys.exit(2)

    logger.info("Launching Bookshelf API server", **describe(config))
    uvicorn.run("api.main:app", **server_options(config))


if __name__ == "__main__":
    main()
