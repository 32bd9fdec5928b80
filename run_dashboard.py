"""
BizDash Analytics - Dashboard Launcher

Run this script to start the analytics dashboard and its JSON API.

Features:
- Sales, performance, and financial payloads under /api
- TTL result cache (in-memory, or Redis with CACHE_BACKEND=redis)
- Background sweep of expired cache entries

Usage:
    python run_dashboard.py
    python run_dashboard.py --port 8080
    python run_dashboard.py --debug
"""

import argparse
import logging
import signal
import sys
from typing import Optional

from bizdash.dashboard.server import ServerComponents, create_server
from bizdash.utils.config import Config
from bizdash.utils.logging_config import setup_logging


_components: Optional[ServerComponents] = None


def create_wsgi_app():
    """
    Create the WSGI application for production servers (Gunicorn/uWSGI).

    Usage:
        gunicorn -c gunicorn_config.py "run_dashboard:create_wsgi_app()"

    Returns:
        Flask server instance
    """
    global _components

    config = Config()
    setup_logging(level=config.log_level, log_dir=config.log_dir)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("BizDash Analytics - Dashboard (WSGI)")
    logger.info("=" * 60)

    _components = create_server(config)
    return _components.dashboard.server


def main():
    """Launch the BizDash Analytics dashboard."""
    try:
        config = Config()
    except ValueError as error:
        print(f"[ERROR] Invalid configuration: {error}", file=sys.stderr)
        return 1

    parser = argparse.ArgumentParser(
        description="BizDash Analytics - Dashboard"
    )
    parser.add_argument(
        "--host",
        default=config.dashboard.host,
        help="Host address to bind (default: 127.0.0.1, or DASH_HOST env)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=config.dashboard.port,
        help="Port number (default: 8050, or DASH_PORT env)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    args = parser.parse_args()

    # Setup logging
    log_level = logging.DEBUG if args.debug else config.log_level
    setup_logging(level=log_level, log_dir=config.log_dir)
    logger = logging.getLogger(__name__)

    global _components

    def graceful_shutdown(signum, frame):
        """Handle shutdown signals gracefully."""
        sig_name = signal.Signals(signum).name
        logger.info(f"[SHUTDOWN] Received signal {sig_name}, initiating graceful shutdown...")
        if _components:
            _components.shutdown()
        logger.info("[SHUTDOWN] Background workers stopped, exiting...")
        sys.exit(0)

    signal.signal(signal.SIGTERM, graceful_shutdown)
    signal.signal(signal.SIGINT, graceful_shutdown)

    logger.info("=" * 60)
    logger.info("BizDash Analytics - Dashboard")
    logger.info("=" * 60)

    try:
        _components = create_server(config)
        logger.info(f"[OK] Dashboard starting at http://{args.host}:{args.port}")
        _components.dashboard.run(host=args.host, port=args.port, debug=args.debug)

    except KeyboardInterrupt:
        logger.info("[INFO] Dashboard stopped by user")
        return 0
    except Exception as error:
        logger.error(f"[ERROR] Dashboard failed: {error}", exc_info=True)
        return 1
    finally:
        if _components:
            _components.shutdown()

    return 0


if __name__ == "__main__":
    sys.exit(main())
