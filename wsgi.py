"""
WSGI entry point for BizDash Analytics Dashboard.

This module creates the Dash application and exposes its Flask server
for use with production WSGI servers like Gunicorn.

Usage with Gunicorn:
    gunicorn -c gunicorn_config.py wsgi:server
"""

import logging

from bizdash.dashboard.server import create_server
from bizdash.utils.config import Config
from bizdash.utils.logging_config import setup_logging


logger = logging.getLogger(__name__)

# Global instance (shared across threads; per worker process)
_components = None


def create_app():
    """
    Create and configure the Dash application.

    Returns:
        Flask server instance (for WSGI)
    """
    global _components

    config = Config()
    setup_logging(level=config.log_level, log_dir=config.log_dir)

    logger.info("=" * 60)
    logger.info("BizDash Analytics - Dashboard (Gunicorn)")
    logger.info("=" * 60)

    _components = create_server(config)

    # Return the Flask server for Gunicorn
    return _components.dashboard.server


# Create the application
# This is called when Gunicorn imports this module
server = create_app()


def shutdown():
    """Cleanup function for graceful shutdown."""
    logger.info("[SHUTDOWN] Stopping background workers...")
    if _components:
        _components.shutdown()
    logger.info("[SHUTDOWN] Shutdown complete")
