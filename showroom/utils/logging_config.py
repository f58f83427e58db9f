"""
Logging setup for the showroom service.

Handlers log through ``logging.getLogger(__name__)``; this module wires the
root logger once per process so gunicorn and the dev server print the same
format.
"""
import logging
import os
import sys

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

_configured = False


def setup_logging(level: str = None) -> None:
    """Configure the root logger. Safe to call more than once."""
    global _configured
    if _configured:
        return

    level_name = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    _configured = True
