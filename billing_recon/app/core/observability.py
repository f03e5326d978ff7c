"""
Logging setup for the reconciliation tool.

Structured context is passed to the logger through ``extra`` dictionaries,
while the human-readable report goes to stdout.
"""

import logging
import sys

# Configure structured logger
logger = logging.getLogger("billing_recon")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a single stream handler to the package logger.
    
    Safe to call more than once; later calls only change the level.
    """
    logger.setLevel(level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
