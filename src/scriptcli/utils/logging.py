"""Logging utilities."""

import logging
import sys


DEBUG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


def setup_logging(level: str = "INFO"):
    """Send log records to stderr so they stay out of installer output.

    Debug runs get timestamps and logger names; other levels keep lines short
    because they interleave with interactive prompts.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    log_format = DEBUG_FORMAT if log_level <= logging.DEBUG else CONSOLE_FORMAT

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    # Request lines from the HTTP stack would drown out our own
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
