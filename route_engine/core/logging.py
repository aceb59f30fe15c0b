"""
Logging setup for worker processes and scripts.

Library modules only create module-level loggers; handlers are installed
once by the process entry point.
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level.upper())

    # OR-Tools and httpx are chatty at DEBUG
    logging.getLogger("httpx").setLevel(logging.WARNING)
