"""Logging helper for marktoc.

Example:
    >>> from marktoc.utils.logger import get_logger
    >>> get_logger("toc").name
    'marktoc.toc'
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a standard library logger under the ``marktoc`` namespace.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance
    """
    if not (name == "marktoc" or name.startswith("marktoc.")):
        name = f"marktoc.{name}"
    return logging.getLogger(name)
