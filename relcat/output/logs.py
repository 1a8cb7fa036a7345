"""Diagnostic logging setup.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
``setup_logging`` once. Records go to stderr so they never mix with
rendered manifests on stdout.
"""

from __future__ import annotations

import logging

__all__ = ["setup_logging"]

_PACKAGE_LOGGER = "relcat"


def setup_logging(verbose: bool = False, *, log_level: str | None = None) -> logging.Logger:
    """Configure the ``relcat`` logger.

    Args:
        verbose: DEBUG instead of WARNING
        log_level: Explicit level name, overrides ``verbose``

    Returns:
        The package logger
    """
    from rich.console import Console
    from rich.logging import RichHandler

    if log_level:
        level = getattr(logging, log_level.upper(), logging.WARNING)
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=verbose,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
