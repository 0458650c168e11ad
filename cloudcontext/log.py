"""Logging helpers.

Library classes accept an optional ``logging.Logger``. When none is given
they log to NULL_LOGGER, which discards everything. The CLI installs a
Rich handler on the root logger.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

SIGNATURE_LOGGER_NAME = "cloudcontext.signature"

NULL_LOGGER = logging.getLogger("cloudcontext.null")
NULL_LOGGER.addHandler(logging.NullHandler())
NULL_LOGGER.propagate = False


def configure_logging(verbose: bool = False) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Log at DEBUG when True, WARNING otherwise.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=Console(stderr=True, legacy_windows=True),
        show_path=False,
    )
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        handlers=[handler],
        force=True,
    )
