"""Logging setup for the CLI.

Library modules only create module-level loggers; the CLI configures
handlers once per invocation.
"""

import logging
import time
from collections.abc import Generator
from contextlib import contextmanager

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "autokit"

logger = logging.getLogger(LOGGER_NAME)


def configure_logging(verbose: bool = False, console: Console | None = None) -> None:
    """Attach a RichHandler to the package logger.

    Args:
        verbose: Emit DEBUG records when True, WARNING and above otherwise
        console: Console to render on (defaults to stderr)
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False


@contextmanager
def step_timer(step_name: str) -> Generator[None, None, None]:
    """Log the start and duration of a pipeline step."""
    logger.debug("%s: started", step_name)
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug("%s: finished in %.0f ms", step_name, elapsed_ms)
