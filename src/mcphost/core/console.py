"""Rich console and logging for mcphost.

stdout is reserved for JSON-RPC frames while ``serve`` runs, so:
    - console: stdout console, used by the informational CLI commands only
    - stderr_console: where every log record is rendered
    - setup_logging(): install one RichHandler on the root and ``mcphost`` loggers
    - get_logger(): child loggers under the ``mcphost`` namespace
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "mcphost"

console = Console()
stderr_console = Console(stderr=True)


def resolve_level(level: str | int) -> int:
    """Turn ``"debug"``, ``"WARNING"`` or ``10`` into a numeric level.

    Unknown names resolve to WARNING.
    """
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.WARNING


def _stderr_handler(level: int) -> RichHandler:
    # Logged payloads carry square brackets; never parse them as markup.
    handler = RichHandler(
        console=stderr_console,
        level=level,
        markup=False,
        rich_tracebacks=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    return handler


def setup_logging(level: str | int = logging.WARNING, verbose: bool = False) -> logging.Logger:
    """Route all logging to stderr through Rich and return the ``mcphost`` logger.

    Calling it again replaces the previous handlers rather than stacking them.
    """
    numeric_level = logging.DEBUG if verbose else resolve_level(level)
    handler = _stderr_handler(numeric_level)

    for target in (logging.getLogger(), logging.getLogger(ROOT_LOGGER_NAME)):
        target.handlers.clear()
        target.setLevel(numeric_level)
        target.addHandler(handler)

    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    app_logger.propagate = False
    return app_logger


def get_logger(name: str | None = None) -> logging.Logger:
    """``get_logger("registry")`` returns the ``mcphost.registry`` logger."""
    if not name or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = [
    "ROOT_LOGGER_NAME",
    "console",
    "get_logger",
    "resolve_level",
    "setup_logging",
    "stderr_console",
]
