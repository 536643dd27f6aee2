"""Logging for ``dkb_import``.

Every module logs through a child of the ``dkb_import`` logger obtained from
:func:`get_logger`. Output is off (a ``NullHandler``) until the CLI, or an
application embedding the importer, calls :func:`configure_logging` once.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "dkb_import"
_LEVEL_ENV = "DKB_IMPORT_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _level_from_str(value: str) -> int | None:
    value = value.strip().upper()
    if value.isdigit():
        return int(value)
    return logging.getLevelNamesMapping().get(value)


def _resolve_level(level: int | str | None) -> int:
    """Explicit ``level`` first, then ``DKB_IMPORT_LOG_LEVEL``, then INFO.

    Unrecognized names fall through to the next source.
    """

    if isinstance(level, int):
        return level
    for candidate in (level, os.getenv(_LEVEL_ENV)):
        if candidate:
            parsed = _level_from_str(candidate)
            if parsed is not None:
                return parsed
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Send ``dkb_import`` log records to ``stream`` (default stderr).

    Only the first call has an effect. The package logger stops propagating
    so a host application's root handlers do not print records twice.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in [h for h in pkg_logger.handlers if isinstance(h, logging.NullHandler)]:
        pkg_logger.removeHandler(h)

    resolved = _resolve_level(level)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(resolved)
    pkg_logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
