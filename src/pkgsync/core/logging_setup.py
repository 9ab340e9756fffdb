from __future__ import annotations

import logging
import sys
from pathlib import Path

from pkgsync.core.file_io.utils import ensure_parent_dir

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_PKGSYNC_HANDLER: logging.Handler | None = None
_CONFIGURED_TARGET: str | None = None
_JSON_MODE_NULL_HANDLER_INSTALLED: bool = False


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(*, level: str = "INFO", log_path: Path | None = None) -> None:
    """Install pkgsync's log handler on the ``pkgsync`` logger.

    Logs go to ``log_path`` when given, otherwise to stderr. Idempotent
    per-process: reconfiguring for the same target only updates the level.
    """
    global _PKGSYNC_HANDLER, _CONFIGURED_TARGET

    target = str(Path(log_path).resolve()) if log_path else "<stderr>"
    logger = logging.getLogger("pkgsync")
    logger.setLevel(_level_from_name(level))

    if _CONFIGURED_TARGET == target and _PKGSYNC_HANDLER is not None:
        _PKGSYNC_HANDLER.setLevel(_level_from_name(level))
        return

    if _PKGSYNC_HANDLER is not None:
        logger.removeHandler(_PKGSYNC_HANDLER)
        _PKGSYNC_HANDLER.close()
        _PKGSYNC_HANDLER = None

    handler: logging.Handler
    if log_path:
        ensure_parent_dir(Path(target))
        handler = logging.FileHandler(target, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level_from_name(level))
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)

    _PKGSYNC_HANDLER = handler
    _CONFIGURED_TARGET = target


def reset_logging_for_tests() -> None:
    """Test-only: remove the handler installed by :func:`configure_logging`."""
    global _PKGSYNC_HANDLER, _CONFIGURED_TARGET
    logger = logging.getLogger("pkgsync")
    logger.setLevel(logging.NOTSET)
    if _PKGSYNC_HANDLER is not None:
        logger.removeHandler(_PKGSYNC_HANDLER)
        _PKGSYNC_HANDLER.close()
    _PKGSYNC_HANDLER = None
    _CONFIGURED_TARGET = None


def suppress_lastresort_in_json_mode() -> None:
    """Keep stdlib logging's lastResort handler from polluting JSON output.

    Ensures the root logger has at least one handler (a NullHandler) when it
    otherwise has none.
    """
    global _JSON_MODE_NULL_HANDLER_INSTALLED

    root = logging.getLogger()
    if root.handlers or _JSON_MODE_NULL_HANDLER_INSTALLED:
        return
    root.addHandler(logging.NullHandler())
    _JSON_MODE_NULL_HANDLER_INSTALLED = True


__all__ = ["configure_logging", "reset_logging_for_tests", "suppress_lastresort_in_json_mode"]
