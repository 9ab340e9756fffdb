"""
IO utilities package for pkgsync core.

Hosts the atomic, byte-preserving file helpers used by the registry and
the manifest patcher.
"""
from __future__ import annotations

from . import utils as _utils  # noqa: F401

__all__ = ["utils"]

utils = _utils
