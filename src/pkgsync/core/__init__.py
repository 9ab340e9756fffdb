"""pkgsync core library package.

Re-exports the exception hierarchy; components live in their own modules.
"""

from . import exceptions  # noqa: F401

__all__ = ["exceptions"]
