"""Managed package registry interface."""
from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from pkgsync.core.models import ManagedPackage


@runtime_checkable
class PackageRegistry(Protocol):
    """Persistent store of packages tagged with the installer that owns them.

    Implementations raise :class:`~pkgsync.core.exceptions.RegistryMutationError`
    when an ``install`` or ``remove`` cannot be persisted.
    """

    def by_installer(self, installer: str) -> list[ManagedPackage]:
        """Return packages whose installer equals ``installer``."""
        ...

    def is_installed_at_path(self, path: Path) -> bool:
        """Return True if any package is registered at ``path``."""
        ...

    def install(self, path: Path, name: str, installer: str) -> ManagedPackage:
        """Register ``name`` at ``path`` under ``installer``.

        A name already owned by a different installer is a conflict and
        raises :class:`~pkgsync.core.exceptions.RegistryMutationError`.
        """
        ...

    def remove(self, name: str) -> ManagedPackage:
        """Remove package ``name`` and return the removed entry."""
        ...

    def root_package_install_path(self) -> Path:
        """Return the install path of the root package."""
        ...

    def set_root_package_name(self, name: str) -> None:
        """Record the display name of the root package."""
        ...


__all__ = ["PackageRegistry"]
