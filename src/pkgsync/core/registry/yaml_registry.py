"""YAML-backed managed package registry.

The registry file records the root package name and every managed package
with the installer that owns it::

    root:
      name: acme/app
    packages:
      - name: acme/blog
        path: /srv/app/vendor/acme/blog
        installer: Composer

Entries are sorted by name for deterministic output, and the file is saved
after every mutation.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from pkgsync.core.exceptions import RegistryFileError, RegistryMutationError
from pkgsync.core.file_io.utils import read_yaml, write_yaml
from pkgsync.core.models import ManagedPackage
from pkgsync.core.utils.paths import make_absolute

logger = logging.getLogger(__name__)


class YamlPackageRegistry:
    """Managed package registry persisted to a YAML file."""

    def __init__(self, path: Path, root_dir: Path) -> None:
        """Initialize registry.

        Args:
            path: Registry file (created on first mutation)
            root_dir: Install path of the root package; relative package
                paths are resolved against it
        """
        self.root_dir = Path(root_dir)
        self.path = make_absolute(path, self.root_dir)
        self._entries: dict[str, ManagedPackage] = {}
        self._root_name: str | None = None
        self._loaded = False

    def load(self) -> None:
        """Load the registry file if it exists.

        Raises:
            RegistryFileError: If the file is unreadable or malformed
        """
        self._entries = {}
        self._root_name = None
        # Fail closed: a broken registry must never read as an empty one.
        try:
            data = read_yaml(self.path, default={})
        except (OSError, yaml.YAMLError) as exc:
            raise RegistryFileError(self.path, f"Invalid registry file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise RegistryFileError(self.path, f"Registry file {self.path} must contain a mapping")

        root = data.get("root") or {}
        packages = data.get("packages") or []
        if not isinstance(root, dict) or not isinstance(packages, list):
            raise RegistryFileError(self.path, f"Registry file {self.path} has an invalid structure")

        entries: dict[str, ManagedPackage] = {}
        for item in packages:
            if not isinstance(item, dict):
                raise RegistryFileError(self.path, f"Invalid package entry in {self.path}: {item!r}")
            try:
                entry = ManagedPackage.from_dict(item)
            except ValueError as exc:
                raise RegistryFileError(self.path, f"Invalid package entry in {self.path}: {exc}") from exc
            entries[entry.name] = ManagedPackage(
                name=entry.name,
                install_path=make_absolute(entry.install_path, self.root_dir),
                installer=entry.installer,
            )
        self._entries = entries
        self._root_name = root.get("name")
        self._loaded = True

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def _to_dict(self) -> dict[str, Any]:
        sorted_entries = sorted(self._entries.values(), key=lambda e: e.name)
        return {
            "root": {"name": self._root_name},
            "packages": [entry.to_dict() for entry in sorted_entries],
        }

    def save(self) -> None:
        """Write the registry file."""
        write_yaml(self.path, self._to_dict())

    def _commit(self, *, package: str, operation: str, rollback: dict[str, ManagedPackage]) -> None:
        try:
            self.save()
        except (OSError, yaml.YAMLError) as exc:
            self._entries = rollback
            raise RegistryMutationError(
                f"Could not {operation} package {package}: {exc}",
                package=package,
                operation=operation,
            ) from exc

    # ---------- PackageRegistry ----------

    def packages(self) -> list[ManagedPackage]:
        """Return all managed packages sorted by name."""
        self._ensure_loaded()
        return sorted(self._entries.values(), key=lambda e: e.name)

    def get(self, name: str) -> ManagedPackage | None:
        self._ensure_loaded()
        return self._entries.get(name)

    def by_installer(self, installer: str) -> list[ManagedPackage]:
        return [p for p in self.packages() if p.installer == installer]

    def is_installed_at_path(self, path: Path) -> bool:
        self._ensure_loaded()
        wanted = make_absolute(path, self.root_dir)
        return any(p.install_path == wanted for p in self._entries.values())

    def install(self, path: Path, name: str, installer: str) -> ManagedPackage:
        """Register ``name`` at ``path`` under ``installer``.

        Re-installing a package of the same installer replaces its entry.

        Raises:
            RegistryMutationError: If ``name`` is owned by another installer,
                or the registry cannot be saved
        """
        self._ensure_loaded()
        existing = self._entries.get(name)
        if existing is not None and existing.installer != installer:
            raise RegistryMutationError(
                f"Could not install package {name}: already installed by {existing.installer}",
                package=name,
                operation="install",
            )
        entry = ManagedPackage(
            name=name,
            install_path=make_absolute(path, self.root_dir),
            installer=installer,
        )
        previous = dict(self._entries)
        self._entries[name] = entry
        self._commit(package=name, operation="install", rollback=previous)
        logger.debug("Registered %s at %s (%s)", name, entry.install_path, installer)
        return entry

    def remove(self, name: str) -> ManagedPackage:
        self._ensure_loaded()
        if name not in self._entries:
            raise RegistryMutationError(
                f"Could not remove package {name}: not registered",
                package=name,
                operation="remove",
            )
        previous = dict(self._entries)
        entry = self._entries.pop(name)
        self._commit(package=name, operation="remove", rollback=previous)
        logger.debug("Unregistered %s", name)
        return entry

    def root_package_install_path(self) -> Path:
        return self.root_dir

    @property
    def root_package_name(self) -> str | None:
        self._ensure_loaded()
        return self._root_name

    def set_root_package_name(self, name: str) -> None:
        self._ensure_loaded()
        previous, self._root_name = self._root_name, name
        try:
            self.save()
        except (OSError, yaml.YAMLError) as exc:
            self._root_name = previous
            raise RegistryMutationError(
                f"Could not record root package name {name}: {exc}",
                package=name,
                operation="set-root-name",
            ) from exc


__all__ = ["YamlPackageRegistry"]
