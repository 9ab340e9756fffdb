"""Resolver snapshot access.

Provides a read-only view of the packages the dependency resolver
installed, read from Composer's ``vendor/composer/installed.json``.
"""
from __future__ import annotations

import logging
from functools import cached_property
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pkgsync.core.exceptions import ResolverError
from pkgsync.core.file_io.utils import read_json
from pkgsync.core.models import ResolvedPackage
from pkgsync.core.utils.paths import make_absolute

logger = logging.getLogger(__name__)

# Composer's name for a root package without a "name" field.
DEFAULT_ROOT_NAME = "__root__"


@runtime_checkable
class ResolutionSnapshot(Protocol):
    """Read-only view of the resolver's current package list."""

    @property
    def root_package_name(self) -> str:
        """Display name of the root package."""
        ...

    def list_packages(self) -> list[ResolvedPackage]:
        """Return every resolved package, alias entries included."""
        ...

    def resolve_alias(self, package: ResolvedPackage) -> ResolvedPackage:
        """Return the package ``package`` aliases, or ``package`` itself."""
        ...


class InstalledJsonSnapshot:
    """Snapshot backed by ``<vendor>/composer/installed.json``.

    Both the Composer 1 form (a JSON list) and the Composer 2 form
    (``{"packages": [...]}``) are accepted. ``install-path`` is relative to
    ``<vendor>/composer``; without it, packages live at ``<vendor>/<name>``.

    Alias entries come from two places:
    - an entry with an ``alias-of`` field aliases the named package
    - every ``extra.branch-alias`` of a package is a version alias of it
    """

    def __init__(self, working_dir: Path, vendor_dir: Path | str = "vendor") -> None:
        self.working_dir = Path(working_dir)
        self.vendor_dir = make_absolute(vendor_dir, self.working_dir)

    @property
    def installed_json_path(self) -> Path:
        return self.vendor_dir / "composer" / "installed.json"

    @property
    def composer_json_path(self) -> Path:
        return self.working_dir / "composer.json"

    def _read(self, path: Path) -> Any:
        try:
            return read_json(path)
        except FileNotFoundError as exc:
            raise ResolverError(
                f"Resolver snapshot not found: {path}", context={"path": str(path)}
            ) from exc
        except (OSError, ValueError) as exc:
            raise ResolverError(
                f"Could not read resolver snapshot {path}: {exc}", context={"path": str(path)}
            ) from exc

    def _entries(self) -> list[dict[str, Any]]:
        data = self._read(self.installed_json_path)
        if isinstance(data, dict):
            data = data.get("packages", [])
        if not isinstance(data, list):
            raise ResolverError(
                f"Unexpected structure in {self.installed_json_path}",
                context={"path": str(self.installed_json_path)},
            )
        return [item for item in data if isinstance(item, dict)]

    def _install_path(self, item: dict[str, Any]) -> Path:
        raw = item.get("install-path")
        if raw:
            return make_absolute(raw, self.installed_json_path.parent)
        return self.vendor_dir / item["name"]

    @cached_property
    def _packages(self) -> list[ResolvedPackage]:
        packages: list[ResolvedPackage] = []
        for item in self._entries():
            name = item.get("name")
            if not isinstance(name, str) or not name:
                logger.warning("Skipping resolver entry without a name in %s", self.installed_json_path)
                continue
            path = self._install_path(item)
            packages.append(ResolvedPackage(name=name, install_path=path, alias_of=item.get("alias-of")))

            branch_aliases = (item.get("extra") or {}).get("branch-alias") or {}
            for _ in branch_aliases:
                packages.append(ResolvedPackage(name=name, install_path=path, alias_of=name))
        return packages

    def list_packages(self) -> list[ResolvedPackage]:
        return list(self._packages)

    def resolve_alias(self, package: ResolvedPackage) -> ResolvedPackage:
        if not package.is_alias:
            return package
        target = next(
            (p for p in self._packages if p.name == package.alias_of and not p.is_alias),
            None,
        )
        if target is None:
            raise ResolverError(
                f"Package {package.name} aliases unknown package {package.alias_of}",
                context={"package": package.name, "alias_of": package.alias_of},
            )
        return target

    @cached_property
    def root_package_name(self) -> str:
        if not self.composer_json_path.exists():
            return DEFAULT_ROOT_NAME
        data = self._read(self.composer_json_path)
        name = data.get("name") if isinstance(data, dict) else None
        return name if isinstance(name, str) and name else DEFAULT_ROOT_NAME


__all__ = ["ResolutionSnapshot", "InstalledJsonSnapshot", "DEFAULT_ROOT_NAME"]
