"""Reconciliation of managed packages against resolver results.

The engine diffs the resolver's package list against the registry entries
owned by one installer and applies the difference:

1. Removal pass: every package owned by the installer whose name the
   resolver no longer reports is removed.
2. Installation pass: every resolved package whose install path is not yet
   registered is installed under the installer.

Removals run first so that an install path reused by a renamed dependency
is free again before the installation pass checks it. Packages owned by
other installers are never inspected.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

from pkgsync.core.exceptions import RegistryMutationError
from pkgsync.core.models import ManagedPackage, ReconcileResult, ResolvedPackage
from pkgsync.core.registry.base import PackageRegistry
from pkgsync.core.resolver import ResolutionSnapshot
from pkgsync.core.utils.paths import make_relative

logger = logging.getLogger(__name__)

Reporter = Callable[[str], None]
AliasResolver = Callable[[ResolvedPackage], ResolvedPackage]


def alias_resolver_for(resolved: Iterable[ResolvedPackage]) -> AliasResolver:
    """Build an alias resolver from the resolved list itself.

    Aliases whose target is not in the list resolve to themselves.
    """
    targets = {p.name: p for p in resolved if not p.is_alias}

    def _resolve(package: ResolvedPackage) -> ResolvedPackage:
        if package.is_alias:
            return targets.get(package.alias_of, package)
        return package

    return _resolve


class ReconciliationEngine:
    """Apply resolver results to the managed package registry."""

    def __init__(self, reporter: Optional[Reporter] = None) -> None:
        """Initialize engine.

        Args:
            reporter: Receives one progress line per step (console output)
        """
        self._reporter = reporter

    def _report(self, message: str) -> None:
        logger.info(message)
        if self._reporter is not None:
            self._reporter(message)

    def reconcile(
        self,
        resolved: Iterable[ResolvedPackage],
        registry: PackageRegistry,
        installer: str,
        *,
        resolve_alias: Optional[AliasResolver] = None,
    ) -> ReconcileResult:
        """Reconcile ``registry`` with ``resolved`` for ``installer``.

        Args:
            resolved: Packages reported by the resolver, aliases included
            registry: Registry to mutate
            installer: Installer identity whose packages are reconciled
            resolve_alias: Maps an alias entry to its target (defaults to a
                lookup within ``resolved``)

        Returns:
            Installed and removed packages, in the order they were applied

        Raises:
            RegistryMutationError: If the registry fails to persist a change;
                ``partial`` holds everything applied before the failure
        """
        resolved = list(resolved)
        resolve = resolve_alias or alias_resolver_for(resolved)
        targets = [resolve(p) for p in resolved]
        target_names = {t.name for t in targets}
        root_dir = registry.root_package_install_path()

        removed: list[ManagedPackage] = []
        installed: list[ManagedPackage] = []

        def _fail(package: str, operation: str, exc: Exception) -> RegistryMutationError:
            partial = ReconcileResult(installed=tuple(installed), removed=tuple(removed))
            logger.error("Could not %s %s: %s", operation, package, exc)
            message = str(exc) if isinstance(exc, RegistryMutationError) else f"Could not {operation} package {package}: {exc}"
            return RegistryMutationError(
                message,
                package=package,
                operation=operation,
                partial=partial,
            )

        self._report("Looking for removed packages")
        for package in registry.by_installer(installer):
            if package.name in target_names:
                continue
            self._report(f"Removing {package.name} ({self._display_path(package.install_path, root_dir)})")
            try:
                registry.remove(package.name)
            except Exception as exc:
                raise _fail(package.name, "remove", exc) from exc
            removed.append(package)

        self._report("Looking for new packages")
        seen_paths: set[Path] = set()
        for target in targets:
            if target.install_path in seen_paths:
                continue
            seen_paths.add(target.install_path)

            if registry.is_installed_at_path(target.install_path):
                continue
            self._report(f"Installing {target.name} ({self._display_path(target.install_path, root_dir)})")
            try:
                entry = registry.install(target.install_path, target.name, installer)
            except Exception as exc:
                raise _fail(target.name, "install", exc) from exc
            installed.append(entry)

        result = ReconcileResult(installed=tuple(installed), removed=tuple(removed))
        if not result.changed:
            self._report("Nothing to install or remove")
        return result

    def reconcile_snapshot(
        self,
        snapshot: ResolutionSnapshot,
        registry: PackageRegistry,
        installer: str,
    ) -> ReconcileResult:
        """Reconcile ``registry`` with the packages in ``snapshot``."""
        return self.reconcile(
            snapshot.list_packages(),
            registry,
            installer,
            resolve_alias=snapshot.resolve_alias,
        )

    @staticmethod
    def _display_path(path: Path, root_dir: Path) -> str:
        return make_relative(path, root_dir)


__all__ = ["ReconciliationEngine", "alias_resolver_for", "Reporter", "AliasResolver"]
