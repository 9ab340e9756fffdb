"""Lifecycle orchestration.

Wires the reconciliation engine, the external rebuilders and the manifest
patcher to the host's lifecycle events:

- ``post-install-cmd`` / ``post-update-cmd`` -> ``post-install`` hook:
  reconcile the registry, record the root package name, rebuild the
  resource repository and the discovery index.
- ``post-autoload-dump`` -> ``post-autoload-dump`` hook: inject the
  generated factory class constant and class-map entry.

Each hook runs at most once per orchestrator instance.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from pkgsync.core.config import ConfigManager, SyncConfig
from pkgsync.core.exceptions import (
    MissingManifestError,
    PkgSyncError,
    RebuildError,
    RegistryMutationError,
    UnknownEventError,
)
from pkgsync.core.lifecycle import LifecycleGuard
from pkgsync.core.manifests import ManifestPatcher, export_literal
from pkgsync.core.models import HookResult, InjectionTarget, ReconcileResult
from pkgsync.core.rebuild import CommandRebuilder, Rebuilder
from pkgsync.core.reconcile import ReconciliationEngine, Reporter
from pkgsync.core.registry import PackageRegistry, YamlPackageRegistry
from pkgsync.core.resolver import InstalledJsonSnapshot, ResolutionSnapshot
from pkgsync.core.utils.paths import make_absolute, make_relative

logger = logging.getLogger(__name__)

POST_INSTALL = "post-install"
POST_AUTOLOAD_DUMP = "post-autoload-dump"

# Host event name -> hook id. Install and update share one hook.
EVENT_HOOKS: dict[str, str] = {
    "post-install-cmd": POST_INSTALL,
    "post-update-cmd": POST_INSTALL,
    "post-autoload-dump": POST_AUTOLOAD_DUMP,
}


class Orchestrator:
    """Run pkgsync's side effects for host lifecycle events."""

    def __init__(
        self,
        working_dir: Path,
        config: SyncConfig,
        *,
        snapshot: Optional[ResolutionSnapshot] = None,
        registry: Optional[PackageRegistry] = None,
        repository_rebuilder: Optional[Rebuilder] = None,
        discovery_rebuilder: Optional[Rebuilder] = None,
        patcher: Optional[ManifestPatcher] = None,
        reporter: Optional[Reporter] = None,
    ) -> None:
        """Initialize orchestrator.

        Collaborators not passed in are built from ``config``.

        Args:
            working_dir: Project root; relative config paths resolve against it
            config: Typed configuration
            reporter: Receives progress lines (console output)
        """
        self.working_dir = Path(working_dir)
        self.config = config
        self.snapshot = snapshot or InstalledJsonSnapshot(self.working_dir, config.vendor_dir)
        self.registry = registry or YamlPackageRegistry(Path(config.registry_path), self.working_dir)
        self.repository_rebuilder = repository_rebuilder or CommandRebuilder.from_commands(
            "repository", config.repository_rebuild, cwd=self.working_dir
        )
        self.discovery_rebuilder = discovery_rebuilder or CommandRebuilder.from_commands(
            "discovery", config.discovery_rebuild, cwd=self.working_dir
        )
        self.patcher = patcher or ManifestPatcher(
            constant_template=config.constant_template,
            classmap_template=config.classmap_template,
        )
        self._reporter = reporter
        self.engine = ReconciliationEngine(reporter=reporter)
        self.guard = LifecycleGuard()

    @classmethod
    def from_project(cls, repo_root: Path, *, reporter: Optional[Reporter] = None) -> Orchestrator:
        """Build an orchestrator from the project's configuration."""
        config = ConfigManager(repo_root).load()
        return cls(repo_root, config, reporter=reporter)

    def _report(self, message: str) -> None:
        logger.info(message)
        if self._reporter is not None:
            self._reporter(message)

    # ---------- Install/update phase ----------

    def post_install(self) -> ReconcileResult | None:
        """Reconcile the registry and rebuild, once.

        Returns:
            The reconciliation result, or None if the hook already ran

        Raises:
            RegistryMutationError: If the registry fails to persist a change
            RebuildError: If a rebuilder fails
        """
        if not self.guard.admit_once(POST_INSTALL):
            return None

        result = self.engine.reconcile_snapshot(
            self.snapshot, self.registry, self.config.installer_name
        )
        self.registry.set_root_package_name(self.snapshot.root_package_name)

        self._rebuild(self.repository_rebuilder, "Building resource repository")
        self._rebuild(self.discovery_rebuilder, "Building resource discovery")
        return result

    def _rebuild(self, rebuilder: Rebuilder, message: str) -> None:
        self._report(message)
        try:
            rebuilder.clear()
            rebuilder.build()
        except Exception as exc:
            raise RebuildError(rebuilder.name, f"Rebuild failed: {rebuilder.name}: {exc}") from exc

    # ---------- Autoload-generation phase ----------

    @property
    def vendor_dir(self) -> Path:
        return make_absolute(self.config.vendor_dir, self.working_dir)

    @property
    def autoload_file(self) -> Path:
        return self.vendor_dir / self.config.autoload_manifest

    @property
    def classmap_file(self) -> Path:
        return self.vendor_dir / self.config.classmap_manifest

    @property
    def factory_file(self) -> Path:
        return make_absolute(self.config.factory_file, self.working_dir)

    def post_autoload_dump(self) -> list[InjectionTarget] | None:
        """Inject the factory class constant and class-map entry, once.

        Returns:
            The applied injections, or None if the hook already ran

        Raises:
            MissingManifestError: If a generated manifest does not exist
            MalformedManifestError: If a manifest lacks its anchor
        """
        if not self.guard.admit_once(POST_AUTOLOAD_DUMP):
            return None

        vendor_dir = self.vendor_dir
        autoload_file = self.autoload_file
        classmap_file = self.classmap_file
        # Both manifests must exist before either one is touched.
        for manifest in (autoload_file, classmap_file):
            if not manifest.is_file():
                raise MissingManifestError(manifest)

        factory_class = self.config.factory_class
        constant = self.config.factory_constant

        self._report(f"Generating {constant} constant")
        applied = [self.patcher.inject_constant(autoload_file, constant, factory_class)]

        self._report(f"Registering {factory_class} with the class-map autoloader")
        rel_factory_file = make_relative(self.factory_file, vendor_dir)
        expression = f"$vendorDir . {export_literal('/' + rel_factory_file)}"
        applied.append(self.patcher.inject_table_entry(classmap_file, factory_class, expression))
        return applied

    # ---------- Host entry point ----------

    def handle_event(self, event: str) -> HookResult:
        """Deliver host ``event`` to its hook and report the outcome.

        pkgsync errors are converted into a failed result; anything else
        propagates.

        Raises:
            UnknownEventError: If no hook is mapped to ``event``
        """
        hook = EVENT_HOOKS.get(event)
        if hook is None:
            raise UnknownEventError(event)

        handlers: dict[str, Callable[[], Any]] = {
            POST_INSTALL: self.post_install,
            POST_AUTOLOAD_DUMP: self.post_autoload_dump,
        }
        try:
            outcome = handlers[hook]()
        except PkgSyncError as exc:
            logger.error("Hook %s failed for %s: %s", hook, event, exc)
            failure = exc.to_json_error()
            if isinstance(exc, RegistryMutationError) and exc.partial is not None:
                failure["partial"] = exc.partial.to_dict()
            return HookResult(
                event=event,
                hook=hook,
                ran=True,
                success=False,
                error=str(exc),
                details=failure,
            )

        if outcome is None:
            return HookResult(event=event, hook=hook, ran=False, success=True)

        if isinstance(outcome, ReconcileResult):
            details: dict[str, Any] = outcome.to_dict()
        else:
            details = {"files": [str(t.file_path) for t in outcome]}
        return HookResult(event=event, hook=hook, ran=True, success=True, details=details)


__all__ = ["Orchestrator", "EVENT_HOOKS", "POST_INSTALL", "POST_AUTOLOAD_DUMP"]
