"""Package sync data models.

Provides immutable dataclasses for managed packages, resolver entries,
injection targets and hook results.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class ManagedPackage:
    """A package whose registry entry is owned by an installer.

    Attributes:
        name: Unique package name
        install_path: Absolute install path
        installer: Identity of the tool that installed the package
    """

    name: str
    install_path: Path
    installer: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ManagedPackage:
        """Create from dictionary."""
        required_keys = {"name", "path", "installer"}
        missing = required_keys - set(data.keys())
        if missing:
            raise ValueError(f"Missing required keys: {sorted(missing)}")
        return cls(
            name=str(data["name"]),
            install_path=Path(data["path"]),
            installer=str(data["installer"]),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "path": str(self.install_path),
            "installer": self.installer,
        }


@dataclass(frozen=True, slots=True)
class ResolvedPackage:
    """A package as reported by the dependency resolver.

    Attributes:
        name: Package name
        install_path: Absolute install path
        alias_of: Name of the aliased package, or None for real packages
    """

    name: str
    install_path: Path
    alias_of: str | None = None

    @property
    def is_alias(self) -> bool:
        return self.alias_of is not None


class Anchor(str, Enum):
    """Structural markers that locate an insertion point in a manifest."""

    FINAL_RETURN = "final-return"
    TABLE_CLOSE = "table-close"

    @property
    def description(self) -> str:
        if self is Anchor.FINAL_RETURN:
            return "a top-level return statement"
        return "the closing delimiter of a table literal"


@dataclass(frozen=True, slots=True)
class InjectionTarget:
    """A fragment to insert into a manifest before an anchor.

    Attributes:
        file_path: Manifest file to patch
        anchor: Structural marker to insert before
        fragment: Exact text to insert (including trailing newlines)
    """

    file_path: Path
    anchor: Anchor
    fragment: str


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """Outcome of a reconciliation run.

    Attributes:
        installed: Packages newly registered, in install order
        removed: Packages removed from the registry, in removal order
    """

    installed: tuple[ManagedPackage, ...] = ()
    removed: tuple[ManagedPackage, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.installed or self.removed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "installed": [p.to_dict() for p in self.installed],
            "removed": [p.to_dict() for p in self.removed],
        }


@dataclass(frozen=True, slots=True)
class HookResult:
    """Result of delivering a lifecycle event to its hook.

    Attributes:
        event: Event name delivered by the host
        hook: Hook id the event maps to
        ran: False when the guard had already admitted this hook
        success: Whether the hook completed without error
        error: Error message if failed
        details: Hook-specific payload (reconciliation result, patched files)
    """

    event: str
    hook: str
    ran: bool
    success: bool
    error: str | None = None
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event,
            "hook": self.hook,
            "ran": self.ran,
            "success": self.success,
            "error": self.error,
            "details": self.details or {},
        }


__all__ = [
    "ManagedPackage",
    "ResolvedPackage",
    "Anchor",
    "InjectionTarget",
    "ReconcileResult",
    "HookResult",
]
