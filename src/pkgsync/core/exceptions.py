from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Mapping

if TYPE_CHECKING:
    from pkgsync.core.models import ReconcileResult


class PkgSyncError(Exception):
    """Base exception for pkgsync."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigError(PkgSyncError):
    """Raised when configuration is unreadable or violates the schema."""


class ResolverError(PkgSyncError):
    """Raised when the resolver snapshot cannot be read."""


class UnknownEventError(PkgSyncError):
    """Raised when the host delivers an event no hook is mapped to."""

    def __init__(self, event: str) -> None:
        super().__init__(f"Unknown lifecycle event: {event}", context={"event": event})
        self.event = event


class ManifestError(PkgSyncError):
    """Base class for generated manifest failures."""

    def __init__(self, message: str, *, path: Path, context: Mapping[str, Any] | None = None) -> None:
        ctx = dict(context or {})
        ctx["path"] = str(path)
        super().__init__(message, context=ctx)
        self.path = Path(path)


class MissingManifestError(ManifestError, FileNotFoundError):
    """Raised when a generated manifest required by a hook does not exist."""

    def __init__(self, path: Path) -> None:
        ManifestError.__init__(
            self,
            f"Could not adjust autoloader: The file {path} was not found.",
            path=path,
        )


class MalformedManifestError(ManifestError):
    """Raised when a manifest does not contain the expected structural anchor."""

    def __init__(self, path: Path, expected_anchor: str) -> None:
        super().__init__(
            f"Could not adjust autoloader: The file {path} does not contain {expected_anchor}.",
            path=path,
            context={"expected_anchor": expected_anchor},
        )
        self.expected_anchor = expected_anchor


class RegistryFileError(PkgSyncError):
    """Raised when the registry file cannot be read or has an invalid structure."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message, context={"path": str(path)})
        self.path = Path(path)


class RegistryMutationError(PkgSyncError):
    """Raised when the registry fails to install or remove a package.

    ``partial`` holds the reconciliation actions applied before the failure,
    when the error surfaced from a reconciliation pass.
    """

    def __init__(
        self,
        message: str,
        *,
        package: str,
        operation: str,
        partial: "ReconcileResult | None" = None,
    ) -> None:
        super().__init__(message, context={"package": package, "operation": operation})
        self.package = package
        self.operation = operation
        self.partial = partial


class RebuildError(PkgSyncError):
    """Raised when an external rebuilder fails to clear or build."""

    def __init__(self, rebuilder: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Rebuild failed: {rebuilder}",
            context={"rebuilder": rebuilder},
        )
        self.rebuilder = rebuilder


__all__ = [
    "PkgSyncError",
    "ConfigError",
    "ResolverError",
    "UnknownEventError",
    "ManifestError",
    "MissingManifestError",
    "MalformedManifestError",
    "RegistryFileError",
    "RegistryMutationError",
    "RebuildError",
]
