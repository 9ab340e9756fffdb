"""Path helpers shared by the resolver adapter, registry and orchestrator."""
from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
from typing import Union

PathLike = Union[str, Path]

# Files that mark a project root when walking up from the working directory.
ROOT_MARKERS = ("composer.json", ".pkgsync")


def make_absolute(path: PathLike, base: PathLike) -> Path:
    """Return ``path`` as an absolute, normalized path.

    Relative paths are resolved against ``base``. ``..`` segments are
    collapsed lexically; symlinks are not followed.
    """
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = Path(base) / p
    return Path(os.path.normpath(str(p)))


def make_relative(path: PathLike, base: PathLike) -> str:
    """Return ``path`` relative to ``base`` using forward slashes.

    Both paths are made absolute against the current directory first.

    Examples:
        >>> make_relative("/app/.puli/Factory.php", "/app/vendor")
        '../.puli/Factory.php'
    """
    rel = os.path.relpath(os.path.abspath(str(path)), os.path.abspath(str(base)))
    return PurePosixPath(*Path(rel).parts).as_posix() if rel != "." else "."


def resolve_project_root(start: PathLike | None = None) -> Path:
    """Resolve the project root.

    Resolution priority:
    1. PKGSYNC_PROJECT_ROOT environment variable
    2. Nearest ancestor of ``start`` (default: cwd) holding a root marker
    3. ``start`` itself
    """
    env_root = os.environ.get("PKGSYNC_PROJECT_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()

    origin = Path(start or Path.cwd()).resolve()
    for candidate in (origin, *origin.parents):
        if any((candidate / marker).exists() for marker in ROOT_MARKERS):
            return candidate
    return origin


__all__ = ["make_absolute", "make_relative", "resolve_project_root", "ROOT_MARKERS"]
