"""File I/O utilities for pkgsync core.

Single source of truth for safe file access patterns:
- Atomic writes with fsync and advisory locks
- Text reads that preserve line endings byte-for-byte
- YAML and JSON reads with consistent error handling
"""
from __future__ import annotations

import fcntl
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, TextIO, Union

import yaml


PathLike = Union[str, Path]

_DEFAULT_SENTINEL: object = object()


def ensure_parent_dir(path: Path) -> None:
    """Ensure the parent directory for ``path`` exists."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def _atomic_write(
    path: Path,
    write_fn: Callable[[TextIO], None],
    *,
    encoding: str = "utf-8",
) -> None:
    """Write to ``path`` atomically using a temp file + fsync + rename.

    - Parent directory is created if missing
    - Data is written to a temporary file in the same directory
    - File is fsync'd, unlocked, then atomically replaced
    - Any leftover temp file is cleaned up on failure
    - Newlines are written untranslated
    """
    path = Path(path)
    ensure_parent_dir(path)

    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=encoding,
            newline="",
            dir=str(path.parent),
            prefix=f".{path.name}.",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            write_fn(f)
            f.flush()
            os.fsync(f.fileno())
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)

        # Keep the permissions of the file being replaced.
        if path.exists():
            os.chmod(tmp_path, path.stat().st_mode & 0o7777)
        os.replace(str(tmp_path), str(path))
    finally:
        if tmp_path is not None and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                # Best-effort cleanup; never fail callers on temp removal
                pass


def read_text(path: PathLike) -> str:
    """Read a UTF-8 text file without newline translation.

    - Missing files raise :class:`FileNotFoundError`
    - Other I/O errors are propagated to callers
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Text file not found: {path}")
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def write_text(path: PathLike, content: str) -> None:
    """Atomically write UTF-8 text to ``path``, byte-for-byte."""

    def _writer(f: TextIO) -> None:
        f.write(content)

    _atomic_write(Path(path), _writer)


def read_json(path: PathLike) -> Any:
    """Read JSON under a shared lock; errors propagate."""
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_SH)
        try:
            return json.load(f)
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)


def read_yaml(path: PathLike, default: Any = _DEFAULT_SENTINEL) -> Any:
    """Read YAML under a shared lock.

    Missing files return ``default`` when one is given. Invalid YAML always
    raises, so configuration never silently ignores a broken file.

    Examples:
        >>> config = read_yaml(Path("config.yaml"), default={})
        >>> assert isinstance(config, dict)
    """
    path = Path(path)
    if not path.exists():
        if default is _DEFAULT_SENTINEL:
            raise FileNotFoundError(f"YAML file not found: {path}")
        return default

    with open(path, "r", encoding="utf-8") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_SH)
        try:
            data = yaml.safe_load(f)
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    if data is None and default is not _DEFAULT_SENTINEL:
        return default
    return data


def write_yaml(path: PathLike, data: Any) -> None:
    """Atomically write YAML data to ``path``.

    Key order is preserved so callers control deterministic output.
    """

    def _writer(f: TextIO) -> None:
        yaml.safe_dump(
            data,
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )

    _atomic_write(Path(path), _writer)


__all__ = [
    "ensure_parent_dir",
    "read_text",
    "write_text",
    "read_json",
    "read_yaml",
    "write_yaml",
    "PathLike",
]
