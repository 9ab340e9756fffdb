"""Anchored text patching for generated autoload manifests.

Two manifest shapes are supported:

- A bootstrap file ending in a top-level ``return <expr>;`` statement.
  Constant definitions are inserted on their own lines before the last such
  statement.
- A class-map file holding a ``return array(...)`` table literal. Entries
  are inserted as their own line before the last ``);`` delimiter.

The patcher rewrites the whole file and preserves every byte outside the
inserted fragment, whose line endings follow the file (CRLF or LF). It
does NOT check whether a fragment is already present: inserting the same
fragment twice produces two copies. Callers guard
against repeated runs (see :class:`pkgsync.core.lifecycle.LifecycleGuard`)
or pre-check with :meth:`ManifestPatcher.contains`.
"""
from __future__ import annotations

import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import Any

from pkgsync.core.exceptions import MalformedManifestError, MissingManifestError
from pkgsync.core.file_io.utils import read_text, write_text
from pkgsync.core.manifests.fragments import (
    DEFAULT_CLASSMAP_TEMPLATE,
    DEFAULT_CONSTANT_TEMPLATE,
    classmap_fragment,
    constant_fragment,
)
from pkgsync.core.models import Anchor, InjectionTarget

logger = logging.getLogger(__name__)

# Each pattern matches the newline that ends the line before the anchor line.
_ANCHOR_PATTERNS: dict[Anchor, re.Pattern[str]] = {
    Anchor.FINAL_RETURN: re.compile(r"\n(?=return [^;]+;\s*$)", re.MULTILINE),
    Anchor.TABLE_CLOSE: re.compile(r"\n(?=\);\s*$)", re.MULTILINE),
}


def locate_anchor(contents: str, anchor: Anchor) -> int | None:
    """Return the offset of the last anchor line in ``contents``, or None."""
    matches = list(_ANCHOR_PATTERNS[anchor].finditer(contents))
    return matches[-1].end() if matches else None


class ManifestPatcher:
    """Insert rendered fragments into generated manifests."""

    def __init__(
        self,
        *,
        constant_template: str = DEFAULT_CONSTANT_TEMPLATE,
        classmap_template: str = DEFAULT_CLASSMAP_TEMPLATE,
    ) -> None:
        self.constant_template = constant_template
        self.classmap_template = classmap_template

    def inject_constant(self, file: Path, name: str, value: Any) -> InjectionTarget:
        """Define constant ``name`` as ``value`` before the final return.

        Raises:
            MissingManifestError: If ``file`` does not exist
            MalformedManifestError: If ``file`` has no top-level return
        """
        target = InjectionTarget(
            file_path=Path(file),
            anchor=Anchor.FINAL_RETURN,
            fragment=constant_fragment(name, value, self.constant_template),
        )
        return self.apply(target)

    def inject_table_entry(self, file: Path, key: str, value_expression: str) -> InjectionTarget:
        """Add ``key => value_expression`` before the table's closing ``);``.

        ``value_expression`` is raw PHP and is inserted verbatim.

        Raises:
            MissingManifestError: If ``file`` does not exist
            MalformedManifestError: If ``file`` has no closing delimiter
        """
        target = InjectionTarget(
            file_path=Path(file),
            anchor=Anchor.TABLE_CLOSE,
            fragment=classmap_fragment(key, value_expression, self.classmap_template),
        )
        return self.apply(target)

    def apply(self, target: InjectionTarget) -> InjectionTarget:
        """Insert ``target.fragment`` before the anchor in ``target.file_path``.

        The fragment takes the line ending of the line preceding the anchor.

        Returns:
            The target with the fragment as written
        """
        path = target.file_path
        if not path.is_file():
            raise MissingManifestError(path)

        contents = read_text(path)
        offset = locate_anchor(contents, target.anchor)
        if offset is None:
            raise MalformedManifestError(path, target.anchor.description)

        if contents[:offset].endswith("\r\n"):
            target = replace(target, fragment=target.fragment.replace("\r\n", "\n").replace("\n", "\r\n"))

        logger.debug("Inserting %d bytes into %s at offset %d", len(target.fragment), path, offset)
        write_text(path, contents[:offset] + target.fragment + contents[offset:])
        return target

    def contains(self, file: Path, fragment: str) -> bool:
        """Return True if ``fragment`` already occurs in ``file``.

        Raises:
            MissingManifestError: If ``file`` does not exist
        """
        path = Path(file)
        if not path.is_file():
            raise MissingManifestError(path)
        return fragment in read_text(path)


__all__ = ["ManifestPatcher", "locate_anchor"]
