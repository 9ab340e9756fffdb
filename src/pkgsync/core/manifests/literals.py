"""PHP literal export.

Produces the same text as PHP's ``var_export($value, true)`` for the value
types pkgsync injects into generated manifests.
"""
from __future__ import annotations

import math
from typing import Any, Mapping, Sequence


def _export_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    # var_export splices NUL bytes in as a double-quoted escape.
    escaped = escaped.replace("\0", "' . \"\\0\" . '")
    return f"'{escaped}'"


def _export_float(value: float) -> str:
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    return repr(value)


def _export_array(items: Sequence[tuple[Any, Any]], indent: str) -> str:
    inner = indent + "  "
    lines = ["array ("]
    for key, item in items:
        rendered = export_literal(item, _indent=inner)
        if rendered.startswith("array ("):
            lines.append(f"{inner}{export_literal(key)} => ")
            lines.append(f"{inner}{rendered},")
        else:
            lines.append(f"{inner}{export_literal(key)} => {rendered},")
    lines.append(f"{indent})")
    return "\n".join(lines)


def export_literal(value: Any, *, _indent: str = "") -> str:
    """Return ``value`` as a PHP literal expression.

    Supports ``str``, ``bool``, ``int``, ``float``, ``None``, mappings and
    sequences (exported as ``array (...)``).

    Examples:
        >>> export_literal("Factory")
        "'Factory'"
        >>> export_literal(True)
        'true'
        >>> export_literal(None)
        'NULL'

    Raises:
        TypeError: For values with no PHP literal form
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _export_float(value)
    if isinstance(value, str):
        return _export_string(value)
    if isinstance(value, Mapping):
        return _export_array(list(value.items()), _indent)
    if isinstance(value, (list, tuple)):
        return _export_array(list(enumerate(value)), _indent)
    raise TypeError(f"Cannot export value of type {type(value).__name__} as a PHP literal")


__all__ = ["export_literal"]
