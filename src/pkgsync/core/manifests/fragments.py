"""Fragment rendering for manifest injection.

Fragments are Jinja2 templates. The ``php`` filter exports a value as a
PHP literal; anything not passed through it is inserted verbatim, which is
how raw expressions such as ``$vendorDir . '/x.php'`` reach the manifest.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from pkgsync.core.manifests.literals import export_literal
from pkgsync.data import read_yaml

# Bundled defaults live with the rest of the default configuration.
_DEFAULTS = read_yaml("config", "defaults.yaml")["manifests"]
DEFAULT_CONSTANT_TEMPLATE: str = _DEFAULTS["constant"]["template"]
DEFAULT_CLASSMAP_TEMPLATE: str = _DEFAULTS["classmap_entry"]["template"]


@lru_cache(maxsize=1)
def _environment() -> Environment:
    env = Environment(
        autoescape=False,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["php"] = export_literal
    return env


def render_fragment(template: str, **context: Any) -> str:
    """Render a fragment template with ``context``.

    Raises:
        ValueError: If the template is invalid or references unknown names
    """
    try:
        return _environment().from_string(template).render(**context)
    except TemplateError as exc:
        raise ValueError(f"Invalid fragment template: {exc}") from exc


def constant_fragment(name: str, value: Any, template: str = DEFAULT_CONSTANT_TEMPLATE) -> str:
    """Render a constant-definition statement."""
    return render_fragment(template, name=name, value=value)


def classmap_fragment(key: str, expression: str, template: str = DEFAULT_CLASSMAP_TEMPLATE) -> str:
    """Render a ``key => expression`` class-map entry."""
    return render_fragment(template, key=key, expression=expression)


__all__ = [
    "render_fragment",
    "constant_fragment",
    "classmap_fragment",
    "DEFAULT_CONSTANT_TEMPLATE",
    "DEFAULT_CLASSMAP_TEMPLATE",
]
