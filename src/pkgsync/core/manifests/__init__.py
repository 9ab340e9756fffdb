"""Generated manifest patching.

Key components:
- ManifestPatcher: Insert constant definitions and class-map entries
- export_literal: PHP literal export for injected values
- render_fragment: Jinja2 rendering of fragment templates
"""
from __future__ import annotations

from pkgsync.core.manifests.fragments import (
    classmap_fragment,
    constant_fragment,
    render_fragment,
)
from pkgsync.core.manifests.literals import export_literal
from pkgsync.core.manifests.patcher import ManifestPatcher, locate_anchor

__all__ = [
    "ManifestPatcher",
    "locate_anchor",
    "export_literal",
    "render_fragment",
    "constant_fragment",
    "classmap_fragment",
]
