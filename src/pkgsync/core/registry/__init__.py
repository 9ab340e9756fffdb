"""Managed package registry.

Key components:
- PackageRegistry: Interface the reconciliation engine mutates
- YamlPackageRegistry: File-backed implementation
"""
from __future__ import annotations

from pkgsync.core.registry.base import PackageRegistry
from pkgsync.core.registry.yaml_registry import YamlPackageRegistry

__all__ = ["PackageRegistry", "YamlPackageRegistry"]
