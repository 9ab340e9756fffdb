"""Inspect and reconcile the managed package registry.

Provides CLI interface for the registry:
- list: List managed packages
- reconcile: Reconcile the registry with the resolver without rebuilding
"""
from __future__ import annotations

SUBCOMMANDS = {
    "list": "pkgsync.cli.registry.list",
    "reconcile": "pkgsync.cli.registry.reconcile",
}

__all__ = ["SUBCOMMANDS"]
