"""Deliver host lifecycle events to pkgsync hooks.

Provides CLI interface for lifecycle hooks:
- dispatch: Run the hooks mapped to one or more host events
"""
from __future__ import annotations

SUBCOMMANDS = {
    "dispatch": "pkgsync.cli.hook.dispatch",
}

__all__ = ["SUBCOMMANDS"]
