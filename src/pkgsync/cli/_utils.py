"""Shared CLI utility functions."""
from __future__ import annotations

import argparse
from pathlib import Path

from pkgsync.core.config import ConfigManager, SyncConfig
from pkgsync.core.logging_setup import configure_logging, suppress_lastresort_in_json_mode
from pkgsync.core.utils.paths import make_absolute, resolve_project_root


def get_repo_root(args: argparse.Namespace) -> Path:
    """Get repository root from args or auto-detect."""
    if getattr(args, "repo_root", None):
        return Path(args.repo_root).resolve()
    return resolve_project_root()


def load_cli_config(args: argparse.Namespace, repo_root: Path) -> SyncConfig:
    """Load project config and configure logging for a CLI invocation.

    With ``logging.file`` configured, logs go there at ``logging.level``.
    Otherwise only warnings reach stderr (debug with --verbose), since
    progress is already printed; JSON mode keeps stderr quiet.
    """
    config = ConfigManager(repo_root).load()
    json_mode = bool(getattr(args, "json", False))
    if config.log_file:
        configure_logging(level=config.log_level, log_path=make_absolute(config.log_file, repo_root))
    elif not json_mode:
        configure_logging(level="DEBUG" if getattr(args, "verbose", False) else "WARNING")
    if json_mode:
        suppress_lastresort_in_json_mode()
    return config


__all__ = ["get_repo_root", "load_cli_config"]
