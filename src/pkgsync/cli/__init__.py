"""
pkgsync CLI package.

Provides the command-line interface with auto-discovery of commands
from subfolders (hook/, registry/).

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter
from ._args import add_json_flag, add_repo_root_flag, add_standard_flags, add_verbose_flag
from ._utils import get_repo_root, load_cli_config

__all__ = [
    "OutputFormatter",
    "add_json_flag",
    "add_repo_root_flag",
    "add_verbose_flag",
    "add_standard_flags",
    "get_repo_root",
    "load_cli_config",
]
