"""
pkgsync registry reconcile command.

SUMMARY: Reconcile managed packages with the resolver (no rebuild)
"""
from __future__ import annotations

import argparse

from pkgsync.cli import OutputFormatter, add_standard_flags, get_repo_root, load_cli_config

SUMMARY = "Reconcile managed packages with the resolver (no rebuild)"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    """Reconcile the registry with installed.json."""
    from pkgsync.core.exceptions import RegistryMutationError
    from pkgsync.core.reconcile import ReconciliationEngine
    from pkgsync.core.registry import YamlPackageRegistry
    from pkgsync.core.resolver import InstalledJsonSnapshot

    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        config = load_cli_config(args, repo_root)
        snapshot = InstalledJsonSnapshot(repo_root, config.vendor_dir)
        registry = YamlPackageRegistry(config.registry_path, repo_root)
        engine = ReconciliationEngine(reporter=formatter.progress)
        result = engine.reconcile_snapshot(snapshot, registry, config.installer_name)
    except RegistryMutationError as e:
        formatter.error(e, error_code="registry_mutation_error")
        if e.partial is not None and e.partial.changed:
            applied = len(e.partial.installed) + len(e.partial.removed)
            formatter.progress(f"{applied} change(s) were applied before the failure.")
        return 1
    except Exception as e:
        formatter.error(e, error_code="registry_reconcile_error")
        return 1

    if formatter.json_mode:
        formatter.json_output(result.to_dict())
    else:
        formatter.text(f"Installed {len(result.installed)}, removed {len(result.removed)}.")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    parsed = parser.parse_args()
    exit(main(parsed))
