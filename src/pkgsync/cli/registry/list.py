"""
pkgsync registry list command.

SUMMARY: List managed packages
"""
from __future__ import annotations

import argparse

from pkgsync.cli import OutputFormatter, add_standard_flags, get_repo_root, load_cli_config

SUMMARY = "List managed packages"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--installer",
        help="Only list packages owned by this installer",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    """List managed packages."""
    from pkgsync.core.registry import YamlPackageRegistry
    from pkgsync.core.utils.paths import make_relative

    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        config = load_cli_config(args, repo_root)
        registry = YamlPackageRegistry(config.registry_path, repo_root)
        if args.installer:
            packages = registry.by_installer(args.installer)
        else:
            packages = registry.packages()

        if formatter.json_mode:
            formatter.json_output(
                {
                    "root": registry.root_package_name,
                    "packages": [p.to_dict() for p in packages],
                }
            )
            return 0

        if not packages:
            formatter.text("No managed packages.")
            return 0

        formatter.text(f"Managed packages ({len(packages)}):")
        for package in packages:
            rel = make_relative(package.install_path, repo_root)
            formatter.text(f"  {package.name}  {rel}  [{package.installer}]")
        return 0

    except Exception as e:
        formatter.error(e, error_code="registry_list_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    parsed = parser.parse_args()
    exit(main(parsed))
