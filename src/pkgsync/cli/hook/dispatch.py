"""
pkgsync hook dispatch command.

SUMMARY: Run the hooks mapped to host lifecycle events
"""
from __future__ import annotations

import argparse

from pkgsync.cli import OutputFormatter, add_standard_flags, get_repo_root, load_cli_config
from pkgsync.core.orchestrator import EVENT_HOOKS

SUMMARY = "Run the hooks mapped to host lifecycle events"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "events",
        nargs="+",
        choices=sorted(EVENT_HOOKS),
        metavar="event",
        help=f"Host event(s), in delivery order: {', '.join(sorted(EVENT_HOOKS))}",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    """Deliver events to one orchestrator so repeated deliveries run once."""
    from pkgsync.core.orchestrator import Orchestrator

    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        config = load_cli_config(args, repo_root)
        orchestrator = Orchestrator(repo_root, config, reporter=formatter.progress)
        results = [orchestrator.handle_event(event) for event in args.events]
    except Exception as e:
        formatter.error(e, error_code="hook_dispatch_error")
        return 1

    if formatter.json_mode:
        formatter.json_output({"results": [r.to_dict() for r in results]})
    else:
        for result in results:
            if not result.ran:
                formatter.text(f"{result.event}: skipped ({result.hook} already ran)")
            elif not result.success:
                formatter.error(RuntimeError(result.error), f"{result.event}: {result.error}")

    failed = [r for r in results if not r.success]
    return 1 if failed else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    parsed = parser.parse_args()
    exit(main(parsed))
