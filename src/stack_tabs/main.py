"""
Command line entry point.

Runs one "reposition active tab" pass against a JSON snapshot of a tab
group and prints what the engine decided.

Usage:
    stack-tabs snapshot.json                  # Report the decision
    stack-tabs snapshot.json --apply          # Also list the tab order after the move
    stack-tabs snapshot.json --config my.toml --debug

Snapshot format:
    {
      "workspaceFolders": ["/home/me/project"],
      "tabs": [
        {"label": "a.py", "resource": "/home/me/project/a.py", "pinned": true},
        {"label": "b.py", "resource": "/home/me/project/b.py", "active": true,
         "languageId": "python"}
      ]
    }
"""

import argparse
import json
import sys
from pathlib import Path

from .config_loader import ConfigStore
from .errors import ErrorReport
from .host import load_snapshot
from .logging_config import setup_logger
from .position import blocking_tab_indexes
from .stacker import TabStacker
from .tabs import find_active_index


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stack-tabs",
        description="Decide where the active tab should be stacked."
    )
    parser.add_argument("snapshot", type=Path, help="JSON snapshot of the tab group")
    parser.add_argument("--config", type=Path, default=None, help="Settings TOML file")
    parser.add_argument("--apply", action="store_true", help="Also list the tab order after the move")
    parser.add_argument("--debug", action="store_true", help="Log engine decisions to stderr")
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for the log file")
    return parser


def run(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logger(debug=args.debug, log_dir=args.log_dir)
    store = ConfigStore.load(args.config)
    if not args.debug and store.get_configuration().get("debug") is True:
        setup_logger(debug=True, log_dir=args.log_dir)

    snapshot = load_snapshot(args.snapshot)
    if not ErrorReport().collect_result(snapshot):
        return 1

    host = snapshot.value
    stacker = TabStacker(host, store)

    tabs = host.get_active_tab_sequence()
    active_index = find_active_index(tabs)
    scope = tabs[active_index].resource_path if active_index != -1 else None
    options = stacker.resolver.effective_options(scope)
    ctx = stacker.predicate.context()
    blocking = blocking_tab_indexes(
        tabs, lambda tab, opts: stacker.predicate(tab, opts, ctx), options
    )

    request = stacker.on_stack_tab_command()

    report = {
        "active_index": active_index if active_index != -1 else None,
        "direction": options.direction.value,
        "padding": options.padding,
        "enabled": options.enabled,
        "filters": list(options.block_move_filters),
        "blocking_indexes": blocking,
        "distance": request.distance if request else None,
        "moved": request is not None,
        "config_ok": not store.report.has_errors(),
    }
    if args.apply:
        report["tabs"] = [tab.label for tab in host.tabs]

    print(json.dumps(report, indent=2))
    return 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
