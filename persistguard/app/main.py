"""
app/main.py

Command-line access to the snapshot store.

Usage:
    python -m persistguard.app.main list
    python -m persistguard.app.main show <snapshot_id>
    python -m persistguard.app.main compare <from_id> <to_id> [--json]
    python -m persistguard.app.main delete <snapshot_id>
"""

import argparse
import json
import sys

from persistguard.config.settings import DB_PATH
from persistguard.dynamic.comparison_service import compare_snapshots
from persistguard.dynamic.errors import ComparisonError, SnapshotStoreError
from persistguard.dynamic.snapshot_service import SnapshotStore
from persistguard.ui.diff_formatter import format_comparison_error, format_diff


def _cmd_list(store, args):
    snapshots = store.list_snapshots()
    if not snapshots:
        print("No snapshots.")
        return 0
    for snap in snapshots:
        note = f"  {snap.note}" if snap.note else ""
        print(f"{snap.id}  {snap.captured_at:%Y-%m-%d %H:%M:%S}  "
              f"{snap.trigger.display_name:<16} {snap.item_count:>5} items{note}")
    return 0


def _cmd_show(store, args):
    snap = store.get_snapshot(args.snapshot_id)
    print(f"Snapshot {snap.id} ({snap.trigger.display_name}, {snap.item_count} items)")
    for item in store.get_items(args.snapshot_id):
        state = "on " if item.is_enabled else "off"
        print(f"  [{state}] {item.name}  [{item.identifier}]  "
              f"{item.trust_level.display_name}  {item.executable_path or ''}")
    return 0


def _cmd_compare(store, args):
    try:
        diff = compare_snapshots(store, args.from_id, args.to_id)
    except ComparisonError as e:
        print(format_comparison_error(e), file=sys.stderr)
        return 1
    if args.json:
        print(json.dumps(diff.to_dict(), indent=2))
    else:
        print(format_diff(diff))
    return 0


def _cmd_delete(store, args):
    store.delete_snapshot(args.snapshot_id)
    print(f"Deleted snapshot {args.snapshot_id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="persistguard")
    parser.add_argument("--db", default=DB_PATH, help="snapshot database path")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="list snapshots, newest first").set_defaults(func=_cmd_list)

    show = sub.add_parser("show", help="print the items of a snapshot")
    show.add_argument("snapshot_id")
    show.set_defaults(func=_cmd_show)

    compare = sub.add_parser("compare", help="diff two snapshots")
    compare.add_argument("from_id")
    compare.add_argument("to_id")
    compare.add_argument("--json", action="store_true", help="emit JSON instead of text")
    compare.set_defaults(func=_cmd_compare)

    delete = sub.add_parser("delete", help="delete a snapshot and its items")
    delete.add_argument("snapshot_id")
    delete.set_defaults(func=_cmd_delete)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        store = SnapshotStore(args.db)
        return args.func(store, args)
    except SnapshotStoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
