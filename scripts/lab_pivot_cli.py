#!/usr/bin/env python3
"""
Lab Pivot command line tool

Ingests extracted lab reports into the lab store and inspects the
resulting pivot tables.

Usage:
    python scripts/lab_pivot_cli.py register DOC_ID OWNER_ID
    python scripts/lab_pivot_cli.py ingest DOC_ID report.json
    python scripts/lab_pivot_cli.py rebuild OWNER_ID
    python scripts/lab_pivot_cli.py show --owner OWNER_ID
    python scripts/lab_pivot_cli.py show --document DOC_ID
    python scripts/lab_pivot_cli.py schema
"""

import argparse
import json
import sys
from pathlib import Path

from lab_pivot.domain.report import build_report_schema
from lab_pivot.processors.lab_results_processor import LabResultsProcessor
from lab_pivot.services.pivot_updater import PivotUpdater
from lab_pivot.services.queries import get_pivot_by_document, get_pivot_by_owner
from lab_pivot.storage.sqlite_store import SqliteLabStore
from lab_pivot.utils.exceptions import LabPivotError
from lab_pivot.utils.logging import setup_logging_from_settings


def cmd_register(store: SqliteLabStore, args) -> int:
    store.register_document(args.document_id, args.owner_id, deleted=args.deleted)
    print(f"Registered document {args.document_id} for owner {args.owner_id}")
    return 0


def cmd_ingest(store: SqliteLabStore, args) -> int:
    report_path = Path(args.report)
    if not report_path.exists():
        print(f"ERROR: Report file not found: {report_path}")
        return 1

    processor = LabResultsProcessor(store)
    results = processor.process_raw(args.document_id, report_path.read_text(encoding="utf-8"))

    for result in results:
        print(f"  {result.date.isoformat()}  {len(result.points):3d} points  ({result.id})")
    print(f"Stored {len(results)} lab results for document {args.document_id}")
    return 0


def cmd_rebuild(store: SqliteLabStore, args) -> int:
    table = PivotUpdater(store=store).rebuild_for_owner(args.owner_id)
    if table is None:
        print(f"Owner {args.owner_id} has no documents; pivot removed")
    else:
        print(f"Rebuilt pivot for {args.owner_id}: {len(table.columns)} columns, {len(table.rows)} rows")
    return 0


def cmd_show(store: SqliteLabStore, args) -> int:
    with store.session(readonly=True) as session:
        if args.owner:
            view = get_pivot_by_owner(session, args.owner)
        else:
            view = get_pivot_by_document(session, args.document)

    if view is None:
        print("No pivot table found")
        return 1

    print(view.model_dump_json(indent=2))
    return 0


def cmd_schema(store, args) -> int:
    print(json.dumps(build_report_schema(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lab results and pivot table tool")
    parser.add_argument("--db", type=str, default=None, help="SQLite database path")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register = subparsers.add_parser("register", help="Register document ownership")
    register.add_argument("document_id")
    register.add_argument("owner_id")
    register.add_argument("--deleted", action="store_true", help="Mark the document as deleted")
    register.set_defaults(func=cmd_register)

    ingest = subparsers.add_parser("ingest", help="Ingest an extracted lab report (JSON)")
    ingest.add_argument("document_id")
    ingest.add_argument("report", help="Path to the report JSON file")
    ingest.set_defaults(func=cmd_ingest)

    rebuild = subparsers.add_parser("rebuild", help="Rebuild an owner's pivot table")
    rebuild.add_argument("owner_id")
    rebuild.set_defaults(func=cmd_rebuild)

    show = subparsers.add_parser("show", help="Print a pivot table as JSON")
    target = show.add_mutually_exclusive_group(required=True)
    target.add_argument("--owner", type=str, help="Owner id")
    target.add_argument("--document", type=str, help="Document id")
    show.set_defaults(func=cmd_show)

    schema = subparsers.add_parser("schema", help="Print the report JSON schema")
    schema.set_defaults(func=cmd_schema, no_store=True)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging_from_settings()

    try:
        store = None if getattr(args, "no_store", False) else SqliteLabStore(db_path=args.db)
        return args.func(store, args)
    except LabPivotError as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
