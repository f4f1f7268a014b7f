#!/usr/bin/env python3
"""Import course materials from an .xlsx spreadsheet into the catalog."""
import argparse
import sys
from datetime import datetime
from pathlib import Path

SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lesmateriaal.utils.env import load_env_if_present

load_env_if_present()

from lesmateriaal.core.logging import setup_logging
from lesmateriaal.db.session import SessionLocal, init_db
from lesmateriaal.services.spreadsheet_import import SpreadsheetError, import_spreadsheet

DATE_FMT = "%Y-%m-%d %H:%M:%S"


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Import course materials from the first sheet of an .xlsx file.",
        epilog="Example: python scripts/import_materials.py materialen.xlsx --status published",
    )
    p.add_argument("file", help="Path to the .xlsx file")
    p.add_argument("--status", choices=("draft", "published"), default="draft", help="Status of imported materials (default: draft)")
    p.add_argument("--delete-all", action="store_true", help="Delete all existing materials first")
    p.add_argument("--init-db", action="store_true", help="Create missing tables first (development only)")
    return p.parse_args()


def main() -> int:
    args = parse_args()
    setup_logging()
    ts = datetime.now().strftime(DATE_FMT)

    path = Path(args.file)
    if not path.is_file():
        print(f"{ts} [ERROR] File not found: {path}")
        return 1

    if args.init_db:
        init_db()

    db = SessionLocal()
    try:
        result = import_spreadsheet(
            db,
            path.read_bytes(),
            status=args.status,
            delete_all=args.delete_all,
            filename=path.name,
        )
    except SpreadsheetError as e:
        print(f"{ts} [ERROR] {e}")
        return 1
    finally:
        db.close()

    s = result["summary"]
    print(
        f"{ts} [INFO] Rows: {s['total']}, created: {s['created']}, "
        f"duplicates: {s['duplicates']}, errors: {s['errors']}"
    )
    for r in result["results"]:
        if not r["success"]:
            print(f"  - row {r['row']} ({r['title']}): {r['error']}")
    return 0 if s["errors"] == 0 else 2


if __name__ == "__main__":
    sys.exit(main())
