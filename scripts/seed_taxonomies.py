#!/usr/bin/env python3
"""Create the predefined school types, competences, topics and material types."""
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
from lesmateriaal.services.taxonomy_seed import seed_taxonomies

DATE_FMT = "%Y-%m-%d %H:%M:%S"


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Seed the predefined bilingual taxonomies (idempotent).",
        epilog="Example: python scripts/seed_taxonomies.py",
    )
    p.add_argument("--init-db", action="store_true", help="Create missing tables first (development only)")
    return p.parse_args()


def main() -> int:
    args = parse_args()
    setup_logging()
    ts = datetime.now().strftime(DATE_FMT)

    if args.init_db:
        init_db()

    db = SessionLocal()
    try:
        result = seed_taxonomies(db)
    finally:
        db.close()

    s = result["summary"]
    print(
        f"{ts} [INFO] created: {s['total_created']}, updated: {s['total_updated']}, "
        f"skipped: {s['total_skipped']}, errors: {s['total_errors']}"
    )
    return 0 if s["total_errors"] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
