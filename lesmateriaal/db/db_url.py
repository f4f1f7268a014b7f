"""Database URL resolution utilities."""
import os
from pathlib import Path


def resolve_db_url(db_url: str) -> str:
    """
    Resolve relative SQLite database URLs to absolute paths (Windows-safe).
    If db_url is sqlite:///./dev.db (relative), resolve against the project root.
    Keep non-sqlite URLs unchanged.
    """
    if not db_url.startswith("sqlite"):
        return db_url

    if ":///./" in db_url:
        prefix, relative_path = db_url.split(":///./", 1)
        # Project root is where alembic.ini lives
        project_root = Path(__file__).resolve().parent.parent.parent
        absolute_path = (project_root / relative_path).resolve()
        return f"{prefix}:///{absolute_path.as_posix()}"

    return db_url


def get_default_db_url() -> str:
    """Get default database URL: DATABASE_URL env var or sqlite:///./dev.db."""
    db_url = os.environ.get("DATABASE_URL")
    if db_url:
        return resolve_db_url(db_url)
    return resolve_db_url("sqlite:///./dev.db")
