"""Health check endpoint."""
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lesmateriaal.db.crud.course_materials import count_materials
from lesmateriaal.db.session import get_db
from lesmateriaal.models.import_run import ImportRun

router = APIRouter()


@router.get("/health")
async def health_check(db: Session = Depends(get_db)) -> dict[str, Any]:
    """
    Health check with database connectivity, material counts and last
    import info. Returns 503 if the database is unreachable.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        raise HTTPException(
            status_code=503,
            detail={"status": "degraded", "db": "error"},
        )

    info: dict[str, Any] = {
        "status": "ok",
        "db": "ok",
        "materials": count_materials(db),
        "published": count_materials(db, published_only=True),
    }

    last = db.query(ImportRun).order_by(ImportRun.started_at.desc()).first()
    if last:
        info["last_import"] = {
            "source": last.source,
            "at": str(last.started_at),
            "created": last.created_count,
            "duplicates": last.duplicate_count,
            "errors": last.error_count,
        }
    return info
