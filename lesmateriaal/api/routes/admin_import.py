"""Admin endpoints: spreadsheet import and taxonomy seeding."""
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from lesmateriaal.api.schemas.imports import ImportResponse, TaxonomySeedResponse
from lesmateriaal.core.auth import rate_limit_admin, require_admin_key
from lesmateriaal.db.session import get_db
from lesmateriaal.models.course_material import MaterialStatus
from lesmateriaal.services.spreadsheet_import import SpreadsheetError, import_spreadsheet
from lesmateriaal.services.taxonomy_seed import seed_taxonomies

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/import",
    tags=["admin"],
    dependencies=[Depends(require_admin_key), Depends(rate_limit_admin)],
)


@router.post("", response_model=ImportResponse)
async def import_materials(
    file: UploadFile = File(...),
    delete_all: bool = Form(False),
    status: MaterialStatus = Form(MaterialStatus.DRAFT),
    db: Session = Depends(get_db),
) -> dict:
    """
    Import course materials from an .xlsx upload.

    Rows are independent: failing rows are listed in `results` with their
    sheet row number, the rest is imported. delete_all=true wipes every
    existing material first.
    """
    if not file.filename or not file.filename.lower().endswith(".xlsx"):
        raise HTTPException(status_code=400, detail="Only .xlsx files are supported")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")

    try:
        return import_spreadsheet(
            db,
            content,
            status=status.value,
            delete_all=delete_all,
            filename=file.filename,
        )
    except SpreadsheetError as e:
        logger.warning("Rejected upload %s: %s", file.filename, e)
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/taxonomies", response_model=TaxonomySeedResponse)
async def import_taxonomies(db: Session = Depends(get_db)) -> dict:
    """Create the predefined taxonomy terms; fill missing German titles."""
    return seed_taxonomies(db)
