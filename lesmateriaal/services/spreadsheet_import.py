"""Spreadsheet import: one course material per row of an .xlsx sheet.

Columns (first sheet, header row skipped):

    naam | link | schooltype | competentie | onderwerp | materiaalsoort | taal | erkNiveau

Taxonomy cells hold comma-separated '<nl> / <de>' titles; unknown terms are
created. Each row commits on its own, so a bad row is reported and the
import goes on.
"""
import io
import logging
import zipfile
from datetime import datetime, timezone
from typing import Any, Optional

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.orm import Session

from lesmateriaal.db.crud.course_materials import create_material, delete_all_materials, find_duplicate
from lesmateriaal.db.crud.taxonomies import find_or_create_term
from lesmateriaal.models.course_material import MaterialStatus
from lesmateriaal.models.import_run import ImportRun
from lesmateriaal.models.taxonomy import Competence, MaterialType, SchoolType, Topic
from lesmateriaal.services.catalog_loader import invalidate_catalog_cache
from lesmateriaal.services.faceted_search import CEFR_LEVELS

logger = logging.getLogger(__name__)

COLUMNS = (
    "naam",
    "link",
    "schooltype",
    "competentie",
    "onderwerp",
    "materiaalsoort",
    "taal",
    "erkNiveau",
)

LANGUAGE_MAPPING: dict[str, str] = {
    "Nederlands": "nl",
    "Duits": "de",
    "Engels": "en",
}

# column -> (taxonomy model, CourseMaterial relationship)
_TAXONOMY_COLUMNS = {
    "schooltype": (SchoolType, "school_types"),
    "competentie": (Competence, "competences"),
    "onderwerp": (Topic, "topics"),
    "materiaalsoort": (MaterialType, "material_types"),
}


class SpreadsheetError(ValueError):
    """The upload is not a readable .xlsx workbook."""


def read_rows(content: bytes) -> list[list[str]]:
    """All rows of the first worksheet as text cells (header included)."""
    try:
        frame = pd.read_excel(
            io.BytesIO(content),
            sheet_name=0,
            header=None,
            dtype=str,
            keep_default_na=False,
            engine="openpyxl",
        )
    except (ValueError, KeyError, zipfile.BadZipFile, InvalidFileException) as e:
        raise SpreadsheetError(f"Could not read spreadsheet: {e}") from e
    return [[_cell_text(v) for v in row] for row in frame.itertuples(index=False, name=None)]


def _cell_text(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def _split(cell: str) -> list[str]:
    return [part.strip() for part in cell.split(",") if part.strip()]


def parse_row(row: list[str]) -> dict[str, str]:
    """Row cells keyed by column name (missing trailing cells are '')."""
    return {name: (row[i] if i < len(row) else "") for i, name in enumerate(COLUMNS)}


def parse_languages(cell: str) -> list[str]:
    """'Nederlands, Duits' -> ['nl', 'de']; unknown names dropped, repeats collapsed."""
    return list(dict.fromkeys(LANGUAGE_MAPPING[name] for name in _split(cell) if name in LANGUAGE_MAPPING))


def parse_cefr(cell: str) -> list[str]:
    levels = list(dict.fromkeys(level.upper() for level in _split(cell)))
    unknown = [level for level in levels if level not in CEFR_LEVELS]
    if unknown:
        raise ValueError(f"Unknown CEFR level(s): {', '.join(unknown)}")
    return levels


def title_field_for(languages: list[str]) -> str:
    """German-only materials keep their title in title_de."""
    return "title_de" if languages == ["de"] else "title_nl"


def _import_row(db: Session, cells: dict[str, str], status: str) -> dict[str, Any]:
    """Create one material from a parsed row. Returns the per-row result."""
    name = cells["naam"]
    link = cells["link"] or None
    languages = parse_languages(cells["taal"])
    cefr = parse_cefr(cells["erkNiveau"])
    title_field = title_field_for(languages)

    duplicate = find_duplicate(db, title_field, name, link)
    if duplicate is not None:
        return {"success": True, "id": duplicate.id, "title": name, "duplicate": True}

    relations: dict[str, list] = {}
    for column, (model, attr) in _TAXONOMY_COLUMNS.items():
        terms = [find_or_create_term(db, model, title)[0] for title in _split(cells[column])]
        relations[attr] = list(dict.fromkeys(t for t in terms if t is not None))

    material = create_material(
        db,
        **{title_field: name},
        link=link,
        links=[{"url": link}] if link else [],
        language=languages,
        cefr=cefr,
        status=status,
        **relations,
    )
    return {"success": True, "id": material.id, "title": name, "duplicate": False}


def import_spreadsheet(
    db: Session,
    content: bytes,
    status: str = MaterialStatus.DRAFT.value,
    delete_all: bool = False,
    filename: Optional[str] = None,
) -> dict[str, Any]:
    """
    Import every row of the workbook.

    Raises SpreadsheetError before touching the DB when the file is not a
    readable workbook.
    """
    started_at = datetime.now(timezone.utc)
    rows = read_rows(content)
    data_rows = rows[1:]

    if delete_all:
        deleted = delete_all_materials(db)
        logger.info("[Import] Deleted %d existing materials", deleted)

    stats = {"success": 0, "created": 0, "duplicates": 0, "errors": 0, "skipped": 0}
    results: list[dict[str, Any]] = []

    for i, row in enumerate(data_rows):
        row_number = i + 2  # 1-based, after the header row
        cells = parse_row(row)
        if not cells["naam"]:
            stats["skipped"] += 1
            continue

        try:
            result = _import_row(db, cells, status)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.exception("[Import] Row %d failed", row_number)
            stats["errors"] += 1
            results.append({
                "row": row_number,
                "success": False,
                "title": cells["naam"],
                "error": str(e),
            })
            continue

        stats["success"] += 1
        stats["duplicates" if result["duplicate"] else "created"] += 1
        results.append({"row": row_number, **result})

    invalidate_catalog_cache()
    logger.info(
        "[Import] %s: rows=%d created=%d duplicates=%d errors=%d",
        filename or "upload", len(data_rows), stats["created"], stats["duplicates"], stats["errors"],
    )

    errors = [r for r in results if not r["success"]]
    try:
        db.add(ImportRun(
            source="XLSX",
            filename=filename,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            created_count=stats["created"],
            duplicate_count=stats["duplicates"],
            error_count=stats["errors"],
            errors_json=errors or None,
        ))
        db.commit()
    except Exception as e:
        db.rollback()
        logger.warning("Failed to save import_run: %s", e)

    return {
        "message": "Import completed",
        "summary": {
            "total": len(data_rows),
            "success": stats["success"],
            "created": stats["created"],
            "duplicates": stats["duplicates"],
            "errors": stats["errors"],
            "skipped": stats["skipped"],
        },
        "results": results,
    }
