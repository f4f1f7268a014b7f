"""Taxonomy vocabularies endpoint."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from lesmateriaal.api.schemas.material import TermRead
from lesmateriaal.api.schemas.taxonomy import TaxonomiesResponse
from lesmateriaal.core.config import settings
from lesmateriaal.db.session import get_db
from lesmateriaal.services.catalog_loader import get_catalog
from lesmateriaal.services.faceted_search import FACETS, collation_key

router = APIRouter(prefix="/taxonomies", tags=["taxonomies"])


@router.get("", response_model=TaxonomiesResponse)
async def list_taxonomies(
    lang: Optional[str] = Query(None, pattern="^(nl|de)$"),
    db: Session = Depends(get_db),
) -> TaxonomiesResponse:
    """Every vocabulary (incl. fixed languages and CEFR levels), localized."""
    lang = lang or settings.default_locale
    vocab = get_catalog(db).vocabularies

    out: dict[str, list[TermRead]] = {}
    for f in FACETS:
        terms = [TermRead(id=t.id, title=t.title(lang)) for t in vocab.terms(f.key)]
        if f.key not in ("langs", "cefr"):
            terms.sort(key=lambda t: collation_key(t.title))
        out[f.key] = terms
    return TaxonomiesResponse(**out)
