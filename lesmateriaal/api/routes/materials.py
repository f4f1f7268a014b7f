"""Course material endpoints: faceted explorer and detail page."""
import logging
from typing import Iterable, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from lesmateriaal.api.schemas.material import (
    ExplorerResponse,
    FacetOptionRead,
    FilterStateRead,
    LinkRead,
    MaterialDetail,
    MaterialSummary,
    NavigationRead,
    TermRead,
)
from lesmateriaal.core.auth import is_admin_request
from lesmateriaal.core.config import settings
from lesmateriaal.db.crud.course_materials import get_material_by_slug_or_id
from lesmateriaal.db.session import get_db
from lesmateriaal.i18n.dictionaries import get_dictionary, materials_found
from lesmateriaal.services.catalog_loader import get_catalog, record_from_orm
from lesmateriaal.services.faceted_search import (
    FACETS,
    FilterState,
    MaterialRecord,
    Term,
    Vocabularies,
    localized,
    prune_stale_selections,
    resolve_id,
)
from lesmateriaal.services.filter_url import parse_params
from lesmateriaal.services.material_navigation import material_path, navigate
from lesmateriaal.services.materials_explorer import explore
from lesmateriaal.utils.pdf import is_pdf_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/materials", tags=["materials"])

_LANG_PATTERN = "^(nl|de)$"


# ── Helpers ──────────────────────────────────────────────────────────


def _terms(values: Iterable, lang: str, vocabulary: Iterable[Term] = ()) -> list[TermRead]:
    index = {t.id: t for t in vocabulary}
    out: list[TermRead] = []
    for value in values or ():
        term = value if isinstance(value, Term) else index.get(resolve_id(value) or "")
        if term is not None:
            out.append(TermRead(id=term.id, title=term.title(lang)))
    return out


def _summary(record: MaterialRecord, lang: str, filters: FilterState, vocab: Vocabularies) -> dict:
    school_types = record.school_types
    if school_types is None or isinstance(school_types, (str, int, Term)):
        school_types = () if school_types is None else (school_types,)
    return dict(
        id=record.id,
        slug=record.slug,
        path=material_path(record, lang, filters),
        title=record.title(lang) or get_dictionary(lang)["untitled"],
        description=record.description(lang) or None,
        featured=bool(record.featured),
        languages=list(record.languages or ()),
        cefr=list(record.cefr or ()),
        material_types=_terms(record.material_types, lang, vocab.types),
        school_types=_terms(school_types, lang, vocab.school_types),
        competences=_terms(record.competences, lang, vocab.competences),
        topics=_terms(record.topics, lang, vocab.topics),
        created_at=record.created_at if not isinstance(record.created_at, str) else None,
    )


def _filters_read(filters: FilterState) -> FilterStateRead:
    return FilterStateRead(
        q=filters.query,
        **{f.key: list(filters.selected(f.key)) for f in FACETS},
    )


def _request_filters(request: Request) -> FilterState:
    # multi_items keeps the first value of a repeated parameter
    return parse_params(request.query_params.multi_items())


def _links(material, lang: str) -> list[LinkRead]:
    out: list[LinkRead] = []
    for entry in material.links or []:
        if not isinstance(entry, dict) or not entry.get("url"):
            continue
        url = entry["url"]
        pdf = is_pdf_url(url)
        out.append(LinkRead(
            label=localized(entry.get("label_nl"), entry.get("label_de"), lang) or None,
            url=url,
            is_pdf=pdf,
            proxy_url=f"/api/pdf-proxy?{urlencode({'url': url})}" if pdf else None,
        ))
    return out


# ── Endpoints ────────────────────────────────────────────────────────


@router.get("", response_model=ExplorerResponse)
async def list_materials(
    request: Request,
    lang: Optional[str] = Query(None, pattern=_LANG_PATTERN),
    limit: Optional[int] = Query(None, ge=1, le=100000),
    db: Session = Depends(get_db),
) -> ExplorerResponse:
    """
    Explorer page data: filtered + ranked materials, facet options with
    all-but-one counts, and the canonical query string of the filters.

    Filter params: q, types, schoolTypes, competences, topics, langs, cefr
    (comma-separated ids). Unknown ids are ignored.
    """
    lang = lang or settings.default_locale
    catalog = get_catalog(db)
    result = explore(
        catalog.records,
        catalog.vocabularies,
        _request_filters(request),
        lang,
        limit=limit or settings.explorer_page_size,
    )

    return ExplorerResponse(
        total=result.total,
        limit=result.limit,
        next_limit=result.next_limit,
        results_label=materials_found(lang, result.total),
        items=[
            MaterialSummary(**_summary(r, lang, result.filters, catalog.vocabularies))
            for r in result.items
        ],
        facets={
            key: [FacetOptionRead(id=o.id, title=o.title, count=o.count, selected=o.selected) for o in options]
            for key, options in result.options.items()
        },
        filters=_filters_read(result.filters),
        query_string=result.query_string,
        labels=get_dictionary(lang),
    )


@router.get("/{slug_or_id}", response_model=MaterialDetail)
async def get_material_detail(
    slug_or_id: str,
    request: Request,
    lang: Optional[str] = Query(None, pattern=_LANG_PATTERN),
    is_admin: bool = Depends(is_admin_request),
    db: Session = Depends(get_db),
) -> MaterialDetail:
    """
    Detail page data. `id:<id>` addresses by id (drafts for admins only),
    anything else is a slug. Navigation follows the filtered list the user
    came from (same filter params as the explorer).
    """
    lang = lang or settings.default_locale
    material = get_material_by_slug_or_id(db, slug_or_id, include_drafts=is_admin)
    if not material:
        raise HTTPException(status_code=404, detail="Material not found")

    catalog = get_catalog(db)
    filters = prune_stale_selections(_request_filters(request), catalog.vocabularies)
    nav = navigate(catalog.records, material.id, filters, lang, catalog.vocabularies)
    record = record_from_orm(material)

    return MaterialDetail(
        **_summary(record, lang, filters, catalog.vocabularies),
        status=material.status,
        link=material.link,
        links=_links(material, lang),
        license=material.license,
        contact=material.contact,
        navigation=NavigationRead(
            visible=nav.visible,
            position=nav.position,
            total=nav.total,
            label=nav.label,
            previous=material_path(nav.previous, lang, filters) if nav.previous else None,
            next=material_path(nav.next, lang, filters) if nav.next else None,
            back=nav.back_path,
        ),
        labels=get_dictionary(lang),
    )
