"""Catalog loading: published materials + vocabularies as engine records.

The explorer works on the whole catalog in memory, so it is loaded once and
cached (CATALOG_CACHE_TTL_SECONDS). Imports call invalidate_catalog_cache().
"""
import logging
import time as _time
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from lesmateriaal.core.config import settings
from lesmateriaal.db.crud.course_materials import list_published_materials
from lesmateriaal.db.crud.taxonomies import list_terms
from lesmateriaal.models.course_material import CourseMaterial
from lesmateriaal.models.taxonomy import Competence, MaterialType, SchoolType, Topic
from lesmateriaal.services.faceted_search import MaterialRecord, Term, Vocabularies

logger = logging.getLogger(__name__)

# ── Catalog cache (in-memory, TTL) ───────────────────────────────────
_catalog_cache: Optional["Catalog"] = None
_catalog_cache_ts: float = 0.0


@dataclass(frozen=True)
class Catalog:
    records: tuple[MaterialRecord, ...]
    vocabularies: Vocabularies

    def by_id(self, material_id: str) -> Optional[MaterialRecord]:
        return next((r for r in self.records if r.id == material_id), None)


def term_from_orm(term) -> Term:
    return Term(id=term.id, title_nl=term.title_nl, title_de=term.title_de)


def record_from_orm(material: CourseMaterial) -> MaterialRecord:
    """Engine view of a material with its relations resolved to Terms."""
    return MaterialRecord(
        id=material.id,
        title_nl=material.title_nl,
        title_de=material.title_de,
        description_nl=material.description_nl,
        description_de=material.description_de,
        material_types=tuple(term_from_orm(t) for t in material.material_types),
        school_types=tuple(term_from_orm(t) for t in material.school_types),
        competences=tuple(term_from_orm(t) for t in material.competences),
        topics=tuple(term_from_orm(t) for t in material.topics),
        languages=tuple(material.language or ()),
        cefr=tuple(material.cefr or ()),
        featured=bool(material.featured),
        created_at=material.created_at,
        slug=material.slug,
    )


def load_vocabularies(db: Session) -> Vocabularies:
    return Vocabularies(
        types=tuple(term_from_orm(t) for t in list_terms(db, MaterialType)),
        school_types=tuple(term_from_orm(t) for t in list_terms(db, SchoolType)),
        competences=tuple(term_from_orm(t) for t in list_terms(db, Competence)),
        topics=tuple(term_from_orm(t) for t in list_terms(db, Topic)),
    )


def load_catalog(db: Session) -> Catalog:
    """Read the catalog from the DB (uncached)."""
    records = tuple(record_from_orm(m) for m in list_published_materials(db))
    vocabularies = load_vocabularies(db)
    logger.debug("Loaded catalog: %d materials", len(records))
    return Catalog(records=records, vocabularies=vocabularies)


def get_catalog(db: Session) -> Catalog:
    """
    Return the published catalog (cached CATALOG_CACHE_TTL_SECONDS).
    """
    global _catalog_cache, _catalog_cache_ts

    now = _time.time()
    if _catalog_cache is not None and (now - _catalog_cache_ts) < settings.catalog_cache_ttl_seconds:
        return _catalog_cache

    catalog = load_catalog(db)
    _catalog_cache = catalog
    _catalog_cache_ts = now
    return catalog


def invalidate_catalog_cache() -> None:
    """Call after imports to force a fresh catalog on next request."""
    global _catalog_cache, _catalog_cache_ts
    _catalog_cache = None
    _catalog_cache_ts = 0.0
