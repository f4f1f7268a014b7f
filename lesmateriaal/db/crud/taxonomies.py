"""CRUD operations for taxonomy terms (material types, school types, ...)."""
from typing import Optional

from sqlalchemy.orm import Session

from lesmateriaal.models.taxonomy import TaxonomyMixin
from lesmateriaal.utils.slug import slugify, unique_slug


def list_terms(db: Session, model: type[TaxonomyMixin]) -> list[TaxonomyMixin]:
    """All terms of one vocabulary, ordered by Dutch title."""
    return db.query(model).order_by(model.title_nl).all()


def get_term_by_title_nl(db: Session, model: type[TaxonomyMixin], title_nl: str) -> Optional[TaxonomyMixin]:
    return db.query(model).filter(model.title_nl == title_nl).first()


def slug_exists(db: Session, model: type, slug: str) -> bool:
    return db.query(model.id).filter(model.slug == slug).first() is not None


def create_term(
    db: Session,
    model: type[TaxonomyMixin],
    title_nl: str,
    title_de: Optional[str] = None,
) -> TaxonomyMixin:
    """Add a term with a free slug. Flushes, does not commit."""
    slug = unique_slug(slugify(title_nl), lambda s: slug_exists(db, model, s))
    term = model(title_nl=title_nl, title_de=title_de or None, slug=slug)
    db.add(term)
    db.flush()
    return term


def split_bilingual(title: str) -> tuple[str, Optional[str]]:
    """'Reizen / Reisen' -> ('Reizen', 'Reisen'); 'Film' -> ('Film', None)."""
    if " / " in title:
        parts = [p.strip() for p in title.split(" / ")]
        return parts[0], parts[1] or None
    return title.strip(), None


def find_or_create_term(
    db: Session,
    model: type[TaxonomyMixin],
    title: str,
) -> tuple[Optional[TaxonomyMixin], str]:
    """
    Resolve a '<nl> / <de>' (or plain Dutch) title to a term.

    Looks up by title_nl; fills a missing German title on an existing term.
    Returns (term, "created" | "updated" | "existing"); (None, "empty") for
    a blank title. Flushes, does not commit.
    """
    if not title or not title.strip():
        return None, "empty"

    title_nl, title_de = split_bilingual(title)
    existing = get_term_by_title_nl(db, model, title_nl)
    if existing is not None:
        if title_de and not existing.title_de:
            existing.title_de = title_de
            db.flush()
            return existing, "updated"
        return existing, "existing"

    return create_term(db, model, title_nl, title_de), "created"
