"""CRUD operations for course materials."""
from typing import Any, Optional

from sqlalchemy.orm import Session

from lesmateriaal.db.crud.taxonomies import slug_exists
from lesmateriaal.models.course_material import CourseMaterial, MaterialStatus
from lesmateriaal.utils.slug import material_slug, unique_slug

ID_PREFIX = "id:"


def list_published_materials(db: Session) -> list[CourseMaterial]:
    """Published materials, newest first."""
    return (
        db.query(CourseMaterial)
        .filter(CourseMaterial.status == MaterialStatus.PUBLISHED.value)
        .order_by(CourseMaterial.created_at.desc())
        .all()
    )


def get_material(db: Session, material_id: str) -> Optional[CourseMaterial]:
    return db.query(CourseMaterial).filter(CourseMaterial.id == material_id).first()


def get_material_by_slug_or_id(
    db: Session,
    slug_or_id: str,
    include_drafts: bool = False,
) -> Optional[CourseMaterial]:
    """
    Resolve a detail-page address.

    'id:<id>' addresses by id (drafts only with include_drafts);
    anything else is a slug and never resolves to a draft.
    """
    if slug_or_id.startswith(ID_PREFIX):
        material = get_material(db, slug_or_id[len(ID_PREFIX):])
        if material is None:
            return None
        if material.status != MaterialStatus.PUBLISHED.value and not include_drafts:
            return None
        return material

    return (
        db.query(CourseMaterial)
        .filter(
            CourseMaterial.slug == slug_or_id,
            CourseMaterial.status != MaterialStatus.DRAFT.value,
        )
        .first()
    )


def find_duplicate(db: Session, title_field: str, title: str, link: Optional[str]) -> Optional[CourseMaterial]:
    """Material with the same title (in `title_field`) and the same link."""
    column = getattr(CourseMaterial, title_field)
    for material in db.query(CourseMaterial).filter(column == title).all():
        urls = [l.get("url") for l in (material.links or []) if isinstance(l, dict)]
        if link and (link in urls or material.link == link):
            return material
        if not link and not urls and not material.link:
            return material
    return None


def create_material(db: Session, **fields: Any) -> CourseMaterial:
    """Add a material with a free slug. Flushes, does not commit."""
    base = material_slug(fields.get("title_nl"), fields.get("title_de"), fields.pop("slug", None))
    material = CourseMaterial(
        slug=unique_slug(base, lambda s: slug_exists(db, CourseMaterial, s)),
        **fields,
    )
    db.add(material)
    db.flush()
    return material


def delete_all_materials(db: Session) -> int:
    """Delete every material (association rows go with them). Commits."""
    materials = db.query(CourseMaterial).all()
    for material in materials:
        db.delete(material)
    db.commit()
    return len(materials)


def count_materials(db: Session, published_only: bool = False) -> int:
    query = db.query(CourseMaterial)
    if published_only:
        query = query.filter(CourseMaterial.status == MaterialStatus.PUBLISHED.value)
    return query.count()
