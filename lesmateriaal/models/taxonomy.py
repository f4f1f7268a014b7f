"""Taxonomy vocabularies: material types, school types, competences, topics.

All four share one shape (bilingual title + unique slug); each lives in its
own table so a course material can reference them independently.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from lesmateriaal.models.base import Base


class TaxonomyMixin:
    """Columns shared by every taxonomy table."""

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    title_nl: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    title_de: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    slug: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=func.now(),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=func.now(),
        onupdate=func.now(),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id} {self.title_nl!r}>"


class MaterialType(TaxonomyMixin, Base):
    """Materiaalsoort (video, werkblad, ...)."""

    __tablename__ = "material_types"


class SchoolType(TaxonomyMixin, Base):
    """Schooltype (basisschool, voortgezet onderwijs, MBO)."""

    __tablename__ = "school_types"


class Competence(TaxonomyMixin, Base):
    """Competentie (spreken, lezen, ...)."""

    __tablename__ = "competences"


class Topic(TaxonomyMixin, Base):
    """Onderwerp (reizen, sport, ...)."""

    __tablename__ = "topics"


# Collection slug (as used by the import tooling) -> model
TAXONOMY_MODELS: dict[str, type[TaxonomyMixin]] = {
    "material-types": MaterialType,
    "school-types": SchoolType,
    "competences": Competence,
    "topics": Topic,
}
