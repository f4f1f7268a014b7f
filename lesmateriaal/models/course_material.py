"""Course material (lesmateriaal) model with its taxonomy relations."""
import enum
import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Table, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from lesmateriaal.models.base import Base
from lesmateriaal.models.taxonomy import Competence, MaterialType, SchoolType, Topic


class MaterialStatus(str, enum.Enum):
    """Publication status; drafts are only visible to admins."""

    DRAFT = "draft"
    PUBLISHED = "published"


def _association(name: str, target: str) -> Table:
    return Table(
        name,
        Base.metadata,
        Column(
            "course_material_id",
            String(36),
            ForeignKey("course_materials.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        Column(
            "term_id",
            String(36),
            ForeignKey(f"{target}.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )


course_material_material_types = _association("course_material_material_types", "material_types")
course_material_school_types = _association("course_material_school_types", "school_types")
course_material_competences = _association("course_material_competences", "competences")
course_material_topics = _association("course_material_topics", "topics")


class CourseMaterial(Base):
    """
    One catalog entry. Title/description exist in nl and de; either may be
    empty and readers fall back to the other language.
    Table name: course_materials.
    """

    __tablename__ = "course_materials"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    title_nl: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True, index=True)
    title_de: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    description_nl: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description_de: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    link: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    links: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSON, nullable=True)  # [{label_nl, label_de, url}]
    license: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    contact: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    cefr: Mapped[Optional[list[str]]] = mapped_column(JSON, nullable=True)  # ["A2", "B1"]
    language: Mapped[Optional[list[str]]] = mapped_column(JSON, nullable=True)  # ["nl", "de"]

    status: Mapped[str] = mapped_column(
        String(20), default=MaterialStatus.DRAFT.value, nullable=False, index=True
    )
    slug: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # internal, never exposed publicly

    material_types: Mapped[list[MaterialType]] = relationship(
        secondary=course_material_material_types, lazy="selectin"
    )
    school_types: Mapped[list[SchoolType]] = relationship(
        secondary=course_material_school_types, lazy="selectin"
    )
    competences: Mapped[list[Competence]] = relationship(
        secondary=course_material_competences, lazy="selectin"
    )
    topics: Mapped[list[Topic]] = relationship(
        secondary=course_material_topics, lazy="selectin"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=func.now(),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=func.now(),
        onupdate=func.now(),
        server_default=func.now(),
        nullable=False,
    )
