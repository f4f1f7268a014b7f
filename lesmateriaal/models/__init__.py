"""All SQLAlchemy models, importable from one place.

Import models from here:
    from lesmateriaal.models import CourseMaterial, Topic, ImportRun, ...
"""
from lesmateriaal.models.base import Base
from lesmateriaal.models.course_material import CourseMaterial, MaterialStatus
from lesmateriaal.models.import_run import ImportRun
from lesmateriaal.models.taxonomy import (
    TAXONOMY_MODELS,
    Competence,
    MaterialType,
    SchoolType,
    Topic,
)

__all__ = [
    "Base",
    "CourseMaterial",
    "MaterialStatus",
    "ImportRun",
    "TAXONOMY_MODELS",
    "Competence",
    "MaterialType",
    "SchoolType",
    "Topic",
]
