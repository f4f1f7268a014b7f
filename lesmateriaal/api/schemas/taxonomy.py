"""Taxonomy schemas."""
from pydantic import BaseModel

from lesmateriaal.api.schemas.material import TermRead


class TaxonomiesResponse(BaseModel):
    """All vocabularies, localized; keys match the explorer facets."""

    types: list[TermRead]
    school_types: list[TermRead]
    competences: list[TermRead]
    topics: list[TermRead]
    langs: list[TermRead]
    cefr: list[TermRead]
