"""Course material and explorer schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TermRead(BaseModel):
    """A taxonomy term, localized."""

    id: str
    title: str


class FacetOptionRead(BaseModel):
    id: str
    title: str
    count: int
    selected: bool = False


class FilterStateRead(BaseModel):
    """Effective filter state (stale ids already dropped)."""

    q: str = ""
    types: list[str] = Field(default_factory=list)
    school_types: list[str] = Field(default_factory=list)
    competences: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    langs: list[str] = Field(default_factory=list)
    cefr: list[str] = Field(default_factory=list)


class MaterialSummary(BaseModel):
    """One card in the explorer list."""

    id: str
    slug: Optional[str] = None
    path: str
    title: str
    description: Optional[str] = None
    featured: bool = False
    languages: list[str] = Field(default_factory=list)
    cefr: list[str] = Field(default_factory=list)
    material_types: list[TermRead] = Field(default_factory=list)
    school_types: list[TermRead] = Field(default_factory=list)
    competences: list[TermRead] = Field(default_factory=list)
    topics: list[TermRead] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class ExplorerResponse(BaseModel):
    total: int
    limit: int
    next_limit: Optional[int] = None
    results_label: str
    items: list[MaterialSummary]
    facets: dict[str, list[FacetOptionRead]]
    filters: FilterStateRead
    query_string: str
    labels: dict[str, str]


class LinkRead(BaseModel):
    label: Optional[str] = None
    url: str
    is_pdf: bool = False
    proxy_url: Optional[str] = None


class NavigationRead(BaseModel):
    visible: bool
    position: Optional[int] = None
    total: int
    label: Optional[str] = None
    previous: Optional[str] = None
    next: Optional[str] = None
    back: str


class MaterialDetail(MaterialSummary):
    status: str
    link: Optional[str] = None
    links: list[LinkRead] = Field(default_factory=list)
    license: Optional[str] = None
    contact: Optional[str] = None
    navigation: NavigationRead
    labels: dict[str, str]
