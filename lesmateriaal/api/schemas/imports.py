"""Import endpoint schemas."""
from typing import Optional

from pydantic import BaseModel


class ImportRowResult(BaseModel):
    row: int
    success: bool
    title: str
    id: Optional[str] = None
    duplicate: bool = False
    error: Optional[str] = None


class ImportSummary(BaseModel):
    total: int
    success: int
    created: int
    duplicates: int
    errors: int
    skipped: int


class ImportResponse(BaseModel):
    message: str
    summary: ImportSummary
    results: list[ImportRowResult]


class TaxonomySeedItem(BaseModel):
    title: str
    status: str  # created | updated | skipped | error
    id: Optional[str] = None
    error: Optional[str] = None


class TaxonomySeedSummary(BaseModel):
    total_created: int
    total_updated: int
    total_skipped: int
    total_errors: int
    total_processed: int


class TaxonomySeedResponse(BaseModel):
    message: str
    summary: TaxonomySeedSummary
    results: dict[str, list[TaxonomySeedItem]]
