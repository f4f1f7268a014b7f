"""Slug helpers for materials and taxonomy terms."""
from typing import Callable, Optional

from slugify import slugify as _slugify


def slugify(text: Optional[str]) -> str:
    """'Reizen in Duitsland' -> 'reizen_in_duitsland' (accents stripped)."""
    if not text:
        return ""
    return _slugify(text, separator="_")


def material_slug(title_nl: Optional[str], title_de: Optional[str], slug: Optional[str] = None) -> str:
    """Explicit slug if given, else from title_nl, else from title_de."""
    return slugify(slug) or slugify(title_nl) or slugify(title_de)


def unique_slug(base: str, exists: Callable[[str], bool]) -> str:
    """`base`, or `base_2`, `base_3`, ... whichever is still free."""
    base = base or "item"
    candidate = base
    n = 2
    while exists(candidate):
        candidate = f"{base}_{n}"
        n += 1
    return candidate
