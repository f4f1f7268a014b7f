"""Previous/next navigation on the detail page.

Navigation walks the same filtered and ranked list the explorer showed, so
the order matches the overview the user came from.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from lesmateriaal.i18n.dictionaries import navigation_position
from lesmateriaal.services.faceted_search import FilterState, MaterialRecord, Vocabularies, search
from lesmateriaal.services.filter_url import to_query_string


def material_path(record: MaterialRecord, lang: str, filters: Optional[FilterState] = None) -> str:
    """'/nl/lesmateriaal/<slug>' ('id:<id>' without slug), filters kept."""
    address = record.slug or f"id:{record.id}"
    path = f"/{lang}/lesmateriaal/{address}"
    query = to_query_string(filters) if filters is not None else ""
    return f"{path}?{query}" if query else path


def overview_path(lang: str, filters: FilterState) -> str:
    query = to_query_string(filters)
    return f"/{lang}?{query}" if query else f"/{lang}"


@dataclass
class MaterialNavigation:
    position: Optional[int]  # 1-based; None when the material is not in the list
    total: int
    previous: Optional[MaterialRecord]
    next: Optional[MaterialRecord]
    back_path: str
    label: Optional[str]

    @property
    def visible(self) -> bool:
        """Nothing to navigate with a single result."""
        return self.total > 1


def navigate(
    records: Iterable[MaterialRecord],
    current_id: str,
    filters: FilterState,
    lang: str = "nl",
    vocabularies: Optional[Vocabularies] = None,
) -> MaterialNavigation:
    ranked = search(records, filters, lang, vocabularies).items
    index = next((i for i, r in enumerate(ranked) if r.id == current_id), None)

    if index is None:
        # Opened from outside the filtered list: next leads into it
        return MaterialNavigation(
            position=None,
            total=len(ranked),
            previous=None,
            next=ranked[0] if ranked else None,
            back_path=overview_path(lang, filters),
            label=None,
        )

    return MaterialNavigation(
        position=index + 1,
        total=len(ranked),
        previous=ranked[index - 1] if index > 0 else None,
        next=ranked[index + 1] if index + 1 < len(ranked) else None,
        back_path=overview_path(lang, filters),
        label=navigation_position(lang, index + 1, len(ranked)),
    )
