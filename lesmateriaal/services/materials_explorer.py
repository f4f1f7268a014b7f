"""Explorer view: filter state + limit + facet options over a catalog.

`explore()` is the stateless entry point used by the HTTP API.
`MaterialsExplorer` is the per-view session: it owns the filter state,
prunes stale selections, grows the limit, and drives the URL/history sync.
"""
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from apscheduler.schedulers.background import BackgroundScheduler

from lesmateriaal.core.config import settings
from lesmateriaal.services.faceted_search import (
    FACETS,
    FacetOption,
    FilterState,
    MaterialRecord,
    Vocabularies,
    facet_options,
    paginate,
    prune_stale_selections,
    search,
    show_more,
)
from lesmateriaal.services.filter_url import to_query_string
from lesmateriaal.services.history_sync import BrowserHistory, HistorySync


@dataclass
class ExplorerResult:
    items: list[MaterialRecord]
    total: int
    limit: int
    next_limit: Optional[int]  # None when every match is shown
    counts: dict[str, dict[str, int]]
    options: dict[str, list[FacetOption]]
    filters: FilterState
    query_string: str


def explore(
    records: Iterable[MaterialRecord],
    vocabularies: Vocabularies,
    filters: FilterState,
    lang: str = "nl",
    limit: Optional[int] = None,
    show_more_factor: Optional[int] = None,
) -> ExplorerResult:
    """One explorer render: prune, search, paginate, build facet options."""
    limit = limit or settings.explorer_page_size
    factor = show_more_factor or settings.explorer_show_more_factor
    filters = prune_stale_selections(filters, vocabularies)

    result = search(records, filters, lang, vocabularies)
    options = {
        f.key: facet_options(
            vocabularies.terms(f.key),
            result.counts[f.key],
            filters.selected(f.key),
            lang,
        )
        for f in FACETS
    }
    return ExplorerResult(
        items=paginate(result.items, limit),
        total=result.total,
        limit=limit,
        next_limit=show_more(limit, factor) if limit < result.total else None,
        counts=result.counts,
        options=options,
        filters=filters,
        query_string=to_query_string(filters),
    )


class MaterialsExplorer:
    """Server-side model of one explorer page.

    Without a `history` the session is purely in-memory (no URL sync).
    """

    def __init__(
        self,
        records: Sequence[MaterialRecord],
        vocabularies: Vocabularies,
        lang: str = "nl",
        history: Optional[BrowserHistory] = None,
        scheduler: Optional[BackgroundScheduler] = None,
        page_size: Optional[int] = None,
        show_more_factor: Optional[int] = None,
        push_delay_seconds: Optional[float] = None,
    ):
        self._records = list(records)
        self._vocabularies = vocabularies
        self.lang = lang
        self._page_size = page_size or settings.explorer_page_size
        self._factor = show_more_factor or settings.explorer_show_more_factor
        self.limit = self._page_size
        self._filters = FilterState()
        self._sync = (
            HistorySync(history, scheduler=scheduler, delay_seconds=push_delay_seconds)
            if history is not None
            else None
        )

    @property
    def filters(self) -> FilterState:
        return self._filters

    @property
    def sync(self) -> Optional[HistorySync]:
        return self._sync

    def mount(self) -> FilterState:
        """Initial state from the URL; stale ids in the URL get rewritten away."""
        if self._sync is None:
            return self._filters
        parsed = self._sync.mount()
        self._filters = prune_stale_selections(parsed, self._vocabularies)
        if self._filters != parsed:
            self._sync.filter_changed(self._filters)
        return self._filters

    def set_filters(self, filters: FilterState) -> FilterState:
        filters = prune_stale_selections(filters, self._vocabularies)
        if filters == self._filters:
            return self._filters
        self._filters = filters
        if self._sync is not None:
            self._sync.filter_changed(filters)
        return filters

    def set_query(self, query: str) -> FilterState:
        return self.set_filters(self._filters.with_query(query))

    def toggle(self, facet: str, term_id: str) -> FilterState:
        return self.set_filters(self._filters.toggle(facet, term_id))

    def clear(self) -> FilterState:
        return self.set_filters(FilterState())

    def set_vocabularies(self, vocabularies: Vocabularies) -> FilterState:
        self._vocabularies = vocabularies
        return self.set_filters(self._filters)

    def show_more(self) -> int:
        self.limit = show_more(self.limit, self._factor)
        return self.limit

    def navigated(self) -> FilterState:
        """Browser back/forward: adopt the URL's state; stale ids get rewritten away."""
        if self._sync is None:
            return self._filters
        parsed = self._sync.navigated()
        self._filters = prune_stale_selections(parsed, self._vocabularies)
        if self._filters != parsed:
            self._sync.filter_changed(self._filters)
        return self._filters

    def result(self) -> ExplorerResult:
        return explore(
            self._records,
            self._vocabularies,
            self._filters,
            self.lang,
            limit=self.limit,
            show_more_factor=self._factor,
        )

    def close(self) -> None:
        if self._sync is not None:
            self._sync.close()

    def __enter__(self) -> "MaterialsExplorer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
