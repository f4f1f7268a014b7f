"""Faceted search over the in-memory course material catalog.

Filtering, ranking and all-but-one facet counts for the explorer.

Records either carry resolved terms (catalog_loader) or bare ids (older
payloads, tests); every facet read goes through resolve_id() so both work
the same way.

    text match:   every query word in title+description (primary) or in the
                  related topic titles (secondary, ranks lower)
    facets:       OR within one facet, AND across facets
    counts:       per facet, records matching the query and every *other*
                  facet, bucketed by that facet's values
"""
import unicodedata
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

LOCALES = ("nl", "de")

DEFAULT_LIMIT = 30
SHOW_MORE_FACTOR = 5

PRIMARY = "primary"
SECONDARY = "secondary"


# ── Terms & records ──────────────────────────────────────────────────


def localized(value_nl: Optional[str], value_de: Optional[str], lang: str) -> str:
    """Value for `lang`, falling back to the other language when empty."""
    if lang == "de":
        return value_de or value_nl or ""
    return value_nl or value_de or ""


@dataclass(frozen=True)
class Term:
    """One taxonomy entry (material type, topic, CEFR level, ...)."""

    id: str
    title_nl: Optional[str] = None
    title_de: Optional[str] = None

    def title(self, lang: str) -> str:
        return localized(self.title_nl, self.title_de, lang)


# A facet value as stored on a record: bare id or resolved term
TermRef = Union[str, int, Term, Mapping[str, Any]]


@dataclass(frozen=True, eq=False)
class MaterialRecord:
    """Flat, read-only view of a course material used by the engine."""

    id: str
    title_nl: Optional[str] = None
    title_de: Optional[str] = None
    description_nl: Optional[str] = None
    description_de: Optional[str] = None
    material_types: Sequence[TermRef] = ()
    # Older payloads carry a single optional reference here
    school_types: Union[Sequence[TermRef], TermRef, None] = ()
    competences: Sequence[TermRef] = ()
    topics: Sequence[TermRef] = ()
    languages: Sequence[str] = ()
    cefr: Sequence[str] = ()
    featured: bool = False
    created_at: Union[datetime, date, str, None] = None
    slug: Optional[str] = None

    def title(self, lang: str) -> str:
        return localized(self.title_nl, self.title_de, lang)

    def description(self, lang: str) -> str:
        return localized(self.description_nl, self.description_de, lang)


LANGUAGE_TERMS: tuple[Term, ...] = (
    Term("nl", "Nederlands", "Niederländisch"),
    Term("de", "Duits", "Deutsch"),
    Term("en", "Engels", "Englisch"),
)

CEFR_LEVELS: tuple[str, ...] = ("A1", "A2", "B1", "B2", "C1", "C2")
CEFR_TERMS: tuple[Term, ...] = tuple(Term(level, level, level) for level in CEFR_LEVELS)


# ── Facets ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FacetSpec:
    key: str  # FilterState / Vocabularies attribute and count-map key
    param: str  # URL query parameter
    field: str  # MaterialRecord attribute


FACETS: tuple[FacetSpec, ...] = (
    FacetSpec("types", "types", "material_types"),
    FacetSpec("school_types", "schoolTypes", "school_types"),
    FacetSpec("competences", "competences", "competences"),
    FacetSpec("topics", "topics", "topics"),
    FacetSpec("langs", "langs", "languages"),
    FacetSpec("cefr", "cefr", "cefr"),
)
FACETS_BY_KEY: dict[str, FacetSpec] = {f.key: f for f in FACETS}


@dataclass(frozen=True)
class FilterState:
    """Search text plus the selected ids of every facet (selection order kept)."""

    query: str = ""
    types: tuple[str, ...] = ()
    school_types: tuple[str, ...] = ()
    competences: tuple[str, ...] = ()
    topics: tuple[str, ...] = ()
    langs: tuple[str, ...] = ()
    cefr: tuple[str, ...] = ()

    def selected(self, facet: str) -> tuple[str, ...]:
        return getattr(self, FACETS_BY_KEY[facet].key)

    def with_selection(self, facet: str, ids: Iterable[str]) -> "FilterState":
        return replace(self, **{FACETS_BY_KEY[facet].key: tuple(ids)})

    def with_query(self, query: str) -> "FilterState":
        return replace(self, query=query)

    def toggle(self, facet: str, term_id: str) -> "FilterState":
        """Select `term_id` in `facet`, or deselect it when already selected."""
        current = self.selected(facet)
        if term_id in current:
            return self.with_selection(facet, (i for i in current if i != term_id))
        return self.with_selection(facet, current + (term_id,))


@dataclass(frozen=True)
class Vocabularies:
    """Term lists per facet. Languages and CEFR levels are fixed."""

    types: Sequence[Term] = ()
    school_types: Sequence[Term] = ()
    competences: Sequence[Term] = ()
    topics: Sequence[Term] = ()
    langs: Sequence[Term] = LANGUAGE_TERMS
    cefr: Sequence[Term] = CEFR_TERMS

    def terms(self, facet: str) -> Sequence[Term]:
        return getattr(self, FACETS_BY_KEY[facet].key)

    def ids(self, facet: str) -> frozenset[str]:
        return frozenset(t.id for t in self.terms(facet))

    def topic_index(self) -> dict[str, Term]:
        return {t.id: t for t in self.topics}


# ── Text ─────────────────────────────────────────────────────────────


def normalize(text: Optional[str]) -> str:
    """Decompose, strip combining marks, lowercase ('Übung' -> 'ubung')."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower()


def query_words(query: Optional[str]) -> list[str]:
    return normalize(query).split()


def resolve_id(value: Any) -> Optional[str]:
    """Identifier of a facet value, whether bare id or resolved term."""
    if value is None:
        return None
    if isinstance(value, Term):
        return value.id or None
    if isinstance(value, Mapping):
        raw = value.get("id")
    elif isinstance(value, (str, int)):
        raw = value
    else:
        raw = getattr(value, "id", None)
    if raw is None:
        return None
    return str(raw) or None


def facet_values(record: MaterialRecord, facet: str) -> list[str]:
    """Distinct ids `record` carries for `facet` (single reference or sequence), in order."""
    raw = getattr(record, FACETS_BY_KEY[facet].field, None)
    if raw is None:
        return []
    if isinstance(raw, (str, int, Term, Mapping)):
        items: Iterable[Any] = (raw,)
    else:
        items = raw
    ids = (resolve_id(v) for v in items)
    return list(dict.fromkeys(i for i in ids if i))


def primary_text(record: MaterialRecord, lang: str) -> str:
    return normalize(record.title(lang) + " " + record.description(lang))


def _topic_title(value: Any, lang: str, topic_index: Optional[Mapping[str, Term]]) -> str:
    if isinstance(value, Term):
        return value.title(lang)
    if isinstance(value, Mapping):
        return localized(value.get("title_nl"), value.get("title_de"), lang)
    if topic_index:
        term = topic_index.get(resolve_id(value) or "")
        if term is not None:
            return term.title(lang)
    return ""


def secondary_text(
    record: MaterialRecord,
    lang: str,
    topic_index: Optional[Mapping[str, Term]] = None,
) -> str:
    """Normalized titles of the record's topics (bare ids need `topic_index`)."""
    topics = record.topics or ()
    return normalize(" ".join(_topic_title(t, lang, topic_index) for t in topics))


def text_match(
    record: MaterialRecord,
    words: Sequence[str],
    lang: str,
    topic_index: Optional[Mapping[str, Term]] = None,
) -> Optional[str]:
    """PRIMARY, SECONDARY, or None when the record does not match `words`."""
    if not words:
        return PRIMARY
    blob = primary_text(record, lang)
    if all(w in blob for w in words):
        return PRIMARY
    blob = secondary_text(record, lang, topic_index)
    if all(w in blob for w in words):
        return SECONDARY
    return None


# ── Facet predicates ─────────────────────────────────────────────────


def _intersects(ids: Iterable[str], selected: frozenset[str]) -> bool:
    return not selected or any(i in selected for i in ids)


def matches_facet(record: MaterialRecord, facet: str, selected: Iterable[str]) -> bool:
    """True when nothing is selected or the record has any selected id."""
    return _intersects(facet_values(record, facet), frozenset(selected))


def matches_all_except(
    record: MaterialRecord,
    state: FilterState,
    excluded: Optional[str] = None,
) -> bool:
    """Facet filters of `state`, skipping the `excluded` facet (text not included)."""
    return all(
        matches_facet(record, f.key, state.selected(f.key))
        for f in FACETS
        if f.key != excluded
    )


# ── Search ───────────────────────────────────────────────────────────


@dataclass
class _Candidate:
    record: MaterialRecord
    match: Optional[str]
    ids: dict[str, list[str]]


@dataclass
class SearchResult:
    items: list[MaterialRecord]  # ranked, unpaginated
    counts: dict[str, dict[str, int]]
    query_active: bool

    @property
    def total(self) -> int:
        return len(self.items)


def _created_ts(value: Union[datetime, date, str, None]) -> float:
    if value is None:
        return 0.0
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return 0.0
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _passes(ids: Mapping[str, list[str]], selections: Mapping[str, frozenset[str]], excluded: Optional[str]) -> bool:
    return all(
        _intersects(ids[key], selected)
        for key, selected in selections.items()
        if key != excluded
    )


def _rank_key(query_active: bool):
    def key(c: _Candidate) -> tuple:
        featured = 0 if c.record.featured is True else 1
        relevance = 1 if query_active and c.match != PRIMARY else 0
        return (featured, relevance, -_created_ts(c.record.created_at))
    return key


def search(
    records: Iterable[MaterialRecord],
    state: FilterState,
    lang: str = "nl",
    vocabularies: Optional[Vocabularies] = None,
) -> SearchResult:
    """Visible records (ranked) and all-but-one counts for `state`.

    Ranking: featured first, then primary text matches before topic-only
    matches (only while a query is active), then newest first. Python's sort
    is stable, so full ties keep input order.
    """
    words = query_words(state.query)
    topic_index = vocabularies.topic_index() if vocabularies else None
    selections = {f.key: frozenset(state.selected(f.key)) for f in FACETS}

    candidates = [
        _Candidate(
            record=r,
            match=text_match(r, words, lang, topic_index),
            ids={f.key: facet_values(r, f.key) for f in FACETS},
        )
        for r in records
    ]

    counts: dict[str, dict[str, int]] = {f.key: {} for f in FACETS}
    visible: list[_Candidate] = []
    for c in candidates:
        if c.match is None:
            continue
        if _passes(c.ids, selections, None):
            visible.append(c)
        for f in FACETS:
            if not _passes(c.ids, selections, f.key):
                continue
            bucket = counts[f.key]
            for term_id in c.ids[f.key]:
                bucket[term_id] = bucket.get(term_id, 0) + 1

    visible.sort(key=_rank_key(bool(words)))
    return SearchResult(
        items=[c.record for c in visible],
        counts=counts,
        query_active=bool(words),
    )


def filter_and_rank(
    records: Iterable[MaterialRecord],
    state: FilterState,
    lang: str = "nl",
    vocabularies: Optional[Vocabularies] = None,
) -> list[MaterialRecord]:
    return search(records, state, lang, vocabularies).items


def facet_counts(
    records: Iterable[MaterialRecord],
    state: FilterState,
    lang: str = "nl",
    vocabularies: Optional[Vocabularies] = None,
) -> dict[str, dict[str, int]]:
    return search(records, state, lang, vocabularies).counts


# ── Pagination ───────────────────────────────────────────────────────


def paginate(items: Sequence[MaterialRecord], limit: int) -> list[MaterialRecord]:
    return list(items[: max(limit, 0)])


def show_more(limit: int, factor: int = SHOW_MORE_FACTOR) -> int:
    """Geometric growth: 30 -> 150 -> 750."""
    return max(limit, 1) * factor


# ── Facet options ────────────────────────────────────────────────────


@dataclass(frozen=True)
class FacetOption:
    id: str
    title: str
    count: int
    selected: bool = False


def collation_key(text: str) -> str:
    """Case- and accent-insensitive sort key for titles."""
    return normalize(text).casefold()


def facet_options(
    terms: Iterable[Term],
    counts: Mapping[str, int],
    selected: Iterable[str],
    lang: str = "nl",
) -> list[FacetOption]:
    """Terms worth showing: non-zero count or currently selected.

    Sorted by count (desc), then localized title.
    """
    chosen = frozenset(selected)
    options = [
        FacetOption(
            id=t.id,
            title=t.title(lang),
            count=counts.get(t.id, 0),
            selected=t.id in chosen,
        )
        for t in terms
        if counts.get(t.id, 0) > 0 or t.id in chosen
    ]
    options.sort(key=lambda o: (-o.count, collation_key(o.title)))
    return options


# ── Stale selections ─────────────────────────────────────────────────


def prune_stale_selections(state: FilterState, vocabularies: Vocabularies) -> FilterState:
    """Drop selected ids that no longer exist in the vocabulary.

    Returns `state` itself when nothing is stale.
    """
    changes: dict[str, tuple[str, ...]] = {}
    for f in FACETS:
        current = state.selected(f.key)
        if not current:
            continue
        valid = vocabularies.ids(f.key)
        kept = tuple(i for i in current if i in valid)
        if kept != current:
            changes[f.key] = kept
    return replace(state, **changes) if changes else state
