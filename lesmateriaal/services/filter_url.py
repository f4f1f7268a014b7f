"""Filter state <-> URL query string.

    ?q=reizen&types=<id>,<id>&schoolTypes=<id>&cefr=A2,B1

Serialization is canonical (ids trimmed, empty lists and blank queries
omitted, facets in declaration order), so serialize -> parse -> serialize
is a fixed point. Rewriting a URL only touches the filter parameters.
"""
from typing import Iterable, Mapping, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from lesmateriaal.services.faceted_search import FACETS, FilterState

QUERY_PARAM = "q"
FILTER_PARAMS: tuple[str, ...] = (QUERY_PARAM,) + tuple(f.param for f in FACETS)

ParamSource = Union[Mapping[str, str], Iterable[tuple[str, str]]]


def _clean_ids(ids: Iterable[str]) -> list[str]:
    return [s for s in (str(i).strip() for i in ids) if s]


def split_ids(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(_clean_ids(value.split(",")))


def to_params(state: FilterState) -> dict[str, str]:
    """Filter parameters of `state` in canonical order (empty ones left out)."""
    params: dict[str, str] = {}
    if state.query and state.query.strip():
        params[QUERY_PARAM] = state.query
    for f in FACETS:
        ids = _clean_ids(state.selected(f.key))
        if ids:
            params[f.param] = ",".join(ids)
    return params


def to_query_string(state: FilterState) -> str:
    """Canonical query string without the leading '?' ('' for an empty state)."""
    return urlencode(to_params(state), safe=",")


def _first_values(source: ParamSource) -> dict[str, str]:
    if isinstance(source, Mapping):
        return {k: source[k] for k in FILTER_PARAMS if k in source}
    values: dict[str, str] = {}
    for key, value in source:
        values.setdefault(key, value)
    return values


def parse_params(source: ParamSource) -> FilterState:
    """Filter state from query parameters (a mapping or (key, value) pairs)."""
    values = _first_values(source)
    query = values.get(QUERY_PARAM) or ""
    return FilterState(
        query=query,
        **{f.key: split_ids(values.get(f.param)) for f in FACETS},
    )


def parse_query_string(query_string: str) -> FilterState:
    return parse_params(parse_qsl(query_string.lstrip("?"), keep_blank_values=True))


def parse_url(url: str) -> FilterState:
    return parse_query_string(urlsplit(url).query)


def build_url(url: str, state: FilterState) -> str:
    """`url` with its filter parameters replaced by those of `state`.

    Unrelated parameters keep their position; a filter parameter that stays
    set keeps its position too, new ones are appended.
    """
    parts = urlsplit(url)
    wanted = to_params(state)
    written: set[str] = set()
    pairs: list[tuple[str, str]] = []

    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key not in FILTER_PARAMS:
            pairs.append((key, value))
        elif key in wanted and key not in written:
            pairs.append((key, wanted[key]))
            written.add(key)

    pairs.extend((k, v) for k, v in wanted.items() if k not in written)
    return urlunsplit(parts._replace(query=urlencode(pairs, safe=",")))
