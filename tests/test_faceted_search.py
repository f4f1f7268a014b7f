"""Tests for the faceted search engine (text match, facets, counts, ranking)."""
from datetime import date, datetime

import pytest

from lesmateriaal.services.faceted_search import (
    CEFR_LEVELS,
    FACETS,
    PRIMARY,
    SECONDARY,
    FilterState,
    Term,
    Vocabularies,
    facet_counts,
    facet_options,
    facet_values,
    filter_and_rank,
    localized,
    matches_all_except,
    matches_facet,
    normalize,
    paginate,
    prune_stale_selections,
    query_words,
    resolve_id,
    search,
    show_more,
    text_match,
)
from tests.conftest import make_record, make_vocabularies


def _ids(records):
    return [r.id for r in records]


# ── Reference scenario ───────────────────────────────────────────────


@pytest.fixture()
def travel_records():
    return [
        make_record(1, title_nl="Reizen in Duitsland", cefr=["B1"], featured=False, created_at=date(2024, 1, 1)),
        make_record(2, title_nl="Reizen", cefr=["A2"], featured=True, created_at=date(2023, 1, 1)),
    ]


def test_query_reizen_ranks_featured_first(travel_records):
    assert _ids(filter_and_rank(travel_records, FilterState(query="reizen"))) == ["2", "1"]


def test_query_duitsland_matches_only_first(travel_records):
    assert _ids(filter_and_rank(travel_records, FilterState(query="duitsland"))) == ["1"]


def test_cefr_selection_with_query(travel_records):
    state = FilterState(query="reizen", cefr=("A2",))
    result = search(travel_records, state)
    assert _ids(result.items) == ["2"]
    # B1 still counted: counts for a facet ignore that facet's own selection
    assert result.counts["cefr"]["B1"] == 1
    assert result.counts["cefr"]["A2"] == 1


# ── Normalization ────────────────────────────────────────────────────


@pytest.mark.parametrize("raw,expected", [
    ("Übung", "ubung"),
    ("ÉCOLE", "ecole"),
    ("Reizen in Duitsland", "reizen in duitsland"),
    ("België", "belgie"),
    ("", ""),
    (None, ""),
])
def test_normalize(raw, expected):
    assert normalize(raw) == expected


@pytest.mark.parametrize("raw", ["Übung", "Ärger mit Öl", "Crème brûlée", "İstanbul", "ŒUVRE", "niño"])
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


def test_query_words_splits_and_drops_empty_tokens():
    assert query_words("  Reizen   Duitsland\t") == ["reizen", "duitsland"]
    assert query_words("   ") == []
    assert query_words(None) == []


def test_localized_falls_back_to_other_language():
    assert localized("Reizen", None, "de") == "Reizen"
    assert localized(None, "Reisen", "nl") == "Reisen"
    assert localized("Reizen", "Reisen", "de") == "Reisen"
    assert localized(None, None, "nl") == ""


# ── Identifier resolution ────────────────────────────────────────────


@pytest.mark.parametrize("value,expected", [
    ("abc", "abc"),
    (5, "5"),
    (Term("t1", "Sport"), "t1"),
    ({"id": 7, "title_nl": "Sport"}, "7"),
    ({"title_nl": "geen id"}, None),
    ("", None),
    (None, None),
])
def test_resolve_id(value, expected):
    assert resolve_id(value) == expected


def test_facet_values_accepts_single_school_type_reference():
    assert facet_values(make_record(1, school_types="st1"), "school_types") == ["st1"]
    assert facet_values(make_record(2, school_types=Term("st2", "MBO")), "school_types") == ["st2"]
    assert facet_values(make_record(3, school_types=None), "school_types") == []


def test_facet_values_mixes_bare_and_resolved_terms():
    record = make_record(1, topics=["t1", Term("t2", "Sport"), {"id": "t3"}, None])
    assert facet_values(record, "topics") == ["t1", "t2", "t3"]


# ── Text matching ────────────────────────────────────────────────────


def test_text_match_is_accent_and_case_insensitive():
    record = make_record(1, title_de="Übungen für Anfänger", title_nl=None)
    assert text_match(record, query_words("UBUNGEN fur"), "de") == PRIMARY


def test_text_match_uses_description():
    record = make_record(1, title_nl="Lesbrief", description_nl="Over het schoolsysteem in Nederland")
    assert text_match(record, query_words("schoolsysteem"), "nl") == PRIMARY


def test_text_match_falls_back_to_other_language_title():
    record = make_record(1, title_nl="Reizen", title_de=None)
    assert _ids(filter_and_rank([record], FilterState(query="reizen"), lang="de")) == ["1"]


def test_all_words_must_match():
    record = make_record(1, title_nl="Reizen in Duitsland")
    assert filter_and_rank([record], FilterState(query="reizen belgie")) == []


def test_words_split_across_title_and_topics_do_not_match():
    record = make_record(1, title_nl="Reizen", topics=[Term("t1", "Sport", "Sport")])
    assert text_match(record, ["reizen", "sport"], "nl") is None


def test_topic_title_is_secondary_match():
    record = make_record(1, title_nl="Lesbrief", topics=[Term("t1", "Sport", "Sport")])
    assert text_match(record, ["sport"], "nl") == SECONDARY


def test_bare_topic_ids_resolve_through_vocabulary():
    record = make_record(1, title_nl="Lesbrief", topics=["t1"])
    vocab = make_vocabularies(topics=[("t1", "Geschiedenis", "Geschichte")])
    assert _ids(filter_and_rank([record], FilterState(query="geschichte"), "de", vocab)) == ["1"]
    # Without a vocabulary a bare id carries no title
    assert filter_and_rank([record], FilterState(query="geschichte"), "de") == []


def test_empty_query_matches_everything():
    records = [make_record(i) for i in range(3)]
    assert len(filter_and_rank(records, FilterState(query="   "))) == 3


# ── Facet predicates ─────────────────────────────────────────────────


def test_matches_facet_empty_selection_matches():
    assert matches_facet(make_record(1), "types", ())


def test_matches_facet_or_within_facet():
    record = make_record(1, material_types=["video"])
    assert matches_facet(record, "types", ("video", "podcast"))
    assert not matches_facet(record, "types", ("podcast",))


def test_facets_combine_with_and():
    records = [
        make_record(1, material_types=["video"], languages=["nl"]),
        make_record(2, material_types=["video"], languages=["de"]),
        make_record(3, material_types=["podcast"], languages=["nl"]),
    ]
    state = FilterState(types=("video",), langs=("nl",))
    assert _ids(filter_and_rank(records, state)) == ["1"]


def test_matches_all_except_skips_excluded_facet():
    record = make_record(1, material_types=["video"], cefr=["A1"])
    state = FilterState(types=("podcast",), cefr=("A1",))
    assert not matches_all_except(record, state)
    assert matches_all_except(record, state, "types")
    assert not matches_all_except(record, state, "cefr")


def test_record_without_facet_values_fails_non_empty_selection():
    record = make_record(1, cefr=[])
    assert filter_and_rank([record], FilterState(cefr=("A1",))) == []


# ── Counts ───────────────────────────────────────────────────────────


@pytest.fixture()
def mixed_records():
    return [
        make_record(1, title_nl="Reizen", material_types=["video"], school_types=["po"], languages=["nl"], cefr=["A1"], topics=["t1"]),
        make_record(2, title_nl="Reizen en sport", material_types=["video", "werkblad"], school_types="vo", languages=["nl", "de"], cefr=["A2"]),
        make_record(3, title_nl="Sport", material_types=["podcast"], school_types=["vo", "mbo"], languages=["de"], cefr=["B1", "B2"], topics=["t1", "t2"]),
        make_record(4, title_de="Reisen nach Holland", material_types=["werkblad"], languages=["de"], cefr=["A2"], competences=["lezen"]),
        make_record(5, title_nl="Woordenschat", competences=["lezen", "spreken"], languages=["en"], cefr=["C1"]),
    ]


@pytest.mark.parametrize("state", [
    FilterState(),
    FilterState(query="reizen"),
    FilterState(types=("video",)),
    FilterState(types=("video",), langs=("de",)),
    FilterState(query="sport", cefr=("A2", "B1")),
    FilterState(school_types=("vo",), competences=("lezen",)),
    FilterState(query="holland", types=("werkblad",), langs=("nl",)),
])
def test_counts_match_brute_force(mixed_records, state):
    words = query_words(state.query)
    counts = facet_counts(mixed_records, state)

    for f in FACETS:
        expected: dict[str, int] = {}
        for r in mixed_records:
            if text_match(r, words, "nl") is None or not matches_all_except(r, state, f.key):
                continue
            for v in facet_values(r, f.key):
                expected[v] = expected.get(v, 0) + 1
        assert counts[f.key] == expected, f.key


def test_counts_ignore_own_selection(mixed_records):
    unfiltered = facet_counts(mixed_records, FilterState())
    selected = facet_counts(mixed_records, FilterState(types=("podcast",)))
    assert selected["types"] == unfiltered["types"]
    # ...but other facets see the selection
    assert selected["langs"] == {"de": 1}


def test_repeated_value_on_one_record_counts_once():
    records = [
        make_record(1, cefr=["B1", "B1"], topics=["t1", Term("t1", "Reizen")]),
        make_record(2, cefr=["A2"]),
    ]
    counts = facet_counts(records, FilterState())
    assert counts["cefr"] == {"B1": 1, "A2": 1}
    assert counts["topics"] == {"t1": 1}
    # advertised count equals what selecting the value shows
    for level, count in counts["cefr"].items():
        assert len(filter_and_rank(records, FilterState(cefr=(level,)))) == count
    assert facet_values(records[0], "cefr") == ["B1"]


@pytest.mark.parametrize("state", [
    FilterState(),
    FilterState(query="reizen", langs=("nl",)),
    FilterState(types=("werkblad",), cefr=("A2",)),
])
def test_visible_items_are_exactly_the_matching_records(mixed_records, state):
    visible = set(_ids(filter_and_rank(mixed_records, state)))
    words = query_words(state.query)
    for r in mixed_records:
        matches = text_match(r, words, "nl") is not None and matches_all_except(r, state)
        assert (r.id in visible) == matches


# ── Ranking ──────────────────────────────────────────────────────────


def test_newest_first_without_query():
    records = [
        make_record(1, created_at=datetime(2022, 5, 1)),
        make_record(2, created_at=datetime(2024, 5, 1)),
        make_record(3, created_at=datetime(2023, 5, 1)),
    ]
    assert _ids(filter_and_rank(records, FilterState())) == ["2", "3", "1"]


def test_featured_beats_recency():
    records = [
        make_record(1, created_at=datetime(2024, 5, 1)),
        make_record(2, created_at=datetime(2020, 5, 1), featured=True),
    ]
    assert _ids(filter_and_rank(records, FilterState())) == ["2", "1"]


def test_primary_match_beats_newer_topic_match():
    topic = Term("t1", "Sport", "Sport")
    records = [
        make_record(1, title_nl="Lesbrief", topics=[topic], created_at=datetime(2024, 1, 1)),
        make_record(2, title_nl="Sport op school", created_at=datetime(2020, 1, 1)),
    ]
    assert _ids(filter_and_rank(records, FilterState(query="sport"))) == ["2", "1"]


def test_featured_topic_match_beats_primary_match():
    topic = Term("t1", "Sport", "Sport")
    records = [
        make_record(1, title_nl="Sport op school"),
        make_record(2, title_nl="Lesbrief", topics=[topic], featured=True),
    ]
    assert _ids(filter_and_rank(records, FilterState(query="sport"))) == ["2", "1"]


def test_missing_or_string_timestamps():
    records = [
        make_record(1, created_at=None),
        make_record(2, created_at="2024-03-01T10:00:00Z"),
        make_record(3, created_at="not a date"),
        make_record(4, created_at=date(2023, 3, 1)),
    ]
    ranked = _ids(filter_and_rank(records, FilterState()))
    assert ranked[:2] == ["2", "4"]
    assert set(ranked[2:]) == {"1", "3"}


def test_full_ties_keep_input_order():
    records = [make_record(i, created_at=datetime(2024, 1, 1)) for i in (5, 3, 9, 1)]
    assert _ids(filter_and_rank(records, FilterState())) == ["5", "3", "9", "1"]


# ── Pagination ───────────────────────────────────────────────────────


def test_show_more_grows_geometrically():
    assert show_more(30) == 150
    assert show_more(150) == 750


def test_paginate_returns_prefix():
    records = [make_record(i) for i in range(40)]
    assert len(paginate(records, 30)) == 30
    assert paginate(records, 30)[0] is records[0]
    assert len(paginate(records, 150)) == 40


# ── Facet options ────────────────────────────────────────────────────


def test_facet_options_sorted_by_count_then_title():
    terms = [Term("e", "École"), Term("b", "banaan"), Term("a", "Appel"), Term("z", "Zee")]
    options = facet_options(terms, {"e": 1, "b": 1, "a": 1, "z": 3}, ())
    assert [o.id for o in options] == ["z", "a", "b", "e"]


def test_facet_options_keep_selected_zero_count_terms():
    terms = [Term("a", "Appel"), Term("b", "Banaan"), Term("c", "Citroen")]
    options = facet_options(terms, {"a": 2}, ("c",))
    assert [(o.id, o.count, o.selected) for o in options] == [("a", 2, False), ("c", 0, True)]


def test_facet_options_localized_titles():
    terms = [Term("t1", "Reizen", "Reisen")]
    assert facet_options(terms, {"t1": 1}, (), "de")[0].title == "Reisen"


# ── Filter state & pruning ───────────────────────────────────────────


def test_toggle_adds_and_removes():
    state = FilterState().toggle("types", "video").toggle("types", "podcast")
    assert state.types == ("video", "podcast")
    assert state.toggle("types", "video").types == ("podcast",)


def test_prune_drops_unknown_ids():
    vocab = make_vocabularies(types=[("video", "Video")])
    state = FilterState(types=("video", "gone"), langs=("nl", "fr"), cefr=("A1", "Z9"))
    pruned = prune_stale_selections(state, vocab)
    assert pruned.types == ("video",)
    assert pruned.langs == ("nl",)
    assert pruned.cefr == ("A1",)


def test_prune_returns_same_state_when_nothing_is_stale():
    vocab = make_vocabularies(types=[("video", "Video")])
    state = FilterState(query="x", types=("video",), cefr=("B2",))
    assert prune_stale_selections(state, vocab) is state


def test_prune_is_idempotent():
    vocab = make_vocabularies(topics=[("t1", "Sport")])
    once = prune_stale_selections(FilterState(topics=("t1", "t9")), vocab)
    assert prune_stale_selections(once, vocab) == once


def test_fixed_vocabularies():
    vocab = Vocabularies()
    assert vocab.ids("langs") == {"nl", "de", "en"}
    assert [t.id for t in vocab.terms("cefr")] == list(CEFR_LEVELS)
