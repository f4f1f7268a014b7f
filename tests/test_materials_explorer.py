"""Tests for the explorer view (explore() and the MaterialsExplorer session)."""
from datetime import datetime, timedelta

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from lesmateriaal.services.faceted_search import FilterState
from lesmateriaal.services.history_sync import InMemoryHistory, SyncState
from lesmateriaal.services.materials_explorer import MaterialsExplorer, explore
from tests.conftest import make_record, make_vocabularies


@pytest.fixture()
def scheduler():
    s = BackgroundScheduler(timezone="UTC")
    s.start(paused=True)
    yield s
    s.shutdown(wait=False)


@pytest.fixture()
def vocab():
    return make_vocabularies(
        types=[("video", "Video", "Video"), ("werkblad", "Werkblad", "Arbeitsblatt")],
        topics=[("t1", "Reizen", "Reisen"), ("t2", "Sport", "Sport")],
    )


@pytest.fixture()
def records():
    base = datetime(2024, 1, 1)
    return [
        make_record(i, title_nl=f"Les {i}", material_types=["video" if i % 2 else "werkblad"],
                    topics=["t1"] if i < 5 else ["t2"], created_at=base + timedelta(days=i))
        for i in range(40)
    ]


# ── explore() ────────────────────────────────────────────────────────


def test_explore_paginates_and_offers_next_limit(records, vocab):
    result = explore(records, vocab, FilterState(), limit=30)
    assert result.total == 40
    assert len(result.items) == 30
    assert result.next_limit == 150


def test_explore_no_next_limit_when_all_shown(records, vocab):
    result = explore(records, vocab, FilterState(topics=("t1",)), limit=30)
    assert result.total == 5
    assert result.next_limit is None


def test_explore_prunes_stale_ids_and_reports_effective_filters(records, vocab):
    result = explore(records, vocab, FilterState(types=("video", "deleted")))
    assert result.filters.types == ("video",)
    assert result.query_string == "types=video"
    assert result.total == 20


def test_explore_facet_options(records, vocab):
    result = explore(records, vocab, FilterState(types=("video",)), lang="de")
    types = {o.id: o for o in result.options["types"]}
    # all-but-one: type counts ignore the type selection
    assert types["video"].count == 20 and types["video"].selected
    assert types["werkblad"].count == 20 and types["werkblad"].title == "Arbeitsblatt"
    topics = [(o.id, o.count) for o in result.options["topics"]]
    assert topics == [("t2", 18), ("t1", 2)]


# ── Session without URL sync ─────────────────────────────────────────


def test_session_without_history(records, vocab):
    with MaterialsExplorer(records, vocab) as explorer:
        assert explorer.mount() == FilterState()
        explorer.toggle("types", "werkblad")
        explorer.set_query("les 1")
        result = explorer.result()
        assert result.filters == FilterState(query="les 1", types=("werkblad",))
        assert all(r.material_types == ["werkblad"] for r in result.items)


def test_show_more(records, vocab):
    explorer = MaterialsExplorer(records, vocab)
    assert explorer.limit == 30
    assert explorer.show_more() == 150
    assert len(explorer.result().items) == 40
    assert explorer.result().next_limit is None


def test_limit_survives_filter_changes(records, vocab):
    explorer = MaterialsExplorer(records, vocab)
    explorer.show_more()
    explorer.toggle("topics", "t2")
    assert explorer.limit == 150


# ── Session with URL sync ────────────────────────────────────────────


def test_mount_rewrites_stale_ids_out_of_url(records, vocab, scheduler):
    history = InMemoryHistory("/nl?q=les&types=deleted,video")
    with MaterialsExplorer(records, vocab, history=history, scheduler=scheduler) as explorer:
        assert explorer.mount() == FilterState(query="les", types=("video",))
        assert history.location == "/nl?q=les&types=video"
        assert len(history) == 1


def test_mount_with_valid_url_does_not_schedule(records, vocab, scheduler):
    history = InMemoryHistory("/nl?topics=t1")
    with MaterialsExplorer(records, vocab, history=history, scheduler=scheduler) as explorer:
        explorer.mount()
        assert explorer.sync.state is SyncState.IDLE
        assert scheduler.get_jobs() == []


def test_changes_update_url_and_push_once(records, vocab, scheduler):
    history = InMemoryHistory("/nl")
    with MaterialsExplorer(records, vocab, history=history, scheduler=scheduler) as explorer:
        explorer.mount()
        explorer.set_query("les")
        explorer.toggle("types", "video")
        assert history.location == "/nl?q=les&types=video"
        assert len(history) == 1

        explorer.sync.flush()
        assert history.entries == ["/nl?q=les&types=video", "/nl?q=les&types=video"]


def test_setting_identical_filters_is_not_a_change(records, vocab, scheduler):
    history = InMemoryHistory("/nl?q=les")
    with MaterialsExplorer(records, vocab, history=history, scheduler=scheduler) as explorer:
        explorer.mount()
        explorer.set_query("les")
        assert explorer.sync.state is SyncState.IDLE


def test_vocabulary_change_prunes_selection_and_url(records, vocab, scheduler):
    history = InMemoryHistory("/nl?topics=t1,t2")
    with MaterialsExplorer(records, vocab, history=history, scheduler=scheduler) as explorer:
        explorer.mount()
        explorer.set_vocabularies(make_vocabularies(topics=[("t2", "Sport")]))
        assert explorer.filters.topics == ("t2",)
        assert history.location == "/nl?topics=t2"


def test_navigation_adopts_url_without_push(records, vocab, scheduler):
    history = InMemoryHistory("/nl")
    with MaterialsExplorer(records, vocab, history=history, scheduler=scheduler) as explorer:
        explorer.mount()
        explorer.toggle("topics", "t1")
        explorer.sync.flush()
        explorer.toggle("topics", "t2")

        history.back()
        assert explorer.navigated() == FilterState(topics=("t1",))
        assert explorer.sync.state is SyncState.IDLE
        assert scheduler.get_jobs() == []


def test_navigation_to_stale_url_rewrites_it(records, vocab, scheduler):
    history = InMemoryHistory("/nl?topics=t1,deleted")
    history.push_state("/nl?topics=t2")
    with MaterialsExplorer(records, vocab, history=history, scheduler=scheduler) as explorer:
        explorer.mount()
        history.back()
        assert explorer.navigated() == FilterState(topics=("t1",))
        assert history.location == "/nl?topics=t1"
        assert history.entries == ["/nl?topics=t1", "/nl?topics=t2"]


def test_close_removes_pending_push(records, vocab, scheduler):
    history = InMemoryHistory("/nl")
    explorer = MaterialsExplorer(records, vocab, history=history, scheduler=scheduler)
    explorer.mount()
    explorer.toggle("types", "video")
    explorer.close()
    assert scheduler.get_jobs() == []
