import sqlite3
from concurrent.futures import ThreadPoolExecutor
import pytest

from series_tracker.models import ListFilter, SeriesInput, SeriesPatch
from series_tracker.repo import SqliteRepo, RepoError
from series_tracker.service import SeriesService, NotFoundError

# --- Fixtures ------------------------------------------------------------

@pytest.fixture
def db_path(tmp_path):
    """Temporary SQLite database path"""
    p = tmp_path / "test_db.sqlite"
    return str(p)

@pytest.fixture
def repo(db_path):
    r = SqliteRepo(db_path)
    r.ensure_schema()
    return r

def make_input(title="Show A", status="Watching", last=0, total=12, ranking=0):
    return SeriesInput(title, status, last, total, ranking)

# --- Integration tests ---------------------------------------------------

def test_ensure_schema_is_idempotent(repo, db_path):
    repo.ensure_schema()
    repo.ensure_schema()
    conn = sqlite3.connect(db_path)
    cols = [r[1] for r in conn.execute("PRAGMA table_info(series)").fetchall()]
    conn.close()
    assert cols == ["id", "title", "status", "lastEpisodeWatched", "totalEpisodes", "ranking"]

def test_create_and_get_roundtrip(repo):
    sid = repo.create_series(make_input("Dark", "Completed", 26, 26, -4))
    s = repo.get_series(sid)
    assert s.id == sid
    assert (s.title, s.status, s.last_episode_watched, s.total_episodes, s.ranking) == \
        ("Dark", "Completed", 26, 26, -4)

def test_get_missing_returns_none(repo):
    assert repo.get_series(999) is None

def test_replace_and_delete_missing_id_have_no_effect(repo):
    sid = repo.create_series(make_input())
    repo.replace_series(sid + 100, make_input("Other"))
    repo.delete_series(sid + 100)
    assert [s.title for s in repo.list_series(ListFilter())] == ["Show A"]

def test_update_status_and_fields(repo):
    sid = repo.create_series(make_input())
    repo.update_status(sid, "Completed")
    repo.update_fields(sid, SeriesPatch({"total_episodes": 24, "ranking": 5}))
    repo.update_fields(sid, SeriesPatch())
    s = repo.get_series(sid)
    assert (s.status, s.total_episodes, s.ranking, s.title) == ("Completed", 24, 5, "Show A")

def test_counters(repo):
    sid = repo.create_series(make_input())
    repo.increment_episode(sid)
    repo.increment_episode(sid)
    repo.increment_ranking(sid)
    repo.decrement_ranking(sid)
    repo.decrement_ranking(sid)
    s = repo.get_series(sid)
    assert s.last_episode_watched == 2
    assert s.ranking == -1

def test_concurrent_episode_increments_are_atomic(repo):
    sid = repo.create_series(make_input())
    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda _: repo.increment_episode(sid), range(40)))
    assert repo.get_series(sid).last_episode_watched == 40

def test_list_filters_in_db(repo):
    repo.create_series(make_input("Foo Fighters", "Watching", ranking=3))
    repo.create_series(make_input("Bar", "Completed", ranking=7))
    repo.create_series(make_input("foo bar", "Completed", ranking=-1))
    # SQLite LIKE is case-insensitive for ASCII
    assert {s.title for s in repo.list_series(ListFilter(search="FOO"))} == {"Foo Fighters", "foo bar"}
    assert [s.title for s in repo.list_series(ListFilter(search="foo", status="Completed"))] == ["foo bar"]
    assert [s.ranking for s in repo.list_series(ListFilter(sort="desc"))] == [7, 3, -1]
    assert [s.ranking for s in repo.list_series(ListFilter(sort="asc"))] == [-1, 3, 7]
    assert [s.title for s in repo.list_series(ListFilter(sort="bogus"))] == ["Foo Fighters", "Bar", "foo bar"]

def test_list_search_wildcards_behave_as_like(repo):
    repo.create_series(make_input("100% Wolf"))
    repo.create_series(make_input("1000 Ways"))
    assert {s.title for s in repo.list_series(ListFilter(search="100%"))} == {"100% Wolf", "1000 Ways"}

def test_persistence_across_service_instances(db_path, repo):
    """Data created in one service instance must persist for another."""
    svc1 = SeriesService(repo)
    sid = svc1.create_series({"title": "Persist", "status": "Planned", "lastEpisodeWatched": 0,
                              "totalEpisodes": 3, "ranking": 1})
    svc2 = SeriesService(SqliteRepo(db_path))
    assert svc2.get_series(sid).title == "Persist"
    svc2.delete_series(sid)
    with pytest.raises(NotFoundError):
        svc1.get_series(sid)

def test_store_errors_surface_as_repo_error(tmp_path):
    # schema never created
    r = SqliteRepo(str(tmp_path / "empty.sqlite"))
    with pytest.raises(RepoError):
        r.list_series(ListFilter())
    with pytest.raises(RepoError):
        r.increment_ranking(1)
