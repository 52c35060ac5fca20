import pytest

from src.audit import AuditLogRepository, AuditOperation, AuditTrail
from src.entries import EntryFilters, EntryRepository


def make_repos(tmp_path):
    db_path = tmp_path / "journal.db"
    audit_repo = AuditLogRepository(db_path=db_path)
    repo = EntryRepository(db_path=db_path, audit_trail=AuditTrail(audit_repo))
    return repo, audit_repo


def test_entry_repository_crud_cycle(tmp_path):
    repo, audit_repo = make_repos(tmp_path)

    created = repo.create(
        "user-1",
        "2025-07-16",
        "I finished the draft.",
        wins=["I finished the draft"],
        keywords=["finished", "draft"],
    )
    assert created.user_id == "user-1"
    assert created.wins == ["I finished the draft"]
    assert created.regrets == []
    assert created.sentiment_score == 0.0
    assert repo.get(created.id) == created

    updated = repo.update(created.id, sentiment_score=0.6, tasks=["send it"])
    assert updated is not None
    assert updated.sentiment_score == 0.6
    assert updated.tasks == ["send it"]
    assert updated.wins == ["I finished the draft"]

    assert repo.delete(created.id) is True
    assert repo.get(created.id) is None
    assert repo.delete(created.id) is False

    operations = [log.operation for log in audit_repo.list_for_entry(created.id)]
    assert operations == [AuditOperation.CREATE, AuditOperation.UPDATE, AuditOperation.DELETE]

    update_log = audit_repo.list_for_entry(created.id)[1]
    assert update_log.changes == {
        "tasks": {"before": [], "after": ["send it"]},
        "sentiment_score": {"before": 0.0, "after": 0.6},
    }


def test_update_without_fields_returns_current_entry(tmp_path):
    repo, audit_repo = make_repos(tmp_path)
    created = repo.create("user-1", "2025-07-16", "text")

    assert repo.update(created.id) == created
    assert len(audit_repo.list_for_entry(created.id)) == 1


def test_update_missing_entry(tmp_path):
    repo, _ = make_repos(tmp_path)

    assert repo.update(999, transcript="x") is None


def test_audio_file_path_unset_vs_none(tmp_path):
    repo, _ = make_repos(tmp_path)
    created = repo.create("user-1", "2025-07-16", "text", audio_file_path="voices/user-1/a.webm")

    kept = repo.update(created.id, transcript="new text")
    assert kept.audio_file_path == "voices/user-1/a.webm"

    cleared = repo.update(created.id, audio_file_path=None)
    assert cleared.audio_file_path is None


def test_list_filters(tmp_path):
    repo, _ = make_repos(tmp_path)
    repo.create("user-1", "2025-07-01", "Morning run by the river", keywords=["morning", "river"], sentiment_score=0.8)
    repo.create("user-1", "2025-07-10", "회의 준비를 했다", keywords=["회의", "준비를"], sentiment_score=-0.2)
    repo.create("user-1", "2025-07-20", "Quiet evening", keywords=["quiet", "evening"])
    repo.create("user-2", "2025-07-10", "Someone else's river walk", keywords=["river"])

    all_entries = repo.list("user-1")
    assert [entry.date for entry in all_entries] == ["2025-07-20", "2025-07-10", "2025-07-01"]

    ranged = repo.list("user-1", EntryFilters(start_date="2025-07-05", end_date="2025-07-15"))
    assert [entry.date for entry in ranged] == ["2025-07-10"]

    by_keyword = repo.list("user-1", EntryFilters(keywords=["River"]))
    assert [entry.date for entry in by_keyword] == ["2025-07-01"]

    by_korean_keyword = repo.list("user-1", EntryFilters(keywords=["회의"]))
    assert [entry.date for entry in by_korean_keyword] == ["2025-07-10"]

    by_text = repo.list("user-1", EntryFilters(search_text="evening"))
    assert [entry.date for entry in by_text] == ["2025-07-20"]

    positive = repo.list("user-1", EntryFilters(sentiment_min=0.5))
    assert [entry.date for entry in positive] == ["2025-07-01"]

    negative = repo.list("user-1", EntryFilters(sentiment_max=-0.1))
    assert [entry.date for entry in negative] == ["2025-07-10"]


def test_keywords_match_any(tmp_path):
    repo, _ = make_repos(tmp_path)
    repo.create("user-1", "2025-07-01", "a", keywords=["river", "morning"])
    repo.create("user-1", "2025-07-02", "b", keywords=["budget"])
    repo.create("user-1", "2025-07-03", "c", keywords=["evening"])

    hits = repo.list("user-1", EntryFilters(keywords=["budget", "River", "absent"]))

    assert [entry.date for entry in hits] == ["2025-07-02", "2025-07-01"]
    assert len(repo.list("user-1", EntryFilters(keywords=[]))) == 3


def test_keyword_filter_matches_whole_keywords_only(tmp_path):
    repo, _ = make_repos(tmp_path)
    repo.create("user-1", "2025-07-01", "text", keywords=["abc", "river"])

    assert repo.list("user-1", EntryFilters(keywords=["a_c"])) == []
    assert repo.list("user-1", EntryFilters(keywords=["%"])) == []
    assert repo.list("user-1", EntryFilters(keywords=["riv"])) == []


def test_search_text_wildcards_are_literal(tmp_path):
    repo, _ = make_repos(tmp_path)
    repo.create("user-1", "2025-07-01", "Finished 100% of the plan")
    repo.create("user-1", "2025-07-02", "abc and more")
    repo.create("user-1", "2025-07-03", "path C:\\notes\\today")

    assert [e.date for e in repo.list("user-1", EntryFilters(search_text="%"))] == ["2025-07-01"]
    assert repo.list("user-1", EntryFilters(search_text="a_c")) == []
    assert [e.date for e in repo.list("user-1", EntryFilters(search_text="C:\\notes"))] == ["2025-07-03"]


def test_find_paginates_with_total_count(tmp_path):
    repo, _ = make_repos(tmp_path)
    for day in range(1, 6):
        repo.create("user-1", f"2025-07-0{day}", f"entry {day}")
    repo.create("user-2", "2025-07-09", "other")

    first = repo.find("user-1", page=1, page_size=2)
    last = repo.find("user-1", page=3, page_size=2)
    beyond = repo.find("user-1", page=4, page_size=2)

    assert [entry.date for entry in first.entries] == ["2025-07-05", "2025-07-04"]
    assert (first.total_count, first.page, first.page_size) == (5, 1, 2)
    assert [entry.date for entry in last.entries] == ["2025-07-01"]
    assert beyond.entries == []
    assert beyond.total_count == 5


def test_find_total_count_respects_filters(tmp_path):
    repo, _ = make_repos(tmp_path)
    repo.create("user-1", "2025-07-01", "a", keywords=["river"])
    repo.create("user-1", "2025-07-02", "b", keywords=["river"])
    repo.create("user-1", "2025-07-03", "c", keywords=["budget"])

    result = repo.find("user-1", EntryFilters(keywords=["river"]), page=1, page_size=1)

    assert result.total_count == 2
    assert [entry.date for entry in result.entries] == ["2025-07-02"]


@pytest.mark.parametrize("page, page_size", [(0, 10), (1, 0), (-1, -1)])
def test_find_rejects_invalid_pages(tmp_path, page, page_size):
    repo, _ = make_repos(tmp_path)

    with pytest.raises(ValueError):
        repo.find("user-1", page=page, page_size=page_size)


def test_same_date_orders_by_created_at_desc(tmp_path, monkeypatch):
    repo, _ = make_repos(tmp_path)
    stamps = iter(["2025-07-16T09:00:00+00:00", "2025-07-16T08:00:00+00:00"])
    monkeypatch.setattr(EntryRepository, "_now", staticmethod(lambda: next(stamps)))

    later = repo.create("user-1", "2025-07-16", "created first, later timestamp")
    earlier = repo.create("user-1", "2025-07-16", "created second, earlier timestamp")

    assert [entry.id for entry in repo.list("user-1")] == [later.id, earlier.id]


def test_delete_for_user(tmp_path):
    repo, _ = make_repos(tmp_path)
    repo.create("user-1", "2025-07-01", "one")
    repo.create("user-1", "2025-07-02", "two")
    other = repo.create("user-2", "2025-07-02", "three")

    removed = repo.delete_for_user("user-1")

    assert len(removed) == 2
    assert repo.list("user-1") == []
    assert repo.list("user-2") == [other]


def test_repository_without_audit_trail(tmp_path):
    repo = EntryRepository(db_path=tmp_path / "plain.db")
    created = repo.create("user-1", "2025-07-01", "text")

    assert repo.delete(created.id) is True


def test_db_path_from_environment(tmp_path, monkeypatch):
    db_path = tmp_path / "env" / "journal.db"
    monkeypatch.setenv("VOICE_JOURNAL_DB_PATH", str(db_path))

    repo = EntryRepository()

    assert repo.db_path == db_path
    assert db_path.exists()


def test_delete_for_user_uses_one_transaction(tmp_path, monkeypatch):
    repo, _ = make_repos(tmp_path)
    first = repo.create("user-1", "2025-07-01", "one")
    second = repo.create("user-1", "2025-07-02", "two")
    connections = []
    connect = repo._connect

    def counting_connect():
        conn = connect()
        connections.append(conn)
        return conn

    monkeypatch.setattr(repo, "_connect", counting_connect)

    removed = repo.delete_for_user("user-1")

    assert len(connections) == 1
    assert [entry.id for entry in removed] == [second.id, first.id]
