from __future__ import annotations

from baby_api.engine.archetypes.mutator import MutationEngine
from baby_api.engine.core.store import Store


def _engine(tmp_path):
    store = Store(tmp_path / "baby_data.json")
    return store, MutationEngine(store=store, clock=lambda: "2026-01-01T00:00:00+00:00")


def test_teach_creates_trigger_with_metadata(tmp_path):
    store, engine = _engine(tmp_path)

    result = engine.teach("hello", ["hi there"], "u1")

    assert result.persisted is True
    assert result.data == {"teacher": "u1", "teachs": 1, "replyCount": 1}
    trigger = store.load().get("hello")
    assert trigger.replies == ["hi there"]
    assert trigger.created_by == "u1"
    assert trigger.created_at == "2026-01-01T00:00:00+00:00"


def test_teach_appends_without_dedup(tmp_path):
    store, engine = _engine(tmp_path)

    engine.teach("hello", ["a", "b"])
    result = engine.teach("hello", ["b", "c", "a"])

    assert result.data["replyCount"] == 5
    assert store.load().get("hello").replies == ["a", "b", "b", "c", "a"]


def test_teach_counts_calls_not_replies(tmp_path):
    store, engine = _engine(tmp_path)

    engine.teach("hello", ["a", "b", "c"], "u1")
    result = engine.teach("bye", ["later"], "u1")

    assert result.data["teachs"] == 2
    assert store.load().teachers == {"u1": 2}


def test_teach_without_identity_leaves_ledger_alone(tmp_path):
    store, engine = _engine(tmp_path)

    result = engine.teach("hello", ["hi"])

    assert result.data["teacher"] is None
    assert result.data["teachs"] == 0
    assert store.load().teachers == {}


def test_teach_missing_trigger_or_reply_is_noop(tmp_path):
    store, engine = _engine(tmp_path)

    assert engine.teach("", ["hi"]) is None
    assert engine.teach("hello", []) is None
    assert engine.teach("hello", [""]) is None
    assert not store.path.exists()


def test_teach_recomputes_stats(tmp_path):
    store, engine = _engine(tmp_path)

    engine.teach("hello", ["hi"], "u1")
    engine.teach("bye", ["later"], "u2")
    engine.teach("hello", ["hey"], "u1")

    stats = store.load().stats
    assert stats.total_conversations == 2
    assert stats.total_teachers == 2
    assert stats.updated_at == "2026-01-01T00:00:00+00:00"


def test_edit_replaces_every_reply(tmp_path):
    store, engine = _engine(tmp_path)
    engine.teach("hello", ["a", "b", "c"])

    result = engine.edit("hello", "only")

    assert result.found is True
    assert result.persisted is True
    assert store.load().get("hello").replies == ["only"]


def test_edit_unknown_trigger_is_not_found(tmp_path):
    store, engine = _engine(tmp_path)

    result = engine.edit("ghost", "boo")

    assert result.found is False
    assert result.persisted is False
    assert store.load().get("ghost") is None


def test_remove_whole_trigger(tmp_path):
    store, engine = _engine(tmp_path)
    engine.teach("hello", ["hi"])
    engine.teach("bye", ["later"])

    result = engine.remove("hello")

    assert result.found is True
    state = store.load()
    assert state.get("hello") is None
    assert state.stats.total_conversations == 1


def test_remove_unknown_trigger_is_noop(tmp_path):
    store, engine = _engine(tmp_path)
    engine.teach("hello", ["hi"])

    result = engine.remove("ghost")

    assert result.found is False
    assert result.changed is False
    assert [t.message for t in store.load().triggers] == ["hello"]


def test_remove_reply_shrinks_by_one(tmp_path):
    store, engine = _engine(tmp_path)
    engine.teach("hello", ["a", "b", "c"])

    result = engine.remove_reply("hello", 1)

    assert result.found is True
    assert result.data["replyCount"] == 2
    assert store.load().get("hello").replies == ["a", "c"]


def test_remove_last_reply_deletes_trigger(tmp_path):
    store, engine = _engine(tmp_path)
    engine.teach("hello", ["only"])

    result = engine.remove_reply("hello", 0)

    assert result.data["triggerDeleted"] is True
    state = store.load()
    assert state.get("hello") is None
    assert state.stats.total_conversations == 0


def test_remove_reply_out_of_range_is_not_found(tmp_path):
    store, engine = _engine(tmp_path)
    engine.teach("hello", ["a", "b"])

    assert engine.remove_reply("hello", 2).found is False
    assert engine.remove_reply("hello", -1).found is False
    assert engine.remove_reply("ghost", 0).found is False
    assert store.load().get("hello").replies == ["a", "b"]


def test_failed_save_is_reported_and_not_applied(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = Store(blocker / "baby_data.json")
    engine = MutationEngine(store=store)

    result = engine.teach("hello", ["hi"], "u1")

    assert result.changed is True
    assert result.persisted is False
    assert store.load().get("hello") is None
