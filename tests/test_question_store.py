"""
Tests for the JSON question store
"""
import json

import pytest

from buzzhub.core import question_store as store
from buzzhub.core.question_store import QuestionValidationError


OPTIONS = ["1", "2", "3", "4"]


@pytest.fixture
def path(tmp_path):
    p = str(tmp_path / "data" / "questions.json")
    store.ensure_data_store(p)
    return p


def test_ensure_data_store_creates_empty_file(path):
    with open(path, encoding="utf-8") as f:
        assert json.load(f) == {"questions": []}


def test_ensure_data_store_keeps_existing(path):
    store.create_question(path, {"text": "Q", "options": OPTIONS})
    store.ensure_data_store(path)
    assert len(store.load_questions(path)) == 1


def test_create_question_persists_camel_case(path):
    q = store.create_question(path, {"text": "  2+2? ", "options": [" 1", "2", "3", "4 "], "correct": 3})
    assert q.text == "2+2?"
    assert q.options == OPTIONS
    assert q.correct == 3
    assert q.created_at == q.updated_at

    with open(path, encoding="utf-8") as f:
        raw = json.load(f)["questions"][0]
    assert set(raw) == {"id", "text", "options", "correct", "createdAt", "updatedAt"}
    assert raw["id"] == q.id


def test_create_question_truncates(path):
    q = store.create_question(path, {"text": "t" * 3000, "options": ["o" * 300, "b", "c", "d"]})
    assert len(q.text) == 2000
    assert len(q.options[0]) == 200
    assert q.correct is None


@pytest.mark.parametrize("payload", [
    {"text": "", "options": OPTIONS},
    {"text": "Q", "options": OPTIONS[:3]},
    {"text": "Q", "options": ["a", "", "c", "d"]},
    {"text": "Q"},
])
def test_create_question_invalid(path, payload):
    with pytest.raises(QuestionValidationError):
        store.create_question(path, payload)
    assert store.load_questions(path) == []


def test_ids_are_unique(path):
    ids = {store.create_question(path, {"text": "Q", "options": OPTIONS}).id for _ in range(20)}
    assert len(ids) == 20


def test_update_question_partial(path):
    q = store.create_question(path, {"text": "Q", "options": OPTIONS, "correct": 0})
    updated = store.update_question(path, q.id, {"correct": 2})
    assert updated.text == "Q"
    assert updated.correct == 2
    assert updated.updated_at >= q.updated_at
    assert updated.created_at == q.created_at

    updated = store.update_question(path, q.id, {"text": "New", "correct": 9})
    assert updated.text == "New"
    assert updated.correct == 2
    assert store.get_question(path, q.id).text == "New"


def test_update_question_rejects_bad_options(path):
    q = store.create_question(path, {"text": "Q", "options": OPTIONS})
    with pytest.raises(QuestionValidationError):
        store.update_question(path, q.id, {"options": ["a", "b"]})
    assert store.get_question(path, q.id).options == OPTIONS


def test_update_unknown_question(path):
    assert store.update_question(path, "missing", {"text": "x"}) is None


def test_delete_question_is_idempotent(path):
    q = store.create_question(path, {"text": "Q", "options": OPTIONS})
    assert store.delete_question(path, q.id) is True
    assert store.delete_question(path, q.id) is False
    assert store.load_questions(path) == []


def test_load_malformed_file(path):
    with open(path, "w", encoding="utf-8") as f:
        f.write("{not json")
    assert store.load_questions(path) == []


def test_load_skips_bad_records(path):
    good = store.create_question(path, {"text": "Q", "options": OPTIONS})
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    data["questions"].append({"id": "broken"})
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    assert [q.id for q in store.load_questions(path)] == [good.id]


def test_load_missing_file(tmp_path):
    assert store.load_questions(str(tmp_path / "nope.json")) == []


def seed(path, records):
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"questions": records}, f)


def stored_ids(path):
    with open(path, encoding="utf-8") as f:
        return [r.get("id") for r in json.load(f)["questions"]]


def test_hand_written_record_without_timestamps_loads(path):
    seed(path, [{"id": "hand", "text": "T", "options": OPTIONS, "correct": None}])
    [q] = store.load_questions(path)
    assert q.id == "hand"
    assert q.created_at == 0


def test_writes_keep_records_that_do_not_parse(path):
    """Create, update and delete leave unparseable records on disk"""
    seed(path, [
        {"id": "hand", "text": "T", "options": OPTIONS, "correct": None},
        {"id": "broken", "note": "kept as is"},
    ])
    new = store.create_question(path, {"text": "Q", "options": OPTIONS})
    assert stored_ids(path) == ["hand", "broken", new.id]

    store.update_question(path, "hand", {"correct": 1})
    store.delete_question(path, new.id)
    assert stored_ids(path) == ["hand", "broken"]
    with open(path, encoding="utf-8") as f:
        assert json.load(f)["questions"][1] == {"id": "broken", "note": "kept as is"}


def test_update_keeps_extra_keys(path):
    seed(path, [{"id": "hand", "text": "T", "options": OPTIONS, "source": "quiz night"}])
    store.update_question(path, "hand", {"text": "New"})
    with open(path, encoding="utf-8") as f:
        record = json.load(f)["questions"][0]
    assert record["text"] == "New"
    assert record["source"] == "quiz night"


def test_update_unparseable_record_is_rejected(path):
    seed(path, [{"id": "broken"}])
    with pytest.raises(QuestionValidationError):
        store.update_question(path, "broken", {"text": "x"})
    assert stored_ids(path) == ["broken"]


def test_update_ignores_null_options(path):
    q = store.create_question(path, {"text": "Q", "options": OPTIONS})
    updated = store.update_question(path, q.id, {"options": None, "text": "Q2"})
    assert updated.options == OPTIONS
    assert updated.text == "Q2"


def test_correct_accepts_whole_float(path):
    q = store.create_question(path, {"text": "Q", "options": OPTIONS, "correct": 2.0})
    assert q.correct == 2
    assert store.update_question(path, q.id, {"correct": 2.5}).correct == 2
