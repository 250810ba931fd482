"""
Tests for JSONL history storage, the weights file and record serialization.
"""

import json

import pytest

from hangboard_timer.core.models import HoldRecord, SessionRecord, SetRecord, SetWeights
from hangboard_timer.io.history_store import STORE_VERSION, HistoryStore
from hangboard_timer.io.serializers import (
    ValidationError,
    dict_to_record,
    json_line_to_record,
    record_to_dict,
    record_to_json_line,
)
from hangboard_timer.io.weight_store import WeightStore


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _record(record_id: str = "r1", started_at: int = 1_700_000_000_000, **kwargs) -> SessionRecord:
    defaults = dict(
        id=record_id,
        workout_type="a",
        started_at=started_at,
        completed_at=started_at + 1_800_000,
        bailed=False,
        holds=(
            HoldRecord(
                hold_id="large-edge",
                hold_name="Large Edge",
                set1=SetRecord(weight=5.0, reps=7, completed=True),
                set2=SetRecord(weight=15.0, reps=6, completed=True),
            ),
            HoldRecord(
                hold_id="b-big-open",
                hold_name="Big Open",
                set1=SetRecord(weight=0.0, reps=1, completed=True),
                set2=None,
                notes="warm-up",
            ),
        ),
    )
    defaults.update(kwargs)
    return SessionRecord(**defaults)


def _item(**overrides) -> dict:
    item = {
        "id": "x",
        "workout_type": "a",
        "started_at": 1_700_000_000_000,
        "bailed": False,
        "holds": [
            {
                "hold_id": "large-edge",
                "hold_name": "Large Edge",
                "set1": {"weight": 5, "reps": 7, "completed": True},
                "set2": {"weight": 15, "reps": 6, "completed": True},
            }
        ],
    }
    item.update(overrides)
    return item


@pytest.fixture
def store(tmp_path) -> HistoryStore:
    s = HistoryStore(tmp_path / "history.jsonl")
    s.init()
    return s


# ---------------------------------------------------------------------------
# Serializers
# ---------------------------------------------------------------------------

class TestSerializers:
    def test_json_line_is_single_line(self):
        line = record_to_json_line(_record())
        assert "\n" not in line
        assert json_line_to_record(line) == _record()

    def test_optional_fields_omitted(self):
        d = record_to_dict(_record())
        assert "notes" not in d
        assert "imported" not in d
        assert d["holds"][1]["set2"] is None

    def test_notes_and_imported_written(self):
        d = record_to_dict(_record(notes="ok", imported=True))
        assert d["notes"] == "ok"
        assert d["imported"] is True

    def test_completed_at_defaults_to_started_at(self):
        record = dict_to_record(_item())
        assert record.completed_at == record.started_at

    def test_hold_name_defaults_to_id(self):
        item = _item()
        del item["holds"][0]["hold_name"]
        assert dict_to_record(item).holds[0].hold_name == "large-edge"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"id": ""},
            {"id": 3},
            {"workout_type": None},
            {"started_at": "yesterday"},
            {"started_at": True},
            {"started_at": -1},
            {"holds": "none"},
            {"bailed": "no"},
            {"completed_at": 1},
        ],
    )
    def test_invalid_records_rejected(self, overrides):
        with pytest.raises(ValidationError):
            dict_to_record(_item(**overrides))

    def test_invalid_set_rejected(self):
        item = _item()
        item["holds"][0]["set1"] = {"weight": "heavy", "reps": 7, "completed": True}
        with pytest.raises(ValidationError, match="large-edge.set1.weight"):
            dict_to_record(item)

    def test_workout_type_whitelist(self):
        with pytest.raises(ValidationError, match="Unknown workout_type"):
            dict_to_record(_item(workout_type="zz"), workout_types=["a", "b"])

    def test_invalid_json_line(self):
        with pytest.raises(ValidationError, match="Invalid JSON"):
            json_line_to_record("{not json")


# ---------------------------------------------------------------------------
# HistoryStore
# ---------------------------------------------------------------------------

class TestHistoryStore:
    def test_init_writes_meta_line(self, store):
        first = store.history_path.read_text().splitlines()[0]
        assert json.loads(first) == {"type": "meta", "version": STORE_VERSION}
        assert store.get_all() == []

    def test_missing_file_is_empty(self, tmp_path):
        assert HistoryStore(tmp_path / "nope.jsonl").get_all() == []

    def test_put_and_get(self, store):
        store.put(_record("r1"))
        assert store.get("r1") == _record("r1")
        assert store.get("r2") is None

    def test_put_replaces_same_id(self, store):
        store.put(_record("r1"))
        store.put(_record("r1", notes="edited"))
        records = store.get_all()
        assert len(records) == 1
        assert records[0].notes == "edited"

    def test_get_all_newest_first(self, store):
        store.put(_record("old", started_at=1_000))
        store.put(_record("new", started_at=3_000))
        store.put(_record("mid", started_at=2_000))
        assert [r.id for r in store.get_all()] == ["new", "mid", "old"]

    def test_update(self, store):
        store.put(_record("r1"))
        store.update(_record("r1", bailed=True))
        assert store.get("r1").bailed

    def test_update_unknown_raises(self, store):
        with pytest.raises(KeyError):
            store.update(_record("ghost"))

    def test_delete(self, store):
        store.put(_record("r1"))
        store.put(_record("r2"))
        deleted = store.delete("r1")
        assert deleted.id == "r1"
        assert [r.id for r in store.get_all()] == ["r2"]

    def test_delete_unknown_raises(self, store):
        with pytest.raises(KeyError):
            store.delete("ghost")

    def test_clear_history(self, store):
        store.put(_record("r1"))
        store.clear_history()
        assert store.get_all() == []
        assert store.exists()

    def test_corrupt_line_reports_line_number(self, store):
        with open(store.history_path, "a", encoding="utf-8") as f:
            f.write("{broken\n")
        with pytest.raises(ValidationError, match="line 2"):
            store.get_all()


class TestImportExport:
    def test_import_assigns_new_ids_and_flag(self, store):
        imported = store.import_records([_item(id="same"), _item(id="same")])
        assert len(imported) == 2
        assert imported[0].id != imported[1].id
        assert all(r.imported for r in imported)
        assert len(store.get_all()) == 2

    def test_import_is_all_or_nothing(self, store):
        store.put(_record("keep"))
        bad = _item(holds=None)
        with pytest.raises(ValidationError, match="#2"):
            store.import_records([_item(), bad, _item()])
        assert [r.id for r in store.get_all()] == ["keep"]

    def test_import_requires_list(self, store):
        with pytest.raises(ValidationError):
            store.import_records({"id": "x"})

    def test_import_checks_workout_types(self, store):
        with pytest.raises(ValidationError):
            store.import_records([_item(workout_type="beginner")], workout_types=["a", "b"])

    def test_export_then_import_round_trip(self, store, tmp_path):
        store.put(_record("r1", notes="n"))
        exported = store.export_records()

        other = HistoryStore(tmp_path / "other.jsonl")
        (restored,) = other.import_records(json.loads(json.dumps(exported)))
        original = store.get("r1")
        assert restored.holds == original.holds
        assert restored.started_at == original.started_at
        assert restored.notes == original.notes
        assert restored.imported and restored.id != original.id


# ---------------------------------------------------------------------------
# WeightStore
# ---------------------------------------------------------------------------

class TestWeightStore:
    def test_load_missing_is_none(self, tmp_path):
        assert WeightStore(tmp_path / "weights.json").load("a") is None

    def test_save_and_load(self, tmp_path):
        ws = WeightStore(tmp_path / "weights.json")
        ws.save("a", {"edge": SetWeights(5.0, 15.0)})
        ws.save("b", {"chisel": SetWeights(-10.0, -10.0)})
        assert ws.load("a") == {"edge": SetWeights(5.0, 15.0)}
        assert ws.load("b") == {"chisel": SetWeights(-10.0, -10.0)}

    def test_reset_only_touches_one_key(self, tmp_path):
        ws = WeightStore(tmp_path / "weights.json")
        ws.save("a", {"edge": SetWeights(5.0, 15.0)})
        ws.save("b", {"chisel": SetWeights(1.0, 1.0)})
        ws.reset("a")
        assert ws.load("a") is None
        assert ws.load("b") is not None

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "weights.json"
        path.write_text("{oops")
        with pytest.raises(ValidationError):
            WeightStore(path).load("a")

    def test_malformed_entry(self, tmp_path):
        path = tmp_path / "weights.json"
        path.write_text(json.dumps({"a": {"edge": {"set1": "x"}}}))
        with pytest.raises(ValidationError):
            WeightStore(path).load("a")
