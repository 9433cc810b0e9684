"""Tests for the JSON record store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from forkyou.models import DEFAULT_STAGES, Contact, Deal, PipelineConfig, utc_now
from forkyou.store import ID_ALPHABET, ID_LENGTH, RecordStore, find_root, new_id


@pytest.fixture
def store(tmp_path: Path) -> RecordStore:
    store, _ = RecordStore.initialize(tmp_path)
    return store


def _contact(**overrides) -> dict:
    now = utc_now()
    data = {"id": new_id(), "name": "Test User", "email": "test@example.com",
            "created": now, "updated": now}
    data.update(overrides)
    return data


class TestInitialize:
    def test_creates_directory_structure(self, store: RecordStore):
        assert store.root.name == ".forkyou"
        for collection in ["contacts", "companies", "deals", "activities", "tasks"]:
            assert (store.root / collection).is_dir()
        assert (store.root / "config.json").is_file()

    def test_default_config_file(self, store: RecordStore):
        data = json.loads((store.root / "config.json").read_text())
        assert data == {"stages": DEFAULT_STAGES, "currency": "USD"}

    def test_idempotent(self, tmp_path: Path, store: RecordStore):
        store.write_config(PipelineConfig(stages=["a", "b"]))
        again, created = RecordStore.initialize(tmp_path)
        assert created is False
        assert again.root == store.root
        # Existing config is left alone
        assert again.read_config().stages == ["a", "b"]

    def test_reports_creation(self, tmp_path: Path):
        _, created = RecordStore.initialize(tmp_path / "fresh")
        assert created is True


class TestFindRoot:
    def test_finds_root_in_cwd(self, tmp_path: Path, store: RecordStore):
        assert find_root(tmp_path) == store.root.resolve()

    def test_walks_up_from_subdirectory(self, tmp_path: Path, store: RecordStore):
        nested = tmp_path / "src" / "pkg" / "deep"
        nested.mkdir(parents=True)
        assert find_root(nested) == store.root.resolve()

    def test_defaults_to_cwd(self, tmp_path: Path, store: RecordStore, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert find_root() == store.root.resolve()

    def test_nearest_root_wins(self, tmp_path: Path, store: RecordStore):
        inner, _ = RecordStore.initialize(tmp_path / "sub")
        assert find_root(tmp_path / "sub") == inner.root.resolve()

    def test_returns_none_without_root(self, tmp_path: Path):
        assert find_root(tmp_path) is None


class TestNewId:
    def test_shape(self):
        for _ in range(50):
            record_id = new_id()
            assert len(record_id) == ID_LENGTH
            assert set(record_id) <= set(ID_ALPHABET)

    def test_alphabet_is_unambiguous(self):
        for ch in "0o1li-_":
            assert ch not in ID_ALPHABET

    def test_unique(self):
        assert len({new_id() for _ in range(1000)}) == 1000


class TestRecords:
    def test_write_and_read_roundtrip(self, store: RecordStore):
        contact = _contact()
        store.write_record("contacts", contact)
        result = store.read_one("contacts", contact["id"])
        assert result == contact
        assert result["created"] == result["updated"]

    def test_file_name_is_id(self, store: RecordStore):
        contact = _contact()
        store.write_record("contacts", contact)
        path = store.root / "contacts" / f"{contact['id']}.json"
        assert path.is_file()

    def test_pretty_printed(self, store: RecordStore):
        contact = _contact()
        store.write_record("contacts", contact)
        text = (store.root / "contacts" / f"{contact['id']}.json").read_text()
        assert text.startswith("{\n  ")
        assert text.endswith("}\n")

    def test_non_finite_numbers_not_written(self, store: RecordStore):
        deal = {"id": "d1", "title": "X", "value": float("nan"),
                "created": "x", "updated": "x"}
        with pytest.raises(ValueError):
            store.write_record("deals", deal)
        assert not (store.root / "deals" / "d1.json").exists()

    def test_custom_map_roundtrip(self, store: RecordStore):
        custom = {
            "note": 'He said "hi"\nthen left',
            "path": "C:\\deals\\q3",
            "unicode": "Zoë — café ✓",
            "empty": "",
        }
        contact = _contact(custom=custom)
        store.write_record("contacts", contact)
        assert store.read_one("contacts", contact["id"])["custom"] == custom

    def test_overwrite_same_id(self, store: RecordStore):
        contact = _contact()
        store.write_record("contacts", contact)
        store.write_record("contacts", {**contact, "name": "Renamed"})
        assert store.read_one("contacts", contact["id"])["name"] == "Renamed"
        assert len(store.read_all("contacts")) == 1

    def test_write_creates_missing_collection_dir(self, store: RecordStore):
        (store.root / "tasks").rmdir()
        now = utc_now()
        store.write_record("tasks", {"id": "t1", "title": "x", "done": False,
                                     "created": now, "updated": now})
        assert store.read_one("tasks", "t1")["title"] == "x"

    def test_read_one_missing(self, store: RecordStore):
        assert store.read_one("contacts", "nope") is None

    def test_read_all(self, store: RecordStore):
        for i in range(3):
            store.write_record("contacts", _contact(name=f"User {i}"))
        assert len(store.read_all("contacts")) == 3

    def test_read_all_missing_dir(self, tmp_path: Path):
        store = RecordStore(tmp_path / ".forkyou")
        assert store.read_all("contacts") == []

    def test_read_all_ignores_non_json(self, store: RecordStore):
        store.write_record("contacts", _contact())
        (store.root / "contacts" / ".gitkeep").write_text("")
        (store.root / "contacts" / "notes.txt").write_text("hello")
        assert len(store.read_all("contacts")) == 1

    def test_delete(self, store: RecordStore):
        contact = _contact()
        store.write_record("contacts", contact)
        assert store.delete_record("contacts", contact["id"]) is True
        assert store.delete_record("contacts", contact["id"]) is False
        assert store.read_one("contacts", contact["id"]) is None

    def test_unknown_collection(self, store: RecordStore):
        with pytest.raises(ValueError):
            store.read_all("leads")

    def test_path_like_ids_rejected(self, store: RecordStore):
        assert store.read_one("contacts", "../config") is None
        assert store.delete_record("contacts", "../config") is False
        with pytest.raises(ValueError):
            store.write_record("contacts", _contact(id="../evil"))
        assert (store.root / "config.json").exists()


class TestTypedAccess:
    def test_save_and_load(self, store: RecordStore):
        now = utc_now()
        deal = Deal(id=new_id(), title="Big deal", stage="lead", value=100,
                    contacts=["c1", "c2"], close_date="2026-12-01",
                    created=now, updated=now)
        store.save(deal)
        assert store.load(Deal, deal.id) == deal
        raw = store.read_one("deals", deal.id)
        assert raw["closeDate"] == "2026-12-01"
        assert "close_date" not in raw

    def test_load_missing(self, store: RecordStore):
        assert store.load(Contact, "missing") is None

    def test_load_all(self, store: RecordStore):
        store.write_record("contacts", _contact(name="A"))
        store.write_record("contacts", _contact(name="B"))
        names = sorted(c.name for c in store.load_all(Contact))
        assert names == ["A", "B"]


class TestConfig:
    def test_default_when_missing(self, tmp_path: Path):
        store = RecordStore(tmp_path / ".forkyou")
        config = store.read_config()
        assert config.stages == DEFAULT_STAGES
        assert config.currency == "USD"

    def test_roundtrip(self, store: RecordStore):
        store.write_config(PipelineConfig(stages=["new", "won"], currency="EUR"))
        config = store.read_config()
        assert config.stages == ["new", "won"]
        assert config.currency == "EUR"
