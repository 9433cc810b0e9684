"""Record store: one pretty-printed JSON file per record.

Layout:
    <project>/.forkyou/
    ├── config.json          # {"stages": [...], "currency": "USD"}
    ├── contacts/<id>.json
    ├── companies/<id>.json
    ├── deals/<id>.json
    ├── activities/<id>.json
    └── tasks/<id>.json

Every mutation touches exactly one file. There is no locking: two processes
writing the same id race and the last writer wins.
"""

from __future__ import annotations

import json
import logging
import secrets
from pathlib import Path
from typing import Any, TypeVar

from forkyou.models import COLLECTIONS, PipelineConfig, Record

logger = logging.getLogger(__name__)

ROOT_DIRNAME = ".forkyou"
CONFIG_FILENAME = "config.json"

ID_LENGTH = 8
# Lowercase letters and digits without 0/o, 1/l/i.
ID_ALPHABET = "23456789abcdefghjkmnpqrstuvwxyz"

R = TypeVar("R", bound=Record)


def find_root(start: Path | None = None) -> Path | None:
    """Walk up from ``start`` (default: cwd) to the nearest ``.forkyou/`` directory."""
    p = (start or Path.cwd()).resolve()
    while True:
        candidate = p / ROOT_DIRNAME
        if candidate.is_dir():
            return candidate
        if p == p.parent:
            return None
        p = p.parent


def new_id() -> str:
    """Short random id, also used as the record's file name."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, allow_nan=False) + "\n"


class RecordStore:
    """Read/write access to a single ``.forkyou/`` directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    # ── Initialization ─────────────────────────────────────────

    @classmethod
    def initialize(cls, base: Path) -> tuple[RecordStore, bool]:
        """Create ``<base>/.forkyou`` with its collections and a default config.

        Idempotent: an existing root is returned untouched. The flag tells
        whether anything was created.
        """
        root = Path(base) / ROOT_DIRNAME
        if root.exists():
            return cls(root), False

        for collection in COLLECTIONS:
            (root / collection).mkdir(parents=True, exist_ok=True)
        store = cls(root)
        store.write_config(PipelineConfig())
        logger.info("Initialized store at %s", root)
        return store, True

    # ── Paths ──────────────────────────────────────────────────

    def _collection_dir(self, collection: str) -> Path:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        return self.root / collection

    def _record_path(self, collection: str, record_id: str) -> Path | None:
        """Path for ``record_id``, or None when the id cannot name a file."""
        if not record_id or "/" in record_id or "\\" in record_id or record_id.startswith("."):
            return None
        return self._collection_dir(collection) / f"{record_id}.json"

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    # ── Raw record access ──────────────────────────────────────

    def read_all(self, collection: str) -> list[dict[str, Any]]:
        """Parse every record in a collection, in directory listing order."""
        directory = self._collection_dir(collection)
        if not directory.is_dir():
            return []
        records = []
        for path in directory.iterdir():
            if path.suffix != ".json" or not path.is_file():
                continue
            records.append(json.loads(path.read_text(encoding="utf-8")))
        return records

    def read_one(self, collection: str, record_id: str) -> dict[str, Any] | None:
        path = self._record_path(collection, record_id)
        if path is None or not path.is_file():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def write_record(self, collection: str, record: dict[str, Any]) -> None:
        """Write ``record`` to ``<collection>/<id>.json``, replacing any previous version."""
        path = self._record_path(collection, str(record.get("id", "")))
        if path is None:
            raise ValueError(f"Invalid record id: {record.get('id')!r}")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(_dump(record), encoding="utf-8")
        logger.debug("Wrote %s/%s", collection, record["id"])

    def delete_record(self, collection: str, record_id: str) -> bool:
        """Remove a record file. Returns False if there was nothing to remove."""
        path = self._record_path(collection, record_id)
        if path is None or not path.is_file():
            return False
        path.unlink()
        logger.debug("Deleted %s/%s", collection, record_id)
        return True

    # ── Typed access ───────────────────────────────────────────

    def load(self, kind: type[R], record_id: str) -> R | None:
        data = self.read_one(kind.collection, record_id)
        return kind.from_dict(data) if data is not None else None

    def load_all(self, kind: type[R]) -> list[R]:
        return [kind.from_dict(data) for data in self.read_all(kind.collection)]

    def save(self, record: Record) -> None:
        self.write_record(record.collection, record.to_dict())

    def delete(self, kind: type[Record], record_id: str) -> bool:
        return self.delete_record(kind.collection, record_id)

    # ── Pipeline config ────────────────────────────────────────

    def read_config(self) -> PipelineConfig:
        if not self.config_path.is_file():
            return PipelineConfig()
        return PipelineConfig.from_dict(json.loads(self.config_path.read_text(encoding="utf-8")))

    def write_config(self, config: PipelineConfig) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(_dump(config.to_dict()), encoding="utf-8")
        logger.info("Wrote pipeline config: %s", ", ".join(config.stages))
