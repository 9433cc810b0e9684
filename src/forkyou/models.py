"""Record types persisted by the store.

Each record is an immutable dataclass. Field names map 1:1 to JSON keys except
where a ``wire`` name is given in the field metadata (``close_date`` is stored
as ``closeDate``). Unset optional fields are left out of the JSON file, and
keys this version does not know about survive a read/write cycle in ``extra``.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar

DEFAULT_STAGES = [
    "lead",
    "qualified",
    "proposal",
    "negotiation",
    "closed-won",
    "closed-lost",
]
DEFAULT_CURRENCY = "USD"

ACTIVITY_TYPES = ("call", "email", "meeting", "note")

COLLECTIONS = ("contacts", "companies", "deals", "activities", "tasks")


def utc_now() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2026-01-02T03:04:05.678Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Record:
    """Mixin giving record dataclasses their JSON mapping and edit semantics."""

    collection: ClassVar[str]

    @classmethod
    def _wire_fields(cls) -> list[tuple[str, str]]:
        return [
            (f.name, f.metadata.get("wire", f.name))
            for f in dataclasses.fields(cls)
            if f.name != "extra"
        ]

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        remaining = dict(data)
        known = {}
        for attr, key in cls._wire_fields():
            if key in remaining:
                known[attr] = remaining.pop(key)
        return cls(**known, extra=remaining)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for attr, key in self._wire_fields():
            value = getattr(self, attr)
            if value is None:
                continue
            data[key] = value
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    def with_updates(self, **changes: Any):
        """Return a copy with every non-None change applied and ``updated`` refreshed.

        ``None`` means "not supplied", so omitted fields keep their current value.
        The new ``updated`` is never earlier than the previous one.
        """
        supplied = {k: v for k, v in changes.items() if v is not None}
        now = utc_now()
        return dataclasses.replace(self, **supplied, updated=max(now, self.updated))


@dataclass(frozen=True, kw_only=True)
class Contact(Record):
    collection: ClassVar[str] = "contacts"

    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    role: str | None = None
    custom: dict[str, str] | None = None
    created: str
    updated: str
    extra: dict = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True, kw_only=True)
class Company(Record):
    collection: ClassVar[str] = "companies"

    id: str
    name: str
    domain: str | None = None
    industry: str | None = None
    size: str | None = None
    custom: dict[str, str] | None = None
    created: str
    updated: str
    extra: dict = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True, kw_only=True)
class Deal(Record):
    collection: ClassVar[str] = "deals"

    id: str
    title: str
    company: str | None = None
    contacts: list[str] = field(default_factory=list)
    stage: str
    value: float | None = None
    currency: str | None = None
    probability: float | None = None
    close_date: str | None = field(default=None, metadata={"wire": "closeDate"})
    custom: dict[str, str] | None = None
    created: str
    updated: str
    extra: dict = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True, kw_only=True)
class Activity(Record):
    collection: ClassVar[str] = "activities"

    id: str
    type: str
    subject: str
    body: str | None = None
    contact: str | None = None
    deal: str | None = None
    company: str | None = None
    date: str | None = None
    created: str
    updated: str
    extra: dict = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True, kw_only=True)
class Task(Record):
    collection: ClassVar[str] = "tasks"

    id: str
    title: str
    contact: str | None = None
    deal: str | None = None
    company: str | None = None
    due: str | None = None
    done: bool = False
    created: str
    updated: str
    extra: dict = field(default_factory=dict, compare=False, repr=False)


@dataclass
class PipelineConfig:
    """Per-project settings stored in ``.forkyou/config.json``."""

    stages: list[str] = field(default_factory=lambda: list(DEFAULT_STAGES))
    currency: str = DEFAULT_CURRENCY

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PipelineConfig:
        return cls(
            stages=list(data.get("stages") or DEFAULT_STAGES),
            currency=data.get("currency") or DEFAULT_CURRENCY,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"stages": list(self.stages), "currency": self.currency}
