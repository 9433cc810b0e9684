"""In-memory projection of the store for list, search, show and pipeline.

A ``Snapshot`` is rebuilt from the JSON files on every command that needs it
and thrown away afterwards. Nothing here writes to the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from forkyou.models import Activity, Company, Contact, Deal, PipelineConfig, Task
from forkyou.store import RecordStore

RECENT_ACTIVITY_LIMIT = 10


def _name_key(text: str | None) -> tuple[str, str]:
    text = text or ""
    return (text.casefold(), text)


def _contains(query: str, *values: str | None) -> bool:
    q = query.casefold()
    return any(v is not None and q in str(v).casefold() for v in values)


def _by_date_desc(activities: list[Activity]) -> list[Activity]:
    # Undated activities go last.
    dated = sorted((a for a in activities if a.date), key=lambda a: a.date, reverse=True)
    return dated + [a for a in activities if not a.date]


@dataclass
class StageSummary:
    stage: str
    count: int = 0
    total: float = 0
    weighted: float = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage,
            "count": self.count,
            "total": self.total,
            "weighted": self.weighted,
        }


@dataclass
class PipelineSummary:
    stages: list[StageSummary]
    currency: str

    @property
    def total_deals(self) -> int:
        return sum(s.count for s in self.stages)

    @property
    def total_value(self) -> float:
        return sum(s.total for s in self.stages)

    @property
    def total_weighted(self) -> float:
        return sum(s.weighted for s in self.stages)

    def to_dict(self) -> dict[str, Any]:
        return {
            "stages": [s.to_dict() for s in self.stages],
            "totalDeals": self.total_deals,
            "totalValue": self.total_value,
            "totalWeighted": self.total_weighted,
            "currency": self.currency,
        }


@dataclass
class Snapshot:
    """Every record of every collection, loaded once."""

    config: PipelineConfig = field(default_factory=PipelineConfig)
    contacts: list[Contact] = field(default_factory=list)
    companies: list[Company] = field(default_factory=list)
    deals: list[Deal] = field(default_factory=list)
    activities: list[Activity] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    @classmethod
    def load(cls, store: RecordStore) -> Snapshot:
        return cls(
            config=store.read_config(),
            contacts=store.load_all(Contact),
            companies=store.load_all(Company),
            deals=store.load_all(Deal),
            activities=store.load_all(Activity),
            tasks=store.load_all(Task),
        )

    # ── Lists ──────────────────────────────────────────────────

    def list_contacts(self) -> list[Contact]:
        return sorted(self.contacts, key=lambda c: _name_key(c.name))

    def list_companies(self) -> list[Company]:
        return sorted(self.companies, key=lambda c: _name_key(c.name))

    def list_deals(self) -> list[Deal]:
        """Deals in configured stage order, then by title.

        Deals sitting in a stage that is no longer configured come last,
        grouped by their stage name.
        """
        order = {stage: i for i, stage in enumerate(self.config.stages)}
        unknown = len(order)
        return sorted(
            self.deals,
            key=lambda d: (order.get(d.stage, unknown), d.stage, _name_key(d.title)),
        )

    def list_activities(self) -> list[Activity]:
        return _by_date_desc(self.activities)

    def list_tasks(self) -> list[Task]:
        """Pending before done, then due date (missing first), then newest created."""
        newest_first = sorted(self.tasks, key=lambda t: t.created, reverse=True)
        return sorted(newest_first, key=lambda t: (t.done, t.due is not None, t.due or ""))

    # ── Search ─────────────────────────────────────────────────

    def search_contacts(self, query: str) -> list[Contact]:
        return [c for c in self.list_contacts() if _contains(query, c.name, c.email, c.role)]

    def search_companies(self, query: str) -> list[Company]:
        return [
            c for c in self.list_companies() if _contains(query, c.name, c.domain, c.industry)
        ]

    def search_deals(self, query: str) -> list[Deal]:
        matches = [d for d in self.deals if _contains(query, d.title, d.stage)]
        return sorted(matches, key=lambda d: _name_key(d.title))

    # ── Related records ────────────────────────────────────────

    def company_contacts(self, company_id: str) -> list[Contact]:
        return [c for c in self.list_contacts() if c.company == company_id]

    def company_deals(self, company_id: str) -> list[Deal]:
        return [d for d in self.list_deals() if d.company == company_id]

    def contact_deals(self, contact_id: str) -> list[Deal]:
        return [d for d in self.list_deals() if contact_id in d.contacts]

    def contact_activities(
        self, contact_id: str, limit: int = RECENT_ACTIVITY_LIMIT
    ) -> list[Activity]:
        return _by_date_desc([a for a in self.activities if a.contact == contact_id])[:limit]

    def deal_activities(self, deal_id: str, limit: int = RECENT_ACTIVITY_LIMIT) -> list[Activity]:
        return _by_date_desc([a for a in self.activities if a.deal == deal_id])[:limit]

    # ── Pipeline ───────────────────────────────────────────────

    def pipeline(self) -> PipelineSummary:
        """Count, value and probability-weighted value per configured stage."""
        rows = {stage: StageSummary(stage) for stage in self.config.stages}
        for deal in self.deals:
            row = rows.get(deal.stage)
            if row is None:
                continue
            row.count += 1
            value = deal.value or 0
            row.total += value
            if deal.probability is not None:
                row.weighted += value * deal.probability / 100
        return PipelineSummary(stages=list(rows.values()), currency=self.config.currency)
