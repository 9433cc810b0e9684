"""Tests for the in-memory query snapshot."""

from __future__ import annotations

from pathlib import Path

import pytest

from forkyou.models import Activity, Company, Contact, Deal, PipelineConfig, Task
from forkyou.query import Snapshot
from forkyou.store import RecordStore

TS = "2026-01-01T00:00:00.000Z"


def contact(id, name, **kw) -> Contact:
    return Contact(id=id, name=name, created=TS, updated=TS, **kw)


def company(id, name, **kw) -> Company:
    return Company(id=id, name=name, created=TS, updated=TS, **kw)


def deal(id, title, stage="lead", **kw) -> Deal:
    return Deal(id=id, title=title, stage=stage, created=TS, updated=TS, **kw)


def activity(id, date, **kw) -> Activity:
    return Activity(id=id, type="note", subject=f"subject {id}", date=date,
                    created=TS, updated=TS, **kw)


def task(id, due=None, done=False, created=TS) -> Task:
    return Task(id=id, title=f"task {id}", due=due, done=done, created=created, updated=created)


class TestLoad:
    def test_load_reads_every_collection(self, tmp_path: Path):
        store, _ = RecordStore.initialize(tmp_path)
        store.save(contact("c1", "Ada"))
        store.save(company("co1", "Acme"))
        store.save(deal("d1", "Deal"))
        store.save(activity("a1", TS))
        store.save(task("t1"))
        snap = Snapshot.load(store)
        assert [len(x) for x in (snap.contacts, snap.companies, snap.deals,
                                 snap.activities, snap.tasks)] == [1, 1, 1, 1, 1]
        assert snap.config.stages[0] == "lead"

    def test_load_does_not_write(self, tmp_path: Path):
        store, _ = RecordStore.initialize(tmp_path)
        store.save(contact("c1", "Ada"))
        before = sorted(p.stat().st_mtime_ns for p in tmp_path.rglob("*.json"))
        Snapshot.load(store).pipeline()
        after = sorted(p.stat().st_mtime_ns for p in tmp_path.rglob("*.json"))
        assert before == after


class TestLists:
    def test_contacts_alphabetical(self):
        snap = Snapshot(contacts=[contact("1", "zoe"), contact("2", "Bob"), contact("3", "alice")])
        assert [c.name for c in snap.list_contacts()] == ["alice", "Bob", "zoe"]

    def test_companies_alphabetical(self):
        snap = Snapshot(companies=[company("1", "Zeta"), company("2", "Acme")])
        assert [c.name for c in snap.list_companies()] == ["Acme", "Zeta"]

    def test_deals_grouped_by_configured_stage_order(self):
        snap = Snapshot(deals=[
            deal("1", "b", "proposal"),
            deal("2", "a", "proposal"),
            deal("3", "z", "lead"),
            deal("4", "c", "closed-won"),
        ])
        assert [d.id for d in snap.list_deals()] == ["3", "2", "1", "4"]

    def test_deals_with_stale_stage_come_last(self):
        snap = Snapshot(
            config=PipelineConfig(stages=["new", "won"]),
            deals=[deal("1", "a", "lead"), deal("2", "b", "won"), deal("3", "c", "new")],
        )
        assert [d.id for d in snap.list_deals()] == ["3", "2", "1"]

    def test_activities_newest_first(self):
        snap = Snapshot(activities=[
            activity("old", "2026-01-01"),
            activity("none", None),
            activity("new", "2026-03-01"),
        ])
        assert [a.id for a in snap.list_activities()] == ["new", "old", "none"]

    def test_tasks_pending_before_done(self):
        snap = Snapshot(tasks=[
            task("done", due="2026-01-01", done=True),
            task("pending", due="2026-06-01"),
        ])
        assert [t.id for t in snap.list_tasks()] == ["pending", "done"]

    def test_tasks_missing_due_sorts_first(self):
        snap = Snapshot(tasks=[task("later", due="2026-02-01"), task("nodue"),
                               task("sooner", due="2026-01-01")])
        assert [t.id for t in snap.list_tasks()] == ["nodue", "sooner", "later"]

    def test_tasks_same_due_newest_created_first(self):
        snap = Snapshot(tasks=[
            task("older", due="2026-02-01", created="2026-01-01T00:00:00.000Z"),
            task("newer", due="2026-02-01", created="2026-01-05T00:00:00.000Z"),
        ])
        assert [t.id for t in snap.list_tasks()] == ["newer", "older"]


class TestSearch:
    @pytest.fixture
    def snap(self) -> Snapshot:
        return Snapshot(
            contacts=[
                contact("1", "Ada Lovelace", email="ada@engine.io", role="Engineer"),
                contact("2", "Bob", email="bob@acme.com", role="Sales"),
            ],
            companies=[
                company("1", "Acme", domain="acme.com", industry="Anvils"),
                company("2", "Globex", domain="globex.io", industry="Energy"),
            ],
            deals=[
                deal("1", "Renewal", "proposal"),
                deal("2", "Expansion", "lead"),
            ],
        )

    def test_contacts_case_insensitive(self, snap: Snapshot):
        assert [c.id for c in snap.search_contacts("ADA")] == ["1"]

    def test_contacts_email_and_role(self, snap: Snapshot):
        assert [c.id for c in snap.search_contacts("acme.com")] == ["2"]
        assert [c.id for c in snap.search_contacts("engin")] == ["1"]

    def test_companies_domain_and_industry(self, snap: Snapshot):
        assert [c.id for c in snap.search_companies(".io")] == ["2"]
        assert [c.id for c in snap.search_companies("anvil")] == ["1"]

    def test_deals_title_and_stage(self, snap: Snapshot):
        assert [d.id for d in snap.search_deals("renew")] == ["1"]
        assert [d.id for d in snap.search_deals("LEAD")] == ["2"]

    def test_deals_sorted_by_title(self, snap: Snapshot):
        assert [d.title for d in snap.search_deals("n")] == ["Expansion", "Renewal"]

    def test_no_match(self, snap: Snapshot):
        assert snap.search_contacts("zzz") == []


class TestRelated:
    def test_company_contacts_and_deals(self):
        snap = Snapshot(
            contacts=[contact("1", "Ada", company="co"), contact("2", "Bob", company="other")],
            deals=[deal("1", "A", company="co"), deal("2", "B")],
        )
        assert [c.id for c in snap.company_contacts("co")] == ["1"]
        assert [d.id for d in snap.company_deals("co")] == ["1"]

    def test_contact_deals_by_membership(self):
        snap = Snapshot(deals=[
            deal("1", "A", contacts=["c1", "c2"]),
            deal("2", "B", contacts=["c10"]),
        ])
        assert [d.id for d in snap.contact_deals("c1")] == ["1"]

    def test_contact_activities_limited_to_ten_newest(self):
        acts = [activity(f"a{i:02d}", f"2026-01-{i:02d}", contact="c1") for i in range(1, 13)]
        acts.append(activity("other", "2026-02-01", contact="c2"))
        snap = Snapshot(activities=acts)
        result = snap.contact_activities("c1")
        assert len(result) == 10
        assert result[0].id == "a12"
        assert "other" not in [a.id for a in result]

    def test_deal_activities(self):
        snap = Snapshot(activities=[
            activity("1", "2026-01-01", deal="d1"),
            activity("2", "2026-01-02", deal="d1"),
            activity("3", "2026-01-03", deal="d2"),
        ])
        assert [a.id for a in snap.deal_activities("d1")] == ["2", "1"]
        assert len(snap.deal_activities("d1", limit=1)) == 1


class TestPipeline:
    def test_weighted_value(self):
        snap = Snapshot(deals=[
            deal("1", "a", "proposal", value=100, probability=50),
            deal("2", "b", "proposal", value=200, probability=50),
            deal("3", "c", "proposal"),
        ])
        summary = snap.pipeline()
        proposal = next(s for s in summary.stages if s.stage == "proposal")
        assert proposal.count == 3
        assert proposal.total == 300
        assert proposal.weighted == 150

    def test_every_configured_stage_in_order(self):
        summary = Snapshot().pipeline()
        assert [s.stage for s in summary.stages] == PipelineConfig().stages
        assert all(s.count == 0 for s in summary.stages)

    def test_totals(self):
        snap = Snapshot(deals=[
            deal("1", "a", "lead", value=10, probability=10),
            deal("2", "b", "negotiation", value=90, probability=100),
        ])
        data = snap.pipeline().to_dict()
        assert data["totalDeals"] == 2
        assert data["totalValue"] == 100
        assert data["totalWeighted"] == 91
        assert data["currency"] == "USD"

    def test_value_without_probability_not_weighted(self):
        snap = Snapshot(deals=[deal("1", "a", "lead", value=500)])
        lead = snap.pipeline().stages[0]
        assert lead.total == 500
        assert lead.weighted == 0

    def test_stale_stage_excluded(self):
        snap = Snapshot(
            config=PipelineConfig(stages=["new", "won"]),
            deals=[deal("1", "a", "lead", value=100), deal("2", "b", "won", value=5)],
        )
        summary = snap.pipeline()
        assert summary.total_deals == 1
        assert summary.total_value == 5
