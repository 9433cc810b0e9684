"""Company references: accept either an id or a display name."""

from __future__ import annotations

import logging

from forkyou.errors import AmbiguousCompany, CompanyNotFound
from forkyou.models import Company
from forkyou.store import RecordStore

logger = logging.getLogger(__name__)


def resolve_company_id(store: RecordStore, value: str) -> str:
    """Map a company id or name to the canonical id.

    An existing id always wins, even when another company happens to be
    named the same. Otherwise the name must match exactly one company,
    ignoring case.
    """
    if store.read_one(Company.collection, value) is not None:
        return value

    wanted = value.casefold()
    matches = [c for c in store.load_all(Company) if c.name.casefold() == wanted]

    if len(matches) == 1:
        logger.debug("Resolved company %r -> %s", value, matches[0].id)
        return matches[0].id
    if not matches:
        raise CompanyNotFound(value)
    raise AmbiguousCompany(value, [{"id": c.id, "name": c.name} for c in matches])


def resolve_optional(store: RecordStore, value: str | None) -> str | None:
    return resolve_company_id(store, value) if value else None
