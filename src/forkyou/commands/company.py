"""company add | list | show | edit | rm | search"""

from __future__ import annotations

import argparse

from forkyou.commands.base import (
    Context,
    add_custom_option,
    add_subcommand,
    get_or_fail,
    global_flags,
    merge_custom,
    parse_custom,
    require_text,
)
from forkyou.errors import NotFoundError
from forkyou.models import Company, utc_now
from forkyou.output import money
from forkyou.query import Snapshot
from forkyou.store import new_id


def _summary_line(c: Company) -> str:
    parts = [c.name]
    if c.domain:
        parts.append(c.domain)
    if c.industry:
        parts.append(f"({c.industry})")
    return f"  {c.id}  {'  '.join(parts)}"


def cmd_add(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    name = require_text(args.name, "name")

    now = utc_now()
    company = Company(
        id=new_id(),
        name=name,
        domain=args.domain,
        industry=args.industry,
        size=args.size,
        custom=parse_custom(args.custom),
        created=now,
        updated=now,
    )
    store.save(company)

    ctx.out.emit(
        {"company": company.to_dict()},
        f"Company added: {company.name} ({company.id})",
    )


def cmd_list(ctx: Context, args: argparse.Namespace) -> None:
    companies = Snapshot.load(ctx.store).list_companies()

    def human():
        if not companies:
            return "No companies yet"
        return [_summary_line(c) for c in companies] + [f"\n  {len(companies)} company(ies)"]

    ctx.out.emit({"companies": [c.to_dict() for c in companies]}, human)


def cmd_show(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    company = get_or_fail(store, Company, "Company", args.id)
    snapshot = Snapshot.load(store)
    contacts = snapshot.company_contacts(company.id)
    deals = snapshot.company_deals(company.id)

    def human():
        lines = ["", f"  {company.name}  {company.id}"]
        if company.domain:
            lines.append(f"  Domain:   {company.domain}")
        if company.industry:
            lines.append(f"  Industry: {company.industry}")
        if company.size:
            lines.append(f"  Size:     {company.size}")
        for key, value in (company.custom or {}).items():
            lines.append(f"  {key}: {value}")
        if contacts:
            lines.append("\n  Contacts")
            for c in contacts:
                role = f"  ({c.role})" if c.role else ""
                lines.append(f"    {c.id}  {c.name}{role}")
        if deals:
            lines.append("\n  Deals")
            for d in deals:
                value = f"  ${money(d.value)}" if d.value else ""
                lines.append(f"    {d.id}  {d.title}  {d.stage}{value}")
        lines.append("")
        return lines

    ctx.out.emit(
        {
            "company": company.to_dict(),
            "contacts": [
                {"id": c.id, "name": c.name, "email": c.email, "role": c.role} for c in contacts
            ],
            "deals": [
                {"id": d.id, "title": d.title, "stage": d.stage, "value": d.value} for d in deals
            ],
        },
        human,
    )


def cmd_edit(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    company = get_or_fail(store, Company, "Company", args.id)
    if args.name is not None:
        require_text(args.name, "name")

    updated = company.with_updates(
        name=args.name,
        domain=args.domain,
        industry=args.industry,
        size=args.size,
        custom=merge_custom(company.custom, args.custom),
    )
    store.save(updated)

    ctx.out.emit(
        {"company": updated.to_dict()},
        f"Company updated: {updated.name} ({updated.id})",
    )


def cmd_rm(ctx: Context, args: argparse.Namespace) -> None:
    if not ctx.store.delete(Company, args.id):
        raise NotFoundError("Company", args.id)
    ctx.out.emit({"id": args.id}, f"Company removed: {args.id}")


def cmd_search(ctx: Context, args: argparse.Namespace) -> None:
    results = Snapshot.load(ctx.store).search_companies(args.query)

    def human():
        if not results:
            return f'No companies matching "{args.query}"'
        return [_summary_line(c) for c in results] + [f"\n  {len(results)} result(s)"]

    ctx.out.emit({"query": args.query, "results": [c.to_dict() for c in results]}, human)


def _add_fields(parser: argparse.ArgumentParser, *, required: bool) -> None:
    parser.add_argument("--name", help="Company name (required)" if required else "Company name")
    parser.add_argument("--domain", help="Website domain")
    parser.add_argument("--industry", help="Industry")
    parser.add_argument("--size", help="Company size")
    add_custom_option(parser)


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("company", help="Manage companies", parents=[global_flags()])
    actions = parser.add_subparsers(dest="action", metavar="ACTION", required=True)

    p_add = add_subcommand(actions, "add", cmd_add, "Add a company")
    _add_fields(p_add, required=True)

    add_subcommand(actions, "list", cmd_list, "List companies")

    p_show = add_subcommand(actions, "show", cmd_show, "Show a company with contacts and deals")
    p_show.add_argument("id", help="Company ID")

    p_edit = add_subcommand(actions, "edit", cmd_edit, "Edit a company")
    p_edit.add_argument("id", help="Company ID")
    _add_fields(p_edit, required=False)

    p_rm = add_subcommand(actions, "rm", cmd_rm, "Remove a company")
    p_rm.add_argument("id", help="Company ID")

    p_search = add_subcommand(actions, "search", cmd_search, "Search name, domain and industry")
    p_search.add_argument("query", help="Search query")
