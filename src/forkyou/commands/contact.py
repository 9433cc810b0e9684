"""contact add | list | show | edit | rm | search"""

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
from forkyou.models import Activity, Contact, Deal, utc_now
from forkyou.output import money
from forkyou.query import Snapshot
from forkyou.resolve import resolve_optional
from forkyou.store import new_id


def _summary_line(c: Contact) -> str:
    parts = [c.name]
    if c.email:
        parts.append(c.email)
    if c.role:
        parts.append(f"({c.role})")
    return f"  {c.id}  {'  '.join(parts)}"


def _deal_brief(d: Deal) -> dict:
    return {"id": d.id, "title": d.title, "stage": d.stage, "value": d.value}


def _activity_brief(a: Activity) -> dict:
    return {"id": a.id, "type": a.type, "subject": a.subject, "date": a.date}


def cmd_add(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    name = require_text(args.name, "name")
    custom = parse_custom(args.custom)
    company = resolve_optional(store, args.company)

    now = utc_now()
    contact = Contact(
        id=new_id(),
        name=name,
        email=args.email,
        phone=args.phone,
        company=company,
        role=args.role,
        custom=custom,
        created=now,
        updated=now,
    )
    store.save(contact)

    ctx.out.emit(
        {"contact": contact.to_dict()},
        f"Contact added: {contact.name} ({contact.id})",
    )


def cmd_list(ctx: Context, args: argparse.Namespace) -> None:
    contacts = Snapshot.load(ctx.store).list_contacts()

    def human():
        if not contacts:
            return "No contacts yet"
        return [_summary_line(c) for c in contacts] + [f"\n  {len(contacts)} contact(s)"]

    ctx.out.emit({"contacts": [c.to_dict() for c in contacts]}, human)


def cmd_show(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    contact = get_or_fail(store, Contact, "Contact", args.id)
    snapshot = Snapshot.load(store)
    deals = snapshot.contact_deals(contact.id)
    activities = snapshot.contact_activities(contact.id, ctx.settings.recent_activity_limit)

    def human():
        lines = ["", f"  {contact.name}  {contact.id}"]
        if contact.email:
            lines.append(f"  Email:   {contact.email}")
        if contact.phone:
            lines.append(f"  Phone:   {contact.phone}")
        if contact.role:
            lines.append(f"  Role:    {contact.role}")
        if contact.company:
            lines.append(f"  Company: {contact.company}")
        for key, value in (contact.custom or {}).items():
            lines.append(f"  {key}: {value}")
        if deals:
            lines.append("\n  Deals")
            for d in deals:
                value = f"  ${money(d.value)}" if d.value else ""
                lines.append(f"    {d.id}  {d.title}  {d.stage}{value}")
        if activities:
            lines.append("\n  Recent Activity")
            for a in activities:
                lines.append(f"    {a.date or '-'}  {a.type}  {a.subject}")
        lines.append("")
        return lines

    ctx.out.emit(
        {
            "contact": contact.to_dict(),
            "deals": [_deal_brief(d) for d in deals],
            "activities": [_activity_brief(a) for a in activities],
        },
        human,
    )


def cmd_edit(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    contact = get_or_fail(store, Contact, "Contact", args.id)
    if args.name is not None:
        require_text(args.name, "name")

    updated = contact.with_updates(
        name=args.name,
        email=args.email,
        phone=args.phone,
        company=resolve_optional(store, args.company),
        role=args.role,
        custom=merge_custom(contact.custom, args.custom),
    )
    store.save(updated)

    ctx.out.emit(
        {"contact": updated.to_dict()},
        f"Contact updated: {updated.name} ({updated.id})",
    )


def cmd_rm(ctx: Context, args: argparse.Namespace) -> None:
    if not ctx.store.delete(Contact, args.id):
        raise NotFoundError("Contact", args.id)
    ctx.out.emit({"id": args.id}, f"Contact removed: {args.id}")


def cmd_search(ctx: Context, args: argparse.Namespace) -> None:
    results = Snapshot.load(ctx.store).search_contacts(args.query)

    def human():
        if not results:
            return f'No contacts matching "{args.query}"'
        return [_summary_line(c) for c in results] + [f"\n  {len(results)} result(s)"]

    ctx.out.emit({"query": args.query, "results": [c.to_dict() for c in results]}, human)


def _add_fields(parser: argparse.ArgumentParser, *, required: bool) -> None:
    parser.add_argument("--name", help="Contact name (required)" if required else "Contact name")
    parser.add_argument("--email", help="Email address")
    parser.add_argument("--phone", help="Phone number")
    parser.add_argument("--company", metavar="ID_OR_NAME", help="Company ID or name")
    parser.add_argument("--role", help="Role / job title")
    add_custom_option(parser)


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("contact", help="Manage contacts", parents=[global_flags()])
    actions = parser.add_subparsers(dest="action", metavar="ACTION", required=True)

    p_add = add_subcommand(actions, "add", cmd_add, "Add a contact")
    _add_fields(p_add, required=True)

    add_subcommand(actions, "list", cmd_list, "List contacts")

    p_show = add_subcommand(actions, "show", cmd_show, "Show a contact with deals and activity")
    p_show.add_argument("id", help="Contact ID")

    p_edit = add_subcommand(actions, "edit", cmd_edit, "Edit a contact")
    p_edit.add_argument("id", help="Contact ID")
    _add_fields(p_edit, required=False)

    p_rm = add_subcommand(actions, "rm", cmd_rm, "Remove a contact")
    p_rm.add_argument("id", help="Contact ID")

    p_search = add_subcommand(actions, "search", cmd_search, "Search name, email and role")
    p_search.add_argument("query", help="Search query")
