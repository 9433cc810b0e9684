"""activity add | list | show | rm"""

from __future__ import annotations

import argparse

from forkyou.commands.base import Context, add_subcommand, get_or_fail, global_flags, require_text
from forkyou.errors import NotFoundError, ValidationError
from forkyou.models import ACTIVITY_TYPES, Activity, utc_now
from forkyou.query import Snapshot
from forkyou.resolve import resolve_optional
from forkyou.store import new_id


def cmd_add(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    if args.type not in ACTIVITY_TYPES:
        raise ValidationError(
            f"Invalid type: {args.type}. Valid: {', '.join(ACTIVITY_TYPES)}",
            code="invalid_type",
            type=args.type,
            valid=list(ACTIVITY_TYPES),
        )
    subject = require_text(args.subject, "subject")
    company = resolve_optional(store, args.company)

    now = utc_now()
    activity = Activity(
        id=new_id(),
        type=args.type,
        subject=subject,
        body=args.body,
        contact=args.contact,
        deal=args.deal,
        company=company,
        date=args.date or now,
        created=now,
        updated=now,
    )
    store.save(activity)

    ctx.out.emit(
        {"activity": activity.to_dict()},
        f"Activity logged: {activity.type} - {activity.subject} ({activity.id})",
    )


def cmd_list(ctx: Context, args: argparse.Namespace) -> None:
    activities = Snapshot.load(ctx.store).list_activities()

    def human():
        if not activities:
            return "No activities yet"
        lines = []
        for a in activities:
            parts = [a.subject]
            if a.contact:
                parts.append(f"contact:{a.contact}")
            if a.deal:
                parts.append(f"deal:{a.deal}")
            date = (a.date or "")[:10].ljust(10)
            lines.append(f"  {date}  {a.type:<7}  {'  '.join(parts)}  {a.id}")
        lines.append(f"\n  {len(activities)} activity(ies)")
        return lines

    ctx.out.emit({"activities": [a.to_dict() for a in activities]}, human)


def cmd_show(ctx: Context, args: argparse.Namespace) -> None:
    activity = get_or_fail(ctx.store, Activity, "Activity", args.id)

    def human():
        lines = [
            "",
            f"  {activity.subject}  {activity.id}",
            f"  Type:    {activity.type}",
            f"  Date:    {activity.date or '-'}",
        ]
        if activity.body:
            lines.append(f"  Body:    {activity.body}")
        if activity.contact:
            lines.append(f"  Contact: {activity.contact}")
        if activity.deal:
            lines.append(f"  Deal:    {activity.deal}")
        if activity.company:
            lines.append(f"  Company: {activity.company}")
        lines.append("")
        return lines

    ctx.out.emit({"activity": activity.to_dict()}, human)


def cmd_rm(ctx: Context, args: argparse.Namespace) -> None:
    if not ctx.store.delete(Activity, args.id):
        raise NotFoundError("Activity", args.id)
    ctx.out.emit({"id": args.id}, f"Activity removed: {args.id}")


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("activity", help="Log calls, emails, meetings and notes",
                                   parents=[global_flags()])
    actions = parser.add_subparsers(dest="action", metavar="ACTION", required=True)

    p_add = add_subcommand(actions, "add", cmd_add, "Log an activity")
    p_add.add_argument("--type", help=f"Activity type ({', '.join(ACTIVITY_TYPES)})")
    p_add.add_argument("--subject", help="Subject line (required)")
    p_add.add_argument("--body", help="Body / notes")
    p_add.add_argument("--contact", metavar="ID", help="Contact ID")
    p_add.add_argument("--deal", metavar="ID", help="Deal ID")
    p_add.add_argument("--company", metavar="ID_OR_NAME", help="Company ID or name")
    p_add.add_argument("--date", help="Activity date (ISO, default: now)")

    add_subcommand(actions, "list", cmd_list, "List activities, newest first")

    p_show = add_subcommand(actions, "show", cmd_show, "Show an activity")
    p_show.add_argument("id", help="Activity ID")

    p_rm = add_subcommand(actions, "rm", cmd_rm, "Remove an activity")
    p_rm.add_argument("id", help="Activity ID")
