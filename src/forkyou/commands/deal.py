"""deal add | list | show | edit | move | rm | search"""

from __future__ import annotations

import argparse
import logging

from forkyou.commands.base import (
    Context,
    add_custom_option,
    add_subcommand,
    check_finite,
    check_probability,
    check_stage,
    get_or_fail,
    global_flags,
    merge_custom,
    parse_custom,
    require_text,
)
from forkyou.errors import NotFoundError
from forkyou.models import Deal, utc_now
from forkyou.output import money, number
from forkyou.query import Snapshot
from forkyou.resolve import resolve_optional
from forkyou.store import new_id

logger = logging.getLogger(__name__)


def _value_suffix(d: Deal) -> str:
    return f"  ${money(d.value)}" if d.value else ""


def _optional_number(value: float | None) -> float | int | None:
    return number(value) if value is not None else None


def cmd_add(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    config = store.read_config()
    title = require_text(args.title, "title")
    stage = check_stage(config, args.stage or config.stages[0])
    value = check_finite(args.value, "value")
    probability = check_probability(args.probability)
    custom = parse_custom(args.custom)
    company = resolve_optional(store, args.company)

    now = utc_now()
    deal = Deal(
        id=new_id(),
        title=title,
        company=company,
        contacts=list(args.contact or []),
        stage=stage,
        value=_optional_number(value),
        currency=args.currency or config.currency,
        probability=_optional_number(probability),
        close_date=args.close_date,
        custom=custom,
        created=now,
        updated=now,
    )
    store.save(deal)

    ctx.out.emit(
        {"deal": deal.to_dict()},
        f"Deal added: {deal.title} ({deal.id}) [{deal.stage}]",
    )


def cmd_list(ctx: Context, args: argparse.Namespace) -> None:
    snapshot = Snapshot.load(ctx.store)
    deals = snapshot.list_deals()

    def human():
        if not deals:
            return "No deals yet"
        lines = []
        groups: dict[str, list[Deal]] = {}
        for d in deals:
            groups.setdefault(d.stage, []).append(d)
        for stage, stage_deals in groups.items():
            total = sum(d.value or 0 for d in stage_deals)
            header = f"\n  {stage}"
            if total > 0:
                header += f"  ${money(total)}"
            if stage not in snapshot.config.stages:
                header += "  (not a configured stage)"
            lines.append(header)
            for d in stage_deals:
                lines.append(f"    {d.id}  {d.title}{_value_suffix(d)}")
        lines.append(f"\n  {len(deals)} deal(s)")
        return lines

    ctx.out.emit({"deals": [d.to_dict() for d in deals]}, human)


def cmd_show(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    deal = get_or_fail(store, Deal, "Deal", args.id)
    activities = Snapshot.load(store).deal_activities(deal.id, ctx.settings.recent_activity_limit)

    def human():
        lines = ["", f"  {deal.title}  {deal.id}", f"  Stage:       {deal.stage}"]
        if deal.value:
            lines.append(f"  Value:       ${money(deal.value)} {deal.currency or ''}".rstrip())
        if deal.probability is not None:
            lines.append(f"  Probability: {deal.probability}%")
        if deal.close_date:
            lines.append(f"  Close date:  {deal.close_date}")
        if deal.company:
            lines.append(f"  Company:     {deal.company}")
        if deal.contacts:
            lines.append(f"  Contacts:    {', '.join(deal.contacts)}")
        for key, value in (deal.custom or {}).items():
            lines.append(f"  {key}: {value}")
        if activities:
            lines.append("\n  Recent Activity")
            for a in activities:
                lines.append(f"    {a.date or '-'}  {a.type}  {a.subject}")
        lines.append("")
        return lines

    ctx.out.emit(
        {
            "deal": deal.to_dict(),
            "activities": [
                {"id": a.id, "type": a.type, "subject": a.subject, "date": a.date}
                for a in activities
            ],
        },
        human,
    )


def cmd_edit(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    deal = get_or_fail(store, Deal, "Deal", args.id)
    if args.title is not None:
        require_text(args.title, "title")
    if args.stage is not None:
        check_stage(store.read_config(), args.stage)
    check_finite(args.value, "value")
    check_probability(args.probability)

    updated = deal.with_updates(
        title=args.title,
        company=resolve_optional(store, args.company),
        contacts=list(args.contact) if args.contact else None,
        stage=args.stage,
        value=_optional_number(args.value),
        currency=args.currency,
        probability=_optional_number(args.probability),
        close_date=args.close_date,
        custom=merge_custom(deal.custom, args.custom),
    )
    store.save(updated)

    ctx.out.emit(
        {"deal": updated.to_dict()},
        f"Deal updated: {updated.title} ({updated.id})",
    )


def cmd_move(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    deal = get_or_fail(store, Deal, "Deal", args.id)
    stage = check_stage(store.read_config(), args.stage)

    previous = deal.stage
    moved = deal.with_updates(stage=stage)
    store.save(moved)
    logger.info("Moved deal %s: %s -> %s", deal.id, previous, stage)

    ctx.out.emit(
        {"deal": moved.to_dict(), "previousStage": previous},
        f"{moved.title}: {previous} → {stage}",
    )


def cmd_rm(ctx: Context, args: argparse.Namespace) -> None:
    if not ctx.store.delete(Deal, args.id):
        raise NotFoundError("Deal", args.id)
    ctx.out.emit({"id": args.id}, f"Deal removed: {args.id}")


def cmd_search(ctx: Context, args: argparse.Namespace) -> None:
    results = Snapshot.load(ctx.store).search_deals(args.query)

    def human():
        if not results:
            return f'No deals matching "{args.query}"'
        lines = [f"  {d.id}  {d.title}  {d.stage}{_value_suffix(d)}" for d in results]
        lines.append(f"\n  {len(results)} result(s)")
        return lines

    ctx.out.emit({"query": args.query, "results": [d.to_dict() for d in results]}, human)


def _add_fields(parser: argparse.ArgumentParser, *, required: bool) -> None:
    parser.add_argument("--title", help="Deal title (required)" if required else "Deal title")
    parser.add_argument("--company", metavar="ID_OR_NAME", help="Company ID or name")
    parser.add_argument("--contact", action="append", metavar="ID",
                        help="Contact ID (repeatable)")
    parser.add_argument("--stage", help="Pipeline stage")
    parser.add_argument("--value", type=float, help="Deal value")
    parser.add_argument("--currency", help="Currency code")
    parser.add_argument("--probability", type=float, metavar="PCT", help="Win probability %%")
    parser.add_argument("--close-date", dest="close_date", metavar="DATE",
                        help="Expected close date")
    add_custom_option(parser)


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("deal", help="Manage deals", parents=[global_flags()])
    actions = parser.add_subparsers(dest="action", metavar="ACTION", required=True)

    p_add = add_subcommand(actions, "add", cmd_add, "Add a deal")
    _add_fields(p_add, required=True)

    add_subcommand(actions, "list", cmd_list, "List deals grouped by stage")

    p_show = add_subcommand(actions, "show", cmd_show, "Show a deal with recent activity")
    p_show.add_argument("id", help="Deal ID")

    p_edit = add_subcommand(actions, "edit", cmd_edit, "Edit a deal")
    p_edit.add_argument("id", help="Deal ID")
    _add_fields(p_edit, required=False)

    p_move = add_subcommand(actions, "move", cmd_move, "Move a deal to another stage")
    p_move.add_argument("id", help="Deal ID")
    p_move.add_argument("stage", help="Target stage")

    p_rm = add_subcommand(actions, "rm", cmd_rm, "Remove a deal")
    p_rm.add_argument("id", help="Deal ID")

    p_search = add_subcommand(actions, "search", cmd_search, "Search title and stage")
    p_search.add_argument("query", help="Search query")
