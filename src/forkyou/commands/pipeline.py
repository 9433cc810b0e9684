"""pipeline, config stages"""

from __future__ import annotations

import argparse

from forkyou.commands.base import Context, add_subcommand, global_flags
from forkyou.errors import ValidationError
from forkyou.output import money
from forkyou.query import Snapshot

MIN_STAGES = 2


def cmd_pipeline(ctx: Context, args: argparse.Namespace) -> None:
    summary = Snapshot.load(ctx.store).pipeline()

    def human():
        if summary.total_deals == 0:
            return "No deals in pipeline"
        lines = ["", "  Pipeline", ""]
        for s in summary.stages:
            if s.count == 0:
                lines.append(f"  {s.stage:<16}  —")
                continue
            bar = "█" * max(1, s.count * 2)
            line = f"  {s.stage:<16}  {bar} {s.count} deal(s)  ${money(s.total)}"
            if s.weighted > 0:
                line += f"  weighted: ${money(round(s.weighted))}"
            lines.append(line)
        total = f"  Total: {summary.total_deals} deal(s)  ${money(summary.total_value)}"
        if summary.total_weighted > 0:
            total += f"  weighted: ${money(round(summary.total_weighted))}"
        lines += ["", total, ""]
        return lines

    ctx.out.emit(summary.to_dict(), human)


def cmd_stages(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    config = store.read_config()

    if args.set is None:
        ctx.out.emit(
            {"stages": config.stages},
            ["", "  Pipeline Stages", ""]
            + [f"  {i}. {stage}" for i, stage in enumerate(config.stages, 1)]
            + [""],
        )
        return

    stages = [s.strip() for s in args.set.split(",") if s.strip()]
    duplicates = sorted({s for s in stages if stages.count(s) > 1})
    if duplicates:
        raise ValidationError(
            f"Duplicate stage: {', '.join(duplicates)}",
            code="duplicate_stage",
            stages=duplicates,
        )
    if len(stages) < MIN_STAGES:
        raise ValidationError(f"At least {MIN_STAGES} stages required", code="too_few_stages")

    config.stages = stages
    store.write_config(config)
    ctx.out.emit({"stages": config.stages}, f"Stages updated: {' → '.join(stages)}")


def register(subparsers: argparse._SubParsersAction) -> None:
    add_subcommand(subparsers, "pipeline", cmd_pipeline, "Show pipeline summary")

    parser = subparsers.add_parser("config", help="Project configuration", parents=[global_flags()])
    actions = parser.add_subparsers(dest="action", metavar="ACTION", required=True)
    p_stages = add_subcommand(actions, "stages", cmd_stages, "Show or set pipeline stages")
    p_stages.add_argument("--set", metavar="S1,S2,...", help="Replace the stage list")
