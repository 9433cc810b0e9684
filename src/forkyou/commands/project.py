"""init, onboard"""

from __future__ import annotations

import argparse

from forkyou.commands.base import Context, add_subcommand
from forkyou.onboard import onboard
from forkyou.store import RecordStore


def cmd_init(ctx: Context, args: argparse.Namespace) -> None:
    store, created = RecordStore.initialize(ctx.cwd)
    path = str(store.root)
    if not created:
        ctx.out.emit({"message": "already initialized", "path": path}, "Already initialized")
        return
    ctx.out.emit({"path": path}, f"Initialized fork-you in {path}")


def cmd_onboard(ctx: Context, args: argparse.Namespace) -> None:
    path, changed = onboard(ctx.cwd)
    if not changed:
        ctx.out.emit(
            {"file": str(path), "message": "already_onboarded"},
            f"Already onboarded ({path})",
        )
        return
    ctx.out.emit({"file": str(path)}, f"Added fork-you instructions to {path}")


def register(subparsers: argparse._SubParsersAction) -> None:
    add_subcommand(subparsers, "init", cmd_init, "Create .forkyou/ in the current directory")
    add_subcommand(subparsers, "onboard", cmd_onboard,
                   "Add agent instructions to CLAUDE.md or AGENTS.md")
