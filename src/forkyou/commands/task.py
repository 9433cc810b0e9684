"""task add | list | done | rm"""

from __future__ import annotations

import argparse

from forkyou.commands.base import Context, add_subcommand, get_or_fail, global_flags, require_text
from forkyou.errors import NotFoundError
from forkyou.models import Task, utc_now
from forkyou.query import Snapshot
from forkyou.resolve import resolve_optional
from forkyou.store import new_id


def cmd_add(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    title = require_text(args.title, "title")
    company = resolve_optional(store, args.company)

    now = utc_now()
    task = Task(
        id=new_id(),
        title=title,
        contact=args.contact,
        deal=args.deal,
        company=company,
        due=args.due,
        done=False,
        created=now,
        updated=now,
    )
    store.save(task)

    due = f" due {task.due}" if task.due else ""
    ctx.out.emit({"task": task.to_dict()}, f"Task added: {task.title} ({task.id}){due}")


def cmd_list(ctx: Context, args: argparse.Namespace) -> None:
    tasks = Snapshot.load(ctx.store).list_tasks()

    def human():
        if not tasks:
            return "No tasks yet"
        pending = [t for t in tasks if not t.done]
        completed = [t for t in tasks if t.done]
        lines = []
        for t in pending:
            due = f" due {t.due}" if t.due else ""
            lines.append(f"  ○ {t.title}{due}  {t.id}")
        if completed:
            lines.append("")
            for t in completed:
                lines.append(f"  ● {t.title}  {t.id}")
        lines.append(f"\n  {len(pending)} pending, {len(completed)} done")
        return lines

    ctx.out.emit({"tasks": [t.to_dict() for t in tasks]}, human)


def cmd_done(ctx: Context, args: argparse.Namespace) -> None:
    store = ctx.store
    task = get_or_fail(store, Task, "Task", args.id)
    finished = task.with_updates(done=True)
    store.save(finished)
    ctx.out.emit({"task": finished.to_dict()}, f"Task completed: {finished.title}")


def cmd_rm(ctx: Context, args: argparse.Namespace) -> None:
    if not ctx.store.delete(Task, args.id):
        raise NotFoundError("Task", args.id)
    ctx.out.emit({"id": args.id}, f"Task removed: {args.id}")


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("task", help="Manage follow-up tasks", parents=[global_flags()])
    actions = parser.add_subparsers(dest="action", metavar="ACTION", required=True)

    p_add = add_subcommand(actions, "add", cmd_add, "Add a task")
    p_add.add_argument("--title", help="Task title (required)")
    p_add.add_argument("--contact", metavar="ID", help="Contact ID")
    p_add.add_argument("--deal", metavar="ID", help="Deal ID")
    p_add.add_argument("--company", metavar="ID_OR_NAME", help="Company ID or name")
    p_add.add_argument("--due", metavar="DATE", help="Due date")

    add_subcommand(actions, "list", cmd_list, "List tasks, pending first")

    p_done = add_subcommand(actions, "done", cmd_done, "Mark a task as done")
    p_done.add_argument("id", help="Task ID")

    p_rm = add_subcommand(actions, "rm", cmd_rm, "Remove a task")
    p_rm.add_argument("id", help="Task ID")
