"""Shared plumbing for command handlers."""

from __future__ import annotations

import argparse
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from forkyou.config import ToolConfig
from forkyou.errors import NotFoundError, NotInitializedError, ValidationError
from forkyou.models import PipelineConfig, Record
from forkyou.output import Output
from forkyou.store import RecordStore, find_root

R = TypeVar("R", bound=Record)

Handler = Callable[["Context", argparse.Namespace], None]


@dataclass
class Context:
    """Per-invocation state handed to every handler.

    The project root is looked up once, on first access to ``store``.
    """

    cwd: Path
    out: Output = field(default_factory=Output)
    settings: ToolConfig = field(default_factory=ToolConfig)
    _store: RecordStore | None = None

    @property
    def store(self) -> RecordStore:
        if self._store is None:
            root = find_root(self.cwd)
            if root is None:
                raise NotInitializedError()
            self._store = RecordStore(root)
        return self._store


def global_flags() -> argparse.ArgumentParser:
    """Parent parser so --json/-q work after the subcommand too."""
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument("--json", action="store_true", default=argparse.SUPPRESS,
                        help="Output as JSON")
    parent.add_argument("-q", "--quiet", action="store_true", default=argparse.SUPPRESS,
                        help="Suppress output")
    return parent


def add_subcommand(
    subparsers: argparse._SubParsersAction, name: str, handler: Handler, help: str
) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(name, help=help, parents=[global_flags()])
    parser.set_defaults(func=handler)
    return parser


def get_or_fail(store: RecordStore, kind: type[R], label: str, record_id: str) -> R:
    record = store.load(kind, record_id)
    if record is None:
        raise NotFoundError(label, record_id)
    return record


def require_text(value: str | None, field_name: str) -> str:
    """Reject blank required fields with a ``missing_<field>`` code."""
    if value is None or not value.strip():
        raise ValidationError(f"--{field_name} is required", code=f"missing_{field_name}")
    return value


def check_stage(config: PipelineConfig, stage: str) -> str:
    if stage not in config.stages:
        raise ValidationError(
            f"Invalid stage: {stage}. Valid: {', '.join(config.stages)}",
            code="invalid_stage",
            stage=stage,
            valid=list(config.stages),
        )
    return stage


def check_finite(value: float | None, field_name: str) -> float | None:
    """Reject nan/inf, which argparse's ``float`` accepts but JSON cannot hold."""
    if value is not None and not math.isfinite(value):
        raise ValidationError(
            f"Invalid {field_name}: {value}. Must be a finite number",
            code=f"invalid_{field_name}",
            **{field_name: str(value)},
        )
    return value


def check_probability(probability: float | None) -> float | None:
    check_finite(probability, "probability")
    if probability is not None and not 0 <= probability <= 100:
        raise ValidationError(
            f"Invalid probability: {probability}. Must be between 0 and 100",
            code="invalid_probability",
            probability=probability,
        )
    return probability


def parse_custom(entries: list[str] | None) -> dict[str, str] | None:
    """Turn repeated ``--custom key=value`` options into a dict (None if none given)."""
    if not entries:
        return None
    custom: dict[str, str] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key.strip():
            raise ValidationError(
                f"Invalid custom field: {entry!r}. Use key=value",
                code="invalid_custom",
                value=entry,
            )
        custom[key.strip()] = value
    return custom


def merge_custom(existing: dict[str, str] | None, entries: list[str] | None) -> dict[str, str] | None:
    """New custom values layered over the existing map; None when nothing was given."""
    update = parse_custom(entries)
    if update is None:
        return None
    return {**(existing or {}), **update}


def add_custom_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--custom", action="append", metavar="KEY=VALUE",
                        help="Custom field (repeatable)")
