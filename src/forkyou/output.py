"""Output modes: JSON envelope, human-readable text, or quiet."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from forkyou.errors import CRMError

HumanText = str | Iterable[str] | Callable[[], "str | Iterable[str]"]


def money(value: float | int | None) -> str:
    """Thousands-separated amount: 1234 -> '1,234', 1234.5 -> '1,234.50'."""
    if not value:
        return "0"
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def _dumps(data: dict[str, Any]) -> str:
    # NaN/Infinity are not JSON; fail instead of printing them.
    return json.dumps(data, indent=2, ensure_ascii=False, allow_nan=False)


def number(value: float | int) -> float | int:
    """Integral floats become ints so JSON files read 100 rather than 100.0."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


@dataclass
class Output:
    """Where and how a command reports its result."""

    json: bool = False
    quiet: bool = False

    def emit(self, payload: dict[str, Any], human: HumanText = "") -> None:
        """Report success: the payload as JSON, or the human text."""
        if self.json:
            print(_dumps({"success": True, **payload}))
            return
        if self.quiet:
            return
        if callable(human):
            human = human()
        if isinstance(human, str):
            if human:
                print(human)
            return
        for line in human:
            print(line)

    def fail(self, error: CRMError) -> None:
        """Report an expected failure. Errors are shown even in quiet mode."""
        if self.json:
            print(_dumps(error.payload()))
        else:
            print(f"Error: {error.message}", file=sys.stderr)
