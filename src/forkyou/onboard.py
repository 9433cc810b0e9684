"""Agent onboarding: append fork-you usage notes to CLAUDE.md or AGENTS.md."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

MARKER = "<fork-you>"

INSTRUCTIONS = """\
<fork-you>
Use `fork-you` for CRM operations. Data is stored in `.forkyou/` as JSON files (one per record), tracked by git.

<commands>
- `fork-you contact add --name <n> [--email <e>] [--phone <p>] [--company <id-or-name>] [--role <r>] [--custom k=v]`
- `fork-you contact list` / `fork-you contact show <id>` / `fork-you contact search <query>`
- `fork-you contact edit <id> --name <n> --email <e> ...`
- `fork-you contact rm <id>`
- `fork-you company add --name <n> [--domain <d>] [--industry <i>] [--size <s>]`
- `fork-you company list` / `fork-you company show <id>` / `fork-you company search <query>`
- `fork-you deal add --title <t> [--company <id-or-name>] [--contact <id>]... [--stage <s>] [--value <v>] [--probability <p>] [--close-date <d>]`
- `fork-you deal list` / `fork-you deal show <id>` / `fork-you deal search <query>`
- `fork-you deal move <id> <stage>`
- `fork-you activity add --type <call|email|meeting|note> --subject <s> [--body <b>] [--contact <id>] [--deal <id>] [--company <id-or-name>]`
- `fork-you activity list` / `fork-you activity show <id>`
- `fork-you task add --title <t> [--contact <id>] [--deal <id>] [--due <date>]`
- `fork-you task list` / `fork-you task done <id>`
- `fork-you pipeline` - Show pipeline summary
- `fork-you config stages` - Show/set pipeline stages
</commands>

<rules>
- ALWAYS use `--json` flag to get structured output for parsing
- IDs are short strings (e.g. "k7m2xq9a") - use them to link contacts, companies, deals
- `--company` also accepts an exact company name; use the ID when names are ambiguous
- When creating a deal, link it to a company and contacts by their IDs
- When logging activities, link them to the relevant contact and/or deal
- Pipeline stages default to: lead, qualified, proposal, negotiation, closed-won, closed-lost
- All data lives in `.forkyou/` and should be committed to git
</rules>
</fork-you>"""


def target_file(directory: Path) -> Path:
    """Existing CLAUDE.md, else existing AGENTS.md, else a new CLAUDE.md."""
    for name in ("CLAUDE.md", "AGENTS.md"):
        candidate = directory / name
        if candidate.exists():
            return candidate
    return directory / "CLAUDE.md"


def onboard(directory: Path) -> tuple[Path, bool]:
    """Add the instruction block once. Returns the file and whether it changed."""
    path = target_file(directory)
    existing = path.read_text(encoding="utf-8") if path.exists() else ""

    if MARKER in existing:
        return path, False

    if existing:
        content = f"{existing.rstrip()}\n\n{INSTRUCTIONS}\n"
    else:
        content = f"{INSTRUCTIONS}\n"
    path.write_text(content, encoding="utf-8")
    logger.info("Added fork-you instructions to %s", path)
    return path, True
