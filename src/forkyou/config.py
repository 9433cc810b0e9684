"""Tool settings loaded from environment variables and forkyou.toml.

These are settings of the command-line tool itself. The per-project pipeline
configuration (stages, currency) is CRM data and lives in
``.forkyou/config.json``, see ``forkyou.store``.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_CONFIG_FILENAME = "forkyou.toml"
_USER_CONFIG_DIR = Path.home() / ".config" / "forkyou"

_TRUTHY = {"1", "true", "yes", "on"}
_DEFAULT_RECENT_LIMIT = 10

logger = logging.getLogger(__name__)


@dataclass
class ToolConfig:
    """Top-level tool configuration."""

    log_level: str = "WARNING"
    json_output: bool = False
    recent_activity_limit: int = _DEFAULT_RECENT_LIMIT


def _flag(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def _positive_int(value: object, default: int) -> int:
    if value is None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = 0
    if isinstance(value, bool) or number < 1:
        logger.warning("Ignoring recent_activity_limit=%r, using %d", value, default)
        return default
    return number


def load_config(config_path: Path | None = None) -> ToolConfig:
    """Load configuration from environment variables and optional forkyou.toml.

    Priority: environment variables > forkyou.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.config/forkyou/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, _USER_CONFIG_DIR / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    output_data = file_data.get("output", {})

    return ToolConfig(
        log_level=os.getenv("FORKYOU_LOG_LEVEL", file_data.get("log_level", "WARNING")),
        json_output=_flag(os.getenv("FORKYOU_JSON", output_data.get("json", False))),
        recent_activity_limit=_positive_int(
            os.getenv("FORKYOU_RECENT_LIMIT", output_data.get("recent_activity_limit")),
            _DEFAULT_RECENT_LIMIT,
        ),
    )
