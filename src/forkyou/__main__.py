"""Entry point: fork-you / fu / python -m forkyou"""

from __future__ import annotations

import logging
import sys

from forkyou.cli import run
from forkyou.config import load_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def main() -> None:
    config = load_config()
    _setup_logging(config.log_level)
    sys.exit(run(sys.argv[1:], config=config))


if __name__ == "__main__":
    main()
