"""fork-you: a git-based CRM stored as JSON files in ``.forkyou/``.

Layout:
    src/forkyou/
    ├── models.py      # Record dataclasses and pipeline config
    ├── store.py       # One JSON file per record, root discovery, ids
    ├── query.py       # In-memory snapshot for list/search/show/pipeline
    ├── resolve.py     # Company id-or-name resolution
    ├── commands/      # argparse handlers, one module per entity
    └── cli.py         # Parser, output mode, top-level error handling
"""

__version__ = "0.3.0"
