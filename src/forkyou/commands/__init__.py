"""Command handlers, one module per entity.

Each module exposes ``register(subparsers)``; handlers take
``(Context, argparse.Namespace)`` and raise ``CRMError`` on expected failures.
"""

from forkyou.commands import activity, company, contact, deal, pipeline, project, task

MODULES = (project, contact, company, deal, activity, task, pipeline)
