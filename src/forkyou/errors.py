"""Error taxonomy shared by the store, resolver and command handlers.

Every error carries a machine-readable ``code`` and a ``context`` dict that is
merged into the ``{"success": false, ...}`` JSON envelope by the CLI.
"""

from __future__ import annotations

from typing import Any


class CRMError(Exception):
    """Base class for expected, user-facing failures (exit status 1)."""

    code = "error"

    def __init__(self, message: str, /, *, code: str | None = None, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context = context

    def payload(self) -> dict[str, Any]:
        return {"success": False, "error": self.code, **self.context}


class ValidationError(CRMError):
    """Missing required field or value outside an enumerated set."""

    code = "invalid"


class NotFoundError(CRMError):
    code = "not_found"

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} not found: {record_id}", id=record_id)


class NotInitializedError(CRMError):
    code = "not_initialized"

    def __init__(self) -> None:
        super().__init__("Not a fork-you project. Run: fork-you init")


class ResolveError(CRMError):
    """A company reference could not be turned into a single id."""


class CompanyNotFound(ResolveError):
    code = "company_not_found"

    def __init__(self, value: str) -> None:
        super().__init__(
            f'No company found matching "{value}". Run: fork-you company list',
            value=value,
        )


class AmbiguousCompany(ResolveError):
    code = "ambiguous_company"

    def __init__(self, value: str, matches: list[dict[str, str]]) -> None:
        listing = ", ".join(f"{m['name']} ({m['id']})" for m in matches)
        super().__init__(
            f'Multiple companies match "{value}": {listing}. Use an ID instead.',
            value=value,
            matches=matches,
        )
