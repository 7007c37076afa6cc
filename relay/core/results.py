"""Tagged outcome for calls to external collaborators.

The history store, the completion API and the automation webhooks all report
back through a CallResult so the agent can branch on ``ok`` instead of
catching exceptions from three different client libraries.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class CallResult:
    """Outcome of one external call.

    Attributes:
        ok: Whether the call succeeded.
        value: Payload returned by the collaborator on success.
        error: Human-readable failure description, None on success.
        status_code: HTTP status when the failure came from a response.
    """
    ok: bool
    value: Any = None
    error: str | None = None
    status_code: int | None = None

    @classmethod
    def success(cls, value: Any = None) -> "CallResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str, status_code: int | None = None) -> "CallResult":
        return cls(ok=False, error=error, status_code=status_code)
