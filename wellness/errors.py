"""
Typed failures returned by ledger entry points.

Every failure is a ``ValueError`` so adapters that already treat
``ValueError`` as a client error keep working unchanged.
"""


class LedgerError(ValueError):
    """Base class for all entry-point failures."""
    kind = "LedgerError"


class Unauthorized(LedgerError):
    """Caller lacks the admin status or role the operation needs."""
    kind = "Unauthorized"


class NotFound(LedgerError):
    """Lookup on an absent key."""
    kind = "NotFound"


class InvalidArgument(LedgerError):
    """Input violates a bound (text too long, integer out of range, ...)."""
    kind = "InvalidArgument"


class AmountMismatch(LedgerError):
    """Payment amount disagrees with the recorded bill amount."""
    kind = "AmountMismatch"

    def __init__(self, service_id: str, expected: int, offered: int):
        super().__init__(
            f"Bill '{service_id}' is for {expected}, payment of {offered} rejected."
        )
        self.service_id = service_id
        self.expected = expected
        self.offered = offered
