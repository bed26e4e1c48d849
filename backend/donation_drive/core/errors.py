"""
Domain errors for the campaign ledger and notification dispatch.

Validation and not-found errors abort the operation and reach the caller.
Duplicate transactions and per-recipient send failures are expected in
normal operation and are folded into structured results by the services.
"""
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from donation_drive.models.donation import DonationEntry


class LedgerError(Exception):
    """Base class for errors raised by the donation drive services."""
    status_code: int = 500

    def __init__(self, message: str, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.detail = detail if detail is not None else message


class ValidationError(LedgerError):
    """Malformed or missing input, rejected before touching the ledger."""
    status_code = 422


class NotFoundError(LedgerError):
    """A referenced campaign or entry does not exist."""
    status_code = 404


class DuplicateTransactionError(LedgerError):
    """The external transaction id has already been recorded."""
    status_code = 409

    def __init__(self, external_transaction_id: str, existing: Optional["DonationEntry"] = None):
        super().__init__(f"Transaction {external_transaction_id} has already been recorded")
        self.external_transaction_id = external_transaction_id
        self.existing = existing


class ConfigurationError(LedgerError):
    """A required collaborator (email, payments) is not configured."""
    status_code = 503


class RecipientDispatchError(LedgerError):
    """A single notification send failed. Recorded in the batch result."""

    def __init__(self, recipient: str, reason: str):
        super().__init__(f"Failed to notify {recipient}: {reason}")
        self.recipient = recipient
        self.reason = reason
