"""Entry points driven by user and lifecycle events."""

from citesync.handlers.edit import EditOutcome, EditTransactionHandler
from citesync.handlers.recovery import RecoveryReport, recover_document


__all__ = [
    "EditOutcome",
    "EditTransactionHandler",
    "RecoveryReport",
    "recover_document",
]
