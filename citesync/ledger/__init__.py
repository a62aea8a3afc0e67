"""Citation ledger and split computation."""

from citesync.ledger.ledger import (
    CitationLedger,
    check_note_sequence,
    expected_note_index,
    renumber,
)
from citesync.ledger.split import CitationSplit, compute_split


__all__ = [
    "CitationLedger",
    "CitationSplit",
    "check_note_sequence",
    "compute_split",
    "expected_note_index",
    "renumber",
]
