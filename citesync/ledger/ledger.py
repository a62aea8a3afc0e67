"""Citation ledger - the ordered record of citations in a document.

The ledger holds one CitationRecord per citation marker, in document
order. It is the single source of truth consulted by the edit handler,
the engine client and the reconciler.

Invariants:
- one record per document marker
- non-empty citation IDs are unique
- in note mode, note numbers run 1..N by position; in in-text mode all are 0
- a record created by an unconfirmed edit may lack a citation ID

All mutation is whole-sequence replacement. Records go in and come out as
copies, so a record sent in an engine request can never be changed by a
later local edit.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from citesync.core.exceptions import LedgerInvariantError
from citesync.core.logging import get_logger
from citesync.schemas.citations import CitationMode, CitationRecord


logger = get_logger(__name__)


class CitationLedger:
    """Ordered, copy-on-read record of the document's citations.

    Example:
        >>> ledger = CitationLedger()
        >>> ledger.replace([CitationRecord(citation_id="a", citation_items=["item01"])])
        >>> ledger.find_by_id("a").item_ids
        ['item01']
        >>> ledger.find_by_id("missing") is None
        True
    """

    def __init__(self, records: Iterable[CitationRecord] | None = None) -> None:
        """Initialize the ledger, optionally with restored records.

        Args:
            records: Initial records in document order
        """
        self._records: tuple[CitationRecord, ...] = ()
        self._id_to_index: dict[str, int] = {}
        if records is not None:
            self.replace(records)

    def get(self) -> tuple[CitationRecord, ...]:
        """Return the records in document order (copies).

        Returns:
            Tuple of record copies; changing them does not affect the ledger
        """
        return tuple(record.model_copy(deep=True) for record in self._records)

    def replace(self, records: Iterable[CitationRecord]) -> None:
        """Atomically swap the whole sequence.

        Args:
            records: New records in document order

        Raises:
            LedgerInvariantError: If two records share a citation ID. The
                ledger keeps its previous contents in that case.
        """
        new_records = tuple(record.model_copy(deep=True) for record in records)
        id_to_index: dict[str, int] = {}
        for index, record in enumerate(new_records):
            if not record.citation_id:
                continue
            if record.citation_id in id_to_index:
                raise LedgerInvariantError(
                    f"Duplicate citation ID {record.citation_id!r} at positions "
                    f"{id_to_index[record.citation_id]} and {index}",
                    invariant="unique-id",
                )
            id_to_index[record.citation_id] = index

        self._records = new_records
        self._id_to_index = id_to_index
        logger.debug("Ledger replaced", length=len(new_records))

    def find_by_id(self, citation_id: str) -> CitationRecord | None:
        """Return a copy of the record with this ID, None if not found."""
        index = self._id_to_index.get(citation_id)
        if index is None:
            return None
        return self._records[index].model_copy(deep=True)

    def index_of(self, citation_id: str) -> int | None:
        """Return the position of the record with this ID, None if not found."""
        return self._id_to_index.get(citation_id)

    def citation_ids(self) -> list[str]:
        """Return the IDs of confirmed records in document order."""
        return [record.citation_id for record in self._records if record.citation_id]

    def clear(self) -> None:
        """Remove every record."""
        self.replace(())

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self.get())

    def __contains__(self, citation_id: object) -> bool:
        return citation_id in self._id_to_index

    def __repr__(self) -> str:
        return f"CitationLedger(length={len(self._records)}, ids={self.citation_ids()!r})"


def expected_note_index(position: int, mode: CitationMode) -> int:
    """Return the note number a record at ``position`` must carry."""
    return position + 1 if mode == CitationMode.NOTE else 0


def renumber(
    records: Sequence[CitationRecord],
    mode: CitationMode,
) -> list[CitationRecord]:
    """Force note numbers into positional sequence.

    Records without a citation ID are returned unchanged.

    Args:
        records: Records in document order
        mode: Active citation mode

    Returns:
        Copies whose note numbers match their position
    """
    result = []
    for position, record in enumerate(records):
        if record.citation_id:
            result.append(record.with_note_index(expected_note_index(position, mode)))
        else:
            result.append(record.model_copy(deep=True))
    return result


def check_note_sequence(
    records: Sequence[CitationRecord],
    mode: CitationMode,
) -> None:
    """Verify note numbers match positions.

    Raises:
        LedgerInvariantError: On the first out-of-sequence record
    """
    for position, record in enumerate(records):
        expected = expected_note_index(position, mode)
        if record.note_index != expected:
            raise LedgerInvariantError(
                f"Citation at position {position} has note index "
                f"{record.note_index}, expected {expected} in {mode.value} mode",
                invariant="note-sequence",
            )


__all__ = [
    "CitationLedger",
    "check_note_sequence",
    "expected_note_index",
    "renumber",
]
