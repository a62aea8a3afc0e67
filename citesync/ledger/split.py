"""Split computation - partition the ledger around an edit point.

The formatting engine positions a citation by the identity and note
number of the citations around it, so a registration carries:

- target: the citation being registered
- before: (citationID, noteIndex) pairs of citations preceding it
- after: (citationID, noteIndex) pairs of citations following it
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from citesync.core.exceptions import CitationValidationError
from citesync.schemas.citations import CitationRecord, ContextEntry


@dataclass(frozen=True)
class CitationSplit:
    """Result of compute_split.

    Attributes:
        target: Copy of the record at the edit point, None for a fresh insertion
        before: Context pairs for preceding citations, in document order
        after: Context pairs for following citations, in document order
    """

    target: CitationRecord | None
    before: list[ContextEntry] = field(default_factory=list)
    after: list[ContextEntry] = field(default_factory=list)


def compute_split(
    records: Sequence[CitationRecord],
    edit_position: int | None = None,
    *,
    inserted: bool = False,
) -> CitationSplit:
    """Partition records around an edit position.

    Without an edit position the first record is the target and every
    other record follows it. This re-anchors the engine after a deletion.

    With an edit position, the document has ``len(records) + inserted``
    markers. A freshly inserted marker has no record, so every marker after
    it maps to the record one index lower.

    Args:
        records: Ledger records in document order
        edit_position: Document index of the marker under edit
        inserted: True when the marker at edit_position is new (no record)

    Returns:
        CitationSplit with a copied target and context pairs

    Raises:
        CitationValidationError: If edit_position is outside the document

    Example:
        >>> split = compute_split(ledger_records)
        >>> split.target.citation_id, split.after
        ('a', [ContextEntry(citation_id='b', note_index=2)])
    """
    if edit_position is None:
        if not records:
            return CitationSplit(target=None)
        return CitationSplit(
            target=records[0].model_copy(deep=True),
            before=[],
            after=[record.context_entry() for record in records[1:]],
        )

    marker_count = len(records) + (1 if inserted else 0)
    if not 0 <= edit_position < marker_count:
        raise CitationValidationError(
            f"Edit position {edit_position} outside document of {marker_count} citations",
            field="edit_position",
            value=edit_position,
        )

    target: CitationRecord | None = None
    before: list[ContextEntry] = []
    after: list[ContextEntry] = []
    offset = 0
    current = before
    for index in range(marker_count):
        if index == edit_position:
            current = after
            if inserted:
                offset = -1
            else:
                target = records[index].model_copy(deep=True)
            continue
        current.append(records[index + offset].context_entry())

    return CitationSplit(target=target, before=before, after=after)


__all__ = ["CitationSplit", "compute_split"]
