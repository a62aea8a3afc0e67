"""Startup recovery - reconcile persisted citation state with the document.

Persistence writes are not transactional with document changes, so a
crash can leave the two out of step. Before the first engine request the
stored state is checked:

1. every stored citation has a non-empty, unique ID
2. every stored citation has an integer entry in the position map
3. the document has exactly one marker per stored citation, and markers
   that carry an ID carry the stored ID for their position

A failed check discards all stored citation state. A failed marker check
also removes every marker from the document, since none of them can be
matched to a citation any more.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from citesync.core.logging import get_logger
from citesync.document.model import Document
from citesync.schemas.citations import CitationRecord
from citesync.storage.store import CitationStore


logger = get_logger(__name__)


@dataclass
class RecoveryReport:
    """Outcome of startup recovery.

    Attributes:
        records: Citations to load into the ledger
        positions: Position map to keep using
        reset_reasons: Why stored state was discarded (empty if kept)
        removed_markers: Orphan markers removed from the document
    """

    records: list[CitationRecord] = field(default_factory=list)
    positions: dict[str, int] = field(default_factory=dict)
    reset_reasons: list[str] = field(default_factory=list)
    removed_markers: int = 0

    @property
    def was_reset(self) -> bool:
        return bool(self.reset_reasons)


def _invalid_identifier(records: list[CitationRecord]) -> bool:
    seen: set[str] = set()
    for record in records:
        if not record.citation_id or record.citation_id in seen:
            return True
        seen.add(record.citation_id)
    return False


def _missing_position(records: list[CitationRecord], positions: dict[str, int]) -> bool:
    return any(record.citation_id not in positions for record in records)


def _markers_mismatch(records: list[CitationRecord], document: Document) -> bool:
    if len(records) != len(document):
        return True
    return any(
        marker.citation_id is not None and marker.citation_id != record.citation_id
        for marker, record in zip(document.markers, records)
    )


async def recover_document(document: Document, store: CitationStore) -> RecoveryReport:
    """Validate stored citation state against the document.

    Markers without an ID are given the stored ID for their position.

    Args:
        document: Freshly loaded document
        store: Persistence adapter

    Returns:
        RecoveryReport with the state to start from
    """
    records = await store.get_citation_by_index()
    positions = await store.get_citation_id_to_pos()
    report = RecoveryReport(records=records, positions=positions)

    if _invalid_identifier(records):
        report.reset_reasons.append("invalid-citation-id")
        logger.warning("Stored citation without valid ID, removing citations")
    elif _missing_position(records, positions):
        report.reset_reasons.append("missing-position")
        logger.warning("Invalid stored position data, removing citations")

    if report.reset_reasons:
        report.records, report.positions = [], {}
        await store.reset_citations()

    if _markers_mismatch(report.records, document):
        report.reset_reasons.append("marker-mismatch")
        logger.warning(
            "Document markers and stored citations do not match, removing citations",
            markers=len(document),
            citations=len(report.records),
        )
        report.records, report.positions = [], {}
        await store.reset_citations()
        report.removed_markers = document.remove_all_markers()
        return report

    for marker, record in zip(document.markers, report.records):
        if marker.citation_id is None:
            marker.citation_id = record.citation_id

    logger.info("Citation state recovered", citations=len(report.records))
    return report


__all__ = ["RecoveryReport", "recover_document"]
