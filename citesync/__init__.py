"""citesync - keeps a document's citations in step with a formatting engine.

The package maintains the ordered record of citations in a document,
exchanges it with an external asynchronous citation formatter (one
request at a time), writes the formatted output back into the document
and persists the record across sessions.

Usage:
    from citesync import CitationSession, Document

    async with CitationSession(document=Document()) as session:
        await session.load()
        marker = session.insert_marker(0)
        await session.edit(marker, ["item01"])
"""

from citesync.context import SyncContext
from citesync.document.model import CitationMarker, Document
from citesync.handlers.edit import EditOutcome
from citesync.ledger.ledger import CitationLedger
from citesync.schemas.citations import CitationMode, CitationRecord
from citesync.session import CitationSession


__version__ = "0.1.0"
__all__ = [
    "CitationLedger",
    "CitationMarker",
    "CitationMode",
    "CitationRecord",
    "CitationSession",
    "Document",
    "EditOutcome",
    "SyncContext",
]
