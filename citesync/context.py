"""Shared state passed to every synchronization component.

One SyncContext exists per open document. The session creates it and
hands it to the engine client, the reconciler and the edit handler;
nothing reaches it through module globals.
"""

from dataclasses import dataclass, field

from citesync.core.config import Settings
from citesync.document.model import Document
from citesync.ledger.ledger import CitationLedger
from citesync.schemas.citations import CitationMode
from citesync.storage.store import CitationStore


@dataclass
class SyncContext:
    """State of one document's citation synchronization.

    Attributes:
        settings: Application settings
        store: Persistence adapter
        document: Document the citations live in
        ledger: Ordered citation records
        mode: Rendering mode last reported by the engine
        positions: citation ID -> document ordinal, for recovery checks only
    """

    settings: Settings
    store: CitationStore
    document: Document
    ledger: CitationLedger = field(default_factory=CitationLedger)
    mode: CitationMode = CitationMode.NOTE
    positions: dict[str, int] = field(default_factory=dict)

    @property
    def is_note_mode(self) -> bool:
        return self.mode == CitationMode.NOTE
