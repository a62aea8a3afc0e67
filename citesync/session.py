"""Citation session - wires the synchronization components for one document.

The session owns the SyncContext and builds the reconciler, the engine
client and the edit handler around it. It is the only object UI code
needs to hold.

Example:
    ```python
    async with CitationSession(document=document) as session:
        await session.load()
        marker = session.insert_marker(0)
        await session.edit(marker, ["item01", "item02"])
        await session.set_style("jm-chicago-fullnote-bibliography")
    ```
"""

from __future__ import annotations

from collections.abc import Sequence

from citesync.context import SyncContext
from citesync.core.config import Settings, get_settings
from citesync.core.constants import AVAILABLE_STYLES
from citesync.core.exceptions import CitationValidationError
from citesync.core.logging import configure_logging, get_logger
from citesync.document.model import CitationMarker, Document
from citesync.document.reconciler import DocumentReconciler
from citesync.engine.client import FormattingEngineClient
from citesync.engine.transport import FormattingEngineTransport, HttpFormattingEngine
from citesync.handlers.edit import EditOutcome, EditTransactionHandler
from citesync.handlers.recovery import RecoveryReport, recover_document
from citesync.schemas.citations import CitationItem
from citesync.schemas.protocol import InitializeResponse
from citesync.storage.backends import InMemoryBackend, JsonFileBackend
from citesync.storage.store import CitationStore


logger = get_logger(__name__)


def build_store(settings: Settings) -> CitationStore:
    """Create the store configured by settings."""
    if settings.storage_path:
        backend = JsonFileBackend(settings.storage_path)
    else:
        backend = InMemoryBackend()
    return CitationStore(
        backend,
        namespace=settings.storage_namespace,
        default_style=settings.default_style,
        default_locale=settings.default_locale,
    )


class CitationSession:
    """Citation synchronization for one open document."""

    def __init__(
        self,
        document: Document | None = None,
        transport: FormattingEngineTransport | None = None,
        store: CitationStore | None = None,
        settings: Settings | None = None,
        setup_logging: bool = False,
    ) -> None:
        """Initialize the session.

        Args:
            document: Document holding the citation markers
            transport: Formatting engine transport, HTTP from settings if omitted
            store: Persistence adapter, built from settings if omitted
            settings: Application settings, get_settings() if omitted
            setup_logging: Configure structlog from these settings (once per process)
        """
        settings = settings or get_settings()
        if setup_logging:
            configure_logging(settings)
        self.context = SyncContext(
            settings=settings,
            store=store or build_store(settings),
            document=document if document is not None else Document(),
        )
        self.transport = transport or HttpFormattingEngine(
            base_url=settings.engine_url,
            timeout=settings.engine_timeout_seconds,
        )
        self.reconciler = DocumentReconciler(self.context)
        self.client = FormattingEngineClient(self.context, self.transport, self.reconciler)
        self.handler = EditTransactionHandler(self.context, self.client, self.reconciler)

    async def __aenter__(self) -> CitationSession:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.close()
        return False

    @property
    def document(self) -> Document:
        return self.context.document

    @property
    def store(self) -> CitationStore:
        return self.context.store

    @property
    def ready(self) -> bool:
        return self.client.ready

    @staticmethod
    def available_styles() -> dict[str, str]:
        """Return style ID -> title for the style menu."""
        return dict(AVAILABLE_STYLES)

    async def load(self) -> RecoveryReport:
        """Recover stored state and render the document's citations."""
        report = await recover_document(self.context.document, self.context.store)
        self.context.ledger.replace(report.records)
        self.context.positions = dict(report.positions)
        await self.client.initialize(
            await self.context.store.get_default_style(),
            await self.context.store.get_default_locale(),
            list(self.context.ledger.get()),
        )
        return report

    async def set_style(self, style_id: str) -> InitializeResponse | None:
        """Persist a new default style and re-render with it."""
        if not style_id:
            raise CitationValidationError("Style ID must not be empty", field="style_id")
        if style_id not in AVAILABLE_STYLES:
            logger.warning("Style not in menu, passing it to the engine anyway", style_id=style_id)
        await self.context.store.set_default_style(style_id)
        logger.info("Style set", style_id=style_id)
        return await self.client.initialize(
            style_id,
            await self.context.store.get_default_locale(),
            list(self.context.ledger.get()),
        )

    async def set_locale(self, locale_id: str) -> InitializeResponse | None:
        """Persist a new default locale and re-render with it."""
        if not locale_id:
            raise CitationValidationError("Locale ID must not be empty", field="locale_id")
        await self.context.store.set_default_locale(locale_id)
        logger.info("Locale set", locale_id=locale_id)
        return await self.client.initialize(
            await self.context.store.get_default_style(),
            locale_id,
            list(self.context.ledger.get()),
        )

    def insert_marker(self, position: int) -> CitationMarker:
        """Place a new citation marker, to be filled by edit()."""
        return self.handler.insert_marker(position)

    async def edit(
        self,
        marker: CitationMarker,
        item_ids: Sequence[str | CitationItem],
    ) -> EditOutcome:
        """Save the items chosen for a marker (empty removes the citation)."""
        return await self.handler.handle_edit(marker, item_ids)

    async def close(self) -> None:
        """Wait for any engine request in flight, then close the transport."""
        await self.client.wait_until_idle()
        await self.transport.close()


__all__ = ["CitationSession", "build_store"]
