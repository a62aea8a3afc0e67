"""CitationStore - typed persistence of citation state.

Wraps a KeyValueBackend with one accessor pair per persisted key:

- defaultLocale: str (default "en-US")
- defaultStyle: str (default "american-medical-association")
- citationByIndex: list[CitationRecord] (default [])
- citationIdToPos: dict[str, int] (default {})

Reads never raise: a missing, corrupt or mistyped value is replaced by
the key's default and the problem is logged. Writes go straight to the
backend; a backend failure surfaces as StorageError.
"""

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError

from citesync.core.constants import DEFAULT_LOCALE, DEFAULT_STYLE, StorageKey
from citesync.core.exceptions import StorageError
from citesync.core.logging import get_logger
from citesync.schemas.citations import CitationRecord
from citesync.storage.backends import InMemoryBackend, KeyValueBackend


logger = get_logger(__name__)

_RECORDS_ADAPTER = TypeAdapter(list[CitationRecord])
_POSITIONS_ADAPTER = TypeAdapter(dict[str, int])


class CitationStore:
    """Persistence adapter for citation state.

    Example:
        >>> store = CitationStore(InMemoryBackend())
        >>> await store.get_default_locale()
        'en-US'
        >>> await store.set_citation_by_index([record])
        >>> await store.get_citation_by_index()
        [CitationRecord(...)]
    """

    def __init__(
        self,
        backend: KeyValueBackend | None = None,
        namespace: str = "",
        default_style: str = DEFAULT_STYLE,
        default_locale: str = DEFAULT_LOCALE,
    ) -> None:
        """Initialize the store.

        Args:
            backend: Key-value backend, in-memory when omitted
            namespace: Optional prefix separating several documents in one backend
            default_style: Style returned when none is stored
            default_locale: Locale returned when none is stored
        """
        self._backend = backend if backend is not None else InMemoryBackend()
        self._namespace = namespace
        self._default_style = default_style
        self._default_locale = default_locale

    @property
    def backend(self) -> KeyValueBackend:
        """Return the underlying backend."""
        return self._backend

    def _build_key(self, key: StorageKey) -> str:
        if self._namespace:
            return f"{self._namespace}:{key.value}"
        return key.value

    # -------------------------------------------------------------------------
    # Raw access
    # -------------------------------------------------------------------------

    async def _read(self, key: StorageKey, fallback: Any) -> Any:
        """Read a raw value, decoding JSON containers.

        Values starting with ``{`` or ``[`` are parsed as JSON, anything
        else is returned as a plain string.
        """
        try:
            raw = await self._backend.get(self._build_key(key))
        except Exception as e:
            logger.warning("Storage read failed", key=key.value, error=str(e))
            return fallback

        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError:
                logger.warning("Stored value is not UTF-8", key=key.value)
                return fallback

        if not raw:
            logger.debug("No value in storage", key=key.value)
            return fallback

        if raw[0] in "{[":
            try:
                return json.loads(raw)
            except ValueError:
                logger.warning("JSON parse error in stored value", key=key.value, value=raw[:200])
                return fallback
        return raw

    async def _write(self, key: StorageKey, value: str) -> None:
        full_key = self._build_key(key)
        try:
            await self._backend.set(full_key, value)
        except Exception as e:
            logger.error("Storage write failed", key=key.value, error=str(e))
            raise StorageError(f"Failed to persist {key.value}", key=key.value, cause=e) from e

    async def _read_text(self, key: StorageKey, fallback: str) -> str:
        value = await self._read(key, fallback)
        if not isinstance(value, str):
            logger.warning("Stored value has wrong type", key=key.value, expected="str")
            return fallback
        return value

    # -------------------------------------------------------------------------
    # Typed accessors
    # -------------------------------------------------------------------------

    async def get_default_locale(self) -> str:
        return await self._read_text(StorageKey.DEFAULT_LOCALE, self._default_locale)

    async def set_default_locale(self, locale_id: str) -> None:
        await self._write(StorageKey.DEFAULT_LOCALE, locale_id)

    async def get_default_style(self) -> str:
        return await self._read_text(StorageKey.DEFAULT_STYLE, self._default_style)

    async def set_default_style(self, style_id: str) -> None:
        await self._write(StorageKey.DEFAULT_STYLE, style_id)

    async def get_citation_by_index(self) -> list[CitationRecord]:
        """Return the stored ledger, or an empty list if it cannot be decoded."""
        value = await self._read(StorageKey.CITATION_BY_INDEX, [])
        try:
            return _RECORDS_ADAPTER.validate_python(value)
        except ValidationError as e:
            logger.warning(
                "Stored citations failed validation",
                key=StorageKey.CITATION_BY_INDEX.value,
                errors=e.error_count(),
            )
            return []

    async def set_citation_by_index(self, records: list[CitationRecord]) -> None:
        payload = json.dumps([record.to_wire() for record in records])
        await self._write(StorageKey.CITATION_BY_INDEX, payload)

    async def get_citation_id_to_pos(self) -> dict[str, int]:
        """Return the stored position map, or an empty map if it cannot be decoded."""
        value = await self._read(StorageKey.CITATION_ID_TO_POS, {})
        try:
            return _POSITIONS_ADAPTER.validate_python(value, strict=True)
        except ValidationError as e:
            logger.warning(
                "Stored position map failed validation",
                key=StorageKey.CITATION_ID_TO_POS.value,
                errors=e.error_count(),
            )
            return {}

    async def set_citation_id_to_pos(self, positions: dict[str, int]) -> None:
        await self._write(StorageKey.CITATION_ID_TO_POS, json.dumps(positions))

    async def reset_citations(self) -> None:
        """Discard stored citations and positions (style and locale are kept)."""
        await self.set_citation_by_index([])
        await self.set_citation_id_to_pos({})

    def __repr__(self) -> str:
        return f"CitationStore(backend={self._backend!r}, namespace={self._namespace!r})"
