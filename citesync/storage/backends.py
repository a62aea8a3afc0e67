"""Key-value backends for the citation store.

Any object with async ``get``/``set``/``delete`` on string keys satisfies
KeyValueBackend, including ``redis.asyncio.Redis``. Two implementations
ship here:

- InMemoryBackend: process-local dict, for tests and throwaway sessions
- JsonFileBackend: a single JSON object on disk, survives restarts

Anti-Pattern Compliance:
- AP-10.1: Uses asyncio.Lock for async context
"""

import asyncio
import json
from pathlib import Path
from typing import Protocol, runtime_checkable

from citesync.core.logging import get_logger


logger = get_logger(__name__)


@runtime_checkable
class KeyValueBackend(Protocol):
    """Protocol for key-value backends (duck typing).

    Allows dependency injection of backends for testing (InMemoryBackend)
    and production (JsonFileBackend, redis.asyncio.Redis).
    """

    async def get(self, key: str) -> str | bytes | None:
        """Get a raw value, None when absent."""
        ...

    async def set(self, key: str, value: str) -> bool | None:
        """Store a raw value."""
        ...

    async def delete(self, key: str) -> int:
        """Delete a key, returning the number of keys removed."""
        ...


class InMemoryBackend:
    """Process-local backend."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._store: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(self, key: str, value: str) -> bool:
        self._store[key] = value
        return True

    async def delete(self, key: str) -> int:
        if key in self._store:
            del self._store[key]
            return 1
        return 0

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the raw stored values."""
        return dict(self._store)

    def __repr__(self) -> str:
        return f"InMemoryBackend(keys={sorted(self._store)!r})"


class JsonFileBackend:
    """Backend persisting every key into one JSON object file.

    The file is read lazily on first access and rewritten on every change.
    Disk I/O runs in a worker thread so the event loop is not blocked.
    A missing file is an empty store. An unreadable file is treated as
    empty as well (and overwritten on the next write); the citation store
    above substitutes defaults for anything it cannot decode.

    Example:
        >>> backend = JsonFileBackend("~/.citesync/document.json")
        >>> await backend.set("defaultStyle", "jm-oscola")
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()
        self._data: dict[str, str] | None = None
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        """Return the backing file path."""
        return self._path

    async def _load(self) -> dict[str, str]:
        if self._data is None:
            loop = asyncio.get_running_loop()
            self._data = await loop.run_in_executor(None, self._read)
        return self._data

    def _read(self) -> dict[str, str]:
        data: dict[str, str] = {}
        if self._path.exists():
            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.warning("Unreadable store file", path=str(self._path), error=str(e))
            else:
                if isinstance(raw, dict):
                    data = {str(k): v for k, v in raw.items() if isinstance(v, str)}
                else:
                    logger.warning("Store file is not a JSON object", path=str(self._path))
        return data

    async def _flush(self) -> None:
        # Serialized under the lock; only the write leaves the loop.
        payload = json.dumps(self._data, indent=2)
        await asyncio.get_running_loop().run_in_executor(None, self._write, payload)

    def _write(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(self._path)

    async def get(self, key: str) -> str | None:
        async with self._lock:
            data = await self._load()
            return data.get(key)

    async def set(self, key: str, value: str) -> bool:
        async with self._lock:
            data = await self._load()
            data[key] = value
            await self._flush()
            return True

    async def delete(self, key: str) -> int:
        async with self._lock:
            data = await self._load()
            if key not in data:
                return 0
            del data[key]
            await self._flush()
            return 1

    def __repr__(self) -> str:
        return f"JsonFileBackend(path={str(self._path)!r})"
