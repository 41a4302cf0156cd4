from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from loguru import logger

from authcore.services.store.base import RevocationStore


def _utc_now() -> datetime:
    return datetime.now(UTC)


class InMemoryRevocationStore(RevocationStore):
    """
    Process-local store used in the LOCAL environment and in tests.

    Expired entries are dropped lazily on access. Every operation runs without
    awaiting, so each one is atomic with respect to the event loop.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self._clock = clock
        self._data: dict[str, tuple[str, datetime]] = {}
        logger.debug("In-memory revocation store initialized")

    def _live_value(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._data[key]
            return None

        return value

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self._validate_ttl(ttl_seconds)
        self._data[key] = (value, self._clock() + timedelta(seconds=ttl_seconds))

    async def get(self, key: str) -> str | None:
        return self._live_value(key)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def exists(self, key: str) -> bool:
        return self._live_value(key) is not None

    async def swap(self, key: str, expected: str, value: str, ttl_seconds: int) -> bool:
        self._validate_ttl(ttl_seconds)
        if self._live_value(key) != expected:
            return False

        self._data[key] = (value, self._clock() + timedelta(seconds=ttl_seconds))
        return True

    def __len__(self) -> int:
        return sum(1 for key in list(self._data) if self._live_value(key) is not None)
