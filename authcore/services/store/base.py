from abc import ABC, abstractmethod


class RevocationStore(ABC):
    """
    Key-value contract the token lifecycle relies on.

    Implementations must give read-your-writes visibility to every caller and
    raise StoreUnavailableError on infrastructure failure. Values are strings,
    TTLs are whole seconds.
    """

    @abstractmethod
    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Upsert ``key`` with an expiry, overwriting any existing value."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key`` or None if absent/expired."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``. No error if it does not exist."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Whether ``key`` currently holds a live value."""

    @abstractmethod
    async def swap(self, key: str, expected: str, value: str, ttl_seconds: int) -> bool:
        """
        Atomically replace the value of ``key`` with ``value`` only if it
        currently equals ``expected``.

        Returns:
            bool: True if the value was replaced
        """

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        return None

    @staticmethod
    def _validate_ttl(ttl_seconds: int) -> None:
        if ttl_seconds < 1:
            raise ValueError(f"TTL must be at least 1 second, got {ttl_seconds}")
