from loguru import logger

from authcore.core.config import Environment, Settings
from .base import RevocationStore
from .memory_store import InMemoryRevocationStore
from .redis_store import RedisRevocationStore, get_redis_pool


def build_revocation_store(app_settings: Settings) -> RevocationStore:
    """
    Select the store backend for the current environment.

    LOCAL runs without Redis and keeps state in process memory; every other
    environment talks to the shared Redis instance.
    """
    if app_settings.current_environment == Environment.LOCAL:
        logger.warning("Using in-memory revocation store (LOCAL environment)")
        return InMemoryRevocationStore()

    return RedisRevocationStore()


__all__ = [
    "RevocationStore",
    "InMemoryRevocationStore",
    "RedisRevocationStore",
    "build_revocation_store",
    "get_redis_pool",
]
