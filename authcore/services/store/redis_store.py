from loguru import logger
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from authcore.core.config import settings
from authcore.core.exceptions.domain import StoreUnavailableError
from authcore.services.store.base import RevocationStore

# Global shared Redis connection pool
_redis_pool: ConnectionPool | None = None

# Compare-and-set: replace KEYS[1] with ARGV[2] (TTL ARGV[3]) only if it holds ARGV[1]
SWAP_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if current ~= ARGV[1] then
    return 0
end
redis.call('SETEX', KEYS[1], ARGV[3], ARGV[2])
return 1
"""


def get_redis_pool() -> ConnectionPool:
    """
    Get or create the shared Redis connection pool.

    Returns:
        ConnectionPool: Shared Redis connection pool instance

    Note:
        This ensures all Redis clients in the process share the same
        connection pool.
    """
    global _redis_pool

    if _redis_pool is None:
        _redis_pool = ConnectionPool.from_url(
            settings.redis_url.human_repr(),
            encoding="utf-8",
            decode_responses=True,
            max_connections=settings.redis_max_pool_connections,
            retry_on_timeout=True,
            socket_connect_timeout=settings.redis_socket_connect_timeout,
            socket_timeout=settings.redis_socket_timeout,
        )
        logger.info(
            f"Redis connection pool created with max_connections={settings.redis_max_pool_connections}"
        )
    return _redis_pool


class RedisRevocationStore(RevocationStore):
    """
    Revocation store backed by Redis.

    Expiry is enforced by Redis itself (SETEX), so blacklist entries and
    refresh tokens disappear on their own once their TTL elapses. Every Redis
    failure is surfaced as StoreUnavailableError; nothing fails open.
    """

    def __init__(self, redis_client: Redis | None = None):
        if redis_client is None:
            redis_client = self._initialize_redis()

        self._redis_client = redis_client

    @property
    def redis_client(self) -> Redis:
        return self._redis_client

    def _initialize_redis(self) -> Redis:
        """Initialize Redis connection using shared connection pool"""
        try:
            client = Redis(connection_pool=get_redis_pool())
            logger.debug(f"Redis client initialized for {self.__class__.__name__} using shared pool")
            return client
        except Exception as e:
            logger.error(f"Failed to initialize Redis for {self.__class__.__name__}: {e}")
            raise e

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self._validate_ttl(ttl_seconds)
        try:
            await self.redis_client.setex(key, ttl_seconds, value)
        except RedisError as e:
            logger.exception(f"Failed to store key {key[:24]}...")
            raise StoreUnavailableError(exception=e)

    async def get(self, key: str) -> str | None:
        try:
            value = await self.redis_client.get(key)
        except RedisError as e:
            logger.exception(f"Failed to read key {key[:24]}...")
            raise StoreUnavailableError(exception=e)

        if isinstance(value, bytes):
            return value.decode("utf-8")

        return value

    async def delete(self, key: str) -> None:
        try:
            await self.redis_client.delete(key)
        except RedisError as e:
            logger.exception(f"Failed to delete key {key[:24]}...")
            raise StoreUnavailableError(exception=e)

    async def exists(self, key: str) -> bool:
        try:
            return await self.redis_client.exists(key) > 0
        except RedisError as e:
            logger.exception(f"Failed to check key {key[:24]}...")
            raise StoreUnavailableError(exception=e)

    async def swap(self, key: str, expected: str, value: str, ttl_seconds: int) -> bool:
        self._validate_ttl(ttl_seconds)
        try:
            swapped = await self.redis_client.eval(SWAP_SCRIPT, 1, key, expected, value, ttl_seconds)
        except RedisError as e:
            logger.exception(f"Failed to swap key {key[:24]}...")
            raise StoreUnavailableError(exception=e)

        return int(swapped) == 1

    async def health_check(self) -> bool:
        """
        Check Redis connection health by pinging the server.

        Returns:
            bool: True if Redis is healthy and responsive, False otherwise
        """
        try:
            await self.redis_client.ping()
            return True
        except RedisError as e:
            logger.error(f"Redis health check failed for {self.__class__.__name__}: {e}")
            return False

    async def close(self) -> None:
        """Close Redis connection gracefully"""
        try:
            await self.redis_client.aclose()
            logger.info(f"Redis connection closed for {self.__class__.__name__}")
        except RedisError as e:
            logger.error(f"Error closing Redis connection for {self.__class__.__name__}: {e}")
