# hrm_core/sessions/revocation_store.py
import logging
from abc import ABC, abstractmethod
from typing import Optional

import redis.asyncio as aioredis

from ..settings import settings

logger = logging.getLogger(__name__)


class AbstractSessionRevocationStore(ABC):
    """
    Interface for the list of session tokens revoked before their expiry.

    Entries are keyed by the token's ``jti`` and only need to live as long
    as the token itself would.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the revocation store."""
        pass

    @abstractmethod
    async def teardown(self) -> None:
        """Clean up revocation store resources."""
        pass

    @abstractmethod
    async def revoke(self, jti: str, ttl_seconds: int) -> None:
        """Mark a token as revoked for ``ttl_seconds``."""
        pass

    @abstractmethod
    async def is_revoked(self, jti: str) -> bool:
        pass

    def _construct_redis_key(self, jti: str) -> str:
        """
        Constructs a standardized Redis key for a revoked token.
        Format: hrm:revoked:{jti}
        """
        if not jti:
            raise ValueError("jti is required to construct a revocation key.")
        return f"hrm:revoked:{jti}"


class NullSessionRevocationStore(AbstractSessionRevocationStore):
    """Keeps logout advisory: tokens stay valid until they expire."""

    async def initialize(self) -> None:
        logger.info("Session revocation disabled; logout only clears the client cookie.")

    async def teardown(self) -> None:
        pass

    async def revoke(self, jti: str, ttl_seconds: int) -> None:
        logger.debug(f"Revocation backend disabled; token {jti} stays valid until expiry.")

    async def is_revoked(self, jti: str) -> bool:
        return False


class RedisSessionRevocationStore(AbstractSessionRevocationStore):
    """Redis-backed revocation list with per-entry TTL."""

    _redis_client: Optional[aioredis.Redis] = None

    async def initialize(self) -> None:
        """
        Establishes connection to Redis server using global settings.
        Skips initialization if client already exists.
        """
        if self._redis_client:
            logger.warning("Redis client already initialized. Skipping re-initialization.")
            return

        connection_params = {
            "host": settings.redis_host,
            "port": settings.redis_port,
            "db": settings.redis_db,
            "ssl": settings.redis_ssl,
            "decode_responses": True,
        }
        if settings.redis_password:
            connection_params["password"] = settings.redis_password

        logger.info(
            f"Connecting revocation store to Redis at {connection_params['host']}:"
            f"{connection_params['port']}, DB: {connection_params['db']}"
        )
        try:
            self._redis_client = aioredis.Redis(**connection_params)
            await self._redis_client.ping()
            logger.info("Successfully connected to Redis and pinged.")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}", exc_info=True)
            self._redis_client = None
            raise

    async def teardown(self) -> None:
        if self._redis_client:
            logger.info("Closing Redis connection.")
            await self._redis_client.aclose()
            self._redis_client = None
            logger.info("Redis connection closed.")
        else:
            logger.info("No active Redis connection to close.")

    async def _get_client(self) -> aioredis.Redis:
        """
        Returns the Redis client, ensuring it's properly initialized.

        Raises:
            RuntimeError: If client is not initialized
        """
        if not self._redis_client:
            logger.error("Redis client not initialized. Call initialize() first.")
            raise RuntimeError("RedisSessionRevocationStore not initialized. Call initialize() first.")
        return self._redis_client

    async def revoke(self, jti: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            logger.debug(f"Token {jti} already expired; nothing to revoke.")
            return
        client = await self._get_client()
        await client.set(self._construct_redis_key(jti), "1", ex=ttl_seconds)
        logger.info(f"Revoked session token {jti} for {ttl_seconds}s.")

    async def is_revoked(self, jti: str) -> bool:
        # Revocation errors propagate; an unreachable list must not admit revoked tokens
        client = await self._get_client()
        return bool(await client.exists(self._construct_redis_key(jti)))


# Singleton instance management
_revocation_store_instance: Optional[AbstractSessionRevocationStore] = None


async def get_session_revocation_store() -> AbstractSessionRevocationStore:
    """Get or create the store selected by ``session_revocation_backend``."""
    global _revocation_store_instance
    if _revocation_store_instance is None:
        backend = settings.session_revocation_backend.lower()
        if backend == "redis":
            store: AbstractSessionRevocationStore = RedisSessionRevocationStore()
        elif backend == "none":
            store = NullSessionRevocationStore()
        else:
            raise ValueError(f"Unsupported session_revocation_backend: {settings.session_revocation_backend}")
        await store.initialize()
        _revocation_store_instance = store
    return _revocation_store_instance


async def close_session_revocation_store() -> None:
    global _revocation_store_instance
    if _revocation_store_instance is not None:
        await _revocation_store_instance.teardown()
        _revocation_store_instance = None
