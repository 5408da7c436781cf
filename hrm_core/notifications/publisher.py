# hrm_core/notifications/publisher.py
import asyncio
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

import redis.asyncio as aioredis

from ..settings import settings

logger = logging.getLogger(__name__)

# Channel names used by the core
SUPERADMIN_CHANNEL = "superadmin"
ADMIN_CHANNEL = "admin"
HR_CHANNEL = "hr"


def account_channel(account_id: str) -> str:
    return f"account:{account_id}"


class AbstractEventPublisher(ABC):
    """
    Side channel for near-real-time notifications.

    Publishing is best-effort: implementations log failures and never
    raise, so a broken channel cannot affect the operation that emitted
    the event.
    """

    @abstractmethod
    async def initialize(self) -> None:
        pass

    @abstractmethod
    async def teardown(self) -> None:
        pass

    @abstractmethod
    async def publish(self, channel: str, event: str, payload: Optional[Dict[str, Any]] = None) -> None:
        pass


class LoggingEventPublisher(AbstractEventPublisher):
    """Writes events to the application log."""

    async def initialize(self) -> None:
        logger.info("LoggingEventPublisher initialized.")

    async def teardown(self) -> None:
        pass

    async def publish(self, channel: str, event: str, payload: Optional[Dict[str, Any]] = None) -> None:
        logger.info(f"Notification [{channel}] {event}: {payload or {}}")


class RedisEventPublisher(AbstractEventPublisher):
    """Publishes JSON messages to Redis pub/sub channels named ``hrm:notifications:<channel>``."""

    _redis_client: Optional[aioredis.Redis] = None

    async def initialize(self) -> None:
        if self._redis_client:
            logger.warning("Redis client already initialized. Skipping re-initialization.")
            return

        connection_params = {
            "host": settings.redis_host,
            "port": settings.redis_port,
            "db": settings.redis_db,
            "ssl": settings.redis_ssl,
        }
        if settings.redis_password:
            connection_params["password"] = settings.redis_password

        logger.info(
            f"Connecting event publisher to Redis at {connection_params['host']}:"
            f"{connection_params['port']}, DB: {connection_params['db']}"
        )
        try:
            self._redis_client = aioredis.Redis(**connection_params)
            await self._redis_client.ping()
            logger.info("Event publisher connected to Redis.")
        except Exception as e:
            logger.error(f"Failed to connect event publisher to Redis: {e}", exc_info=True)
            self._redis_client = None
            raise

    async def teardown(self) -> None:
        if self._redis_client:
            logger.info("Closing event publisher Redis connection.")
            await self._redis_client.aclose()
            self._redis_client = None

    def _channel_key(self, channel: str) -> str:
        return f"hrm:notifications:{channel}"

    async def publish(self, channel: str, event: str, payload: Optional[Dict[str, Any]] = None) -> None:
        if not self._redis_client:
            logger.error(f"Event publisher not initialized; dropping '{event}' for channel '{channel}'.")
            return
        message = json.dumps({
            "event": event,
            "channel": channel,
            "payload": payload or {},
            "published_at": datetime.now(timezone.utc).isoformat(),
        })
        try:
            receivers = await self._redis_client.publish(self._channel_key(channel), message)
            logger.debug(f"Published '{event}' to '{channel}' ({receivers} receivers).")
        except Exception as e:
            logger.error(f"Failed to publish '{event}' to '{channel}': {e}", exc_info=True)


# Strong references to in-flight publish tasks
_pending_tasks: Set[asyncio.Task] = set()


def publish_after_commit(
    publisher: AbstractEventPublisher,
    channel: str,
    event: str,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Schedule ``publisher.publish`` without awaiting it.

    Call only after the unit of work that produced the event has
    committed. Exceptions from the publisher are logged and dropped.
    """
    async def _run() -> None:
        try:
            await publisher.publish(channel, event, payload)
        except Exception as e:
            logger.error(f"Event publisher raised for '{event}' on '{channel}': {e}", exc_info=True)

    task = asyncio.create_task(_run())
    _pending_tasks.add(task)
    task.add_done_callback(_pending_tasks.discard)


# Singleton instance management
_event_publisher_instance: Optional[AbstractEventPublisher] = None


async def get_event_publisher() -> AbstractEventPublisher:
    """Get or create the publisher selected by ``notifications_backend``."""
    global _event_publisher_instance
    if _event_publisher_instance is None:
        backend = settings.notifications_backend.lower()
        if backend == "redis":
            publisher: AbstractEventPublisher = RedisEventPublisher()
        elif backend == "log":
            publisher = LoggingEventPublisher()
        else:
            raise ValueError(f"Unsupported notifications_backend: {settings.notifications_backend}")
        await publisher.initialize()
        _event_publisher_instance = publisher
    return _event_publisher_instance


async def close_event_publisher() -> None:
    global _event_publisher_instance
    if _event_publisher_instance is not None:
        await _event_publisher_instance.teardown()
        _event_publisher_instance = None
