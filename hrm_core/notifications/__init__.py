"""
Notification side channel.

Events emitted after committed state changes, delivered on role channels
(``superadmin``, ``admin``, ``hr``) or per-account channels
(``account:<id>``).
"""

from .publisher import (
    ADMIN_CHANNEL,
    HR_CHANNEL,
    SUPERADMIN_CHANNEL,
    AbstractEventPublisher,
    LoggingEventPublisher,
    RedisEventPublisher,
    account_channel,
    close_event_publisher,
    get_event_publisher,
    publish_after_commit,
)

__all__ = [
    "ADMIN_CHANNEL",
    "HR_CHANNEL",
    "SUPERADMIN_CHANNEL",
    "AbstractEventPublisher",
    "LoggingEventPublisher",
    "RedisEventPublisher",
    "account_channel",
    "close_event_publisher",
    "get_event_publisher",
    "publish_after_commit",
]
