import json
import logging

import redis
from django.conf import settings
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)


class TableEventChannel:
    """Redis pub/sub channel carrying table state changes, one channel per restaurant"""

    def __init__(self):
        self.redis_client = redis.Redis(
            host=settings.REDIS_HOST,
            port=int(settings.REDIS_PORT),
            db=int(settings.REDIS_DB),
            decode_responses=True
        )

    @staticmethod
    def channel_name(admin_uid: str) -> str:
        return f"tableserve:tables:{admin_uid}"

    def publish(self, admin_uid: str, event: str, payload: dict) -> int:
        """
        Publish an event for a restaurant

        Args:
            admin_uid: Restaurant the event belongs to
            event: Event name (e.g. "session_started", "bill_finalized")
            payload: JSON-serialisable event data

        Returns:
            Number of subscribers that received the message
        """
        message = json.dumps({
            'event': event,
            'admin_uid': admin_uid,
            'at': timezone.now().isoformat(),
            **payload,
        }, default=str)
        return self.redis_client.publish(self.channel_name(admin_uid), message)

    def subscribe(self, admin_uid: str):
        """
        Subscribe to a restaurant's channel

        Returns:
            A redis PubSub object already subscribed to the channel
        """
        pubsub = self.redis_client.pubsub(ignore_subscribe_messages=True)
        pubsub.subscribe(self.channel_name(admin_uid))
        return pubsub


def _send(admin_uid, event, payload):
    try:
        TableEventChannel().publish(admin_uid, event, payload)
    except redis.RedisError as exc:
        # Clients still see the change on their next poll
        logger.warning("Could not publish %s for %s: %s", event, admin_uid, exc)


def publish_table_event(admin_uid, event, **payload):
    """Publish an event once the surrounding transaction commits."""
    if not settings.TABLE_EVENTS_ENABLED:
        return
    transaction.on_commit(lambda: _send(admin_uid, event, payload))
