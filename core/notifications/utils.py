import json
import logging

import redis
from django.conf import settings

logger = logging.getLogger(__name__)

_redis_client = None


def _get_redis_client():
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(settings.NOTIFICATIONS_REDIS_URL)
    return _redis_client


def notify_via_ws(user_id, data):
    """
    Publishes notification data to Redis for WebSocket broadcasting.

    Delivery is best effort: the ledger row is already committed, clients that
    miss the event pick it up on their next poll.
    """
    if not settings.NOTIFICATIONS_REALTIME_ENABLED:
        return False

    channel = f"notifications_{user_id}"
    try:
        _get_redis_client().publish(channel, json.dumps(data, default=str))
        logger.info("Published notification to Redis channel %s", channel)
        return True
    except redis.RedisError as e:
        logger.error("Failed to publish notification to Redis: %s", e)
        return False
