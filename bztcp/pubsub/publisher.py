"""
Record Publisher

Fans each StreamData record out to Redis pub/sub:
  1. Serializes the record to a dict   (StreamData.to_dict)
  2. Derives all relevant channels     (channels_for_record)
  3. Publishes one envelope per channel

Usage:
    async with RecordPublisher(redis_url="redis://localhost:6379/0") as pub:
        await pub.publish(record)
"""
from __future__ import annotations

import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..models.stream import StreamData
from .channels import DEFAULT_PREFIX, channels_for_record
from .serializer import serialize

logger = logging.getLogger(__name__)


class PublisherError(Exception):
    """Raised when a publish operation fails."""


class RecordPublisher:
    """Publishes StreamData records to every relevant Redis channel."""

    def __init__(self, redis_url: str, prefix: str = DEFAULT_PREFIX) -> None:
        self._redis_url = redis_url
        self._prefix = prefix
        self._redis: Redis | None = None
        self._published = 0

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def connect(self) -> None:
        """Open the Redis connection."""
        self._redis = Redis.from_url(self._redis_url, decode_responses=False)
        try:
            await self._redis.ping()
            logger.info("RecordPublisher connected to Redis at %s", self._redis_url)
        except RedisError as exc:
            raise PublisherError(f"Cannot connect to Redis: {exc}") from exc

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info(
                "RecordPublisher disconnected from Redis",
                extra={"records_published": self._published},
            )

    async def __aenter__(self) -> RecordPublisher:
        await self.connect()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    # ── Publish ───────────────────────────────────────────────────────────────

    async def publish(self, record: StreamData) -> int:
        """
        Serialize and fan out a record to all relevant channels.

        Returns:
            Total subscriber delivery count across all channels.

        Raises:
            PublisherError: If not connected or Redis returns an error.
            SerializationError: If the record cannot be serialized.
        """
        if self._redis is None:
            raise PublisherError("RecordPublisher is not connected, call connect() first")

        data = record.to_dict()
        channels = channels_for_record(record, self._prefix)

        total = 0
        for channel in channels:
            payload = serialize(channel, data)
            try:
                total += await self._redis.publish(channel, payload)
            except RedisError as exc:
                raise PublisherError(f"Redis publish failed on channel '{channel}'") from exc

        self._published += 1
        logger.debug(
            "Record %s published to %d channel(s), %d delivery(s)",
            record.id,
            len(channels),
            total,
        )
        return total
