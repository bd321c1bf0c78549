"""Change feed: tells live subscribers that an owner's collection changed.

A notification carries no data. Subscribers re-read the full collection on
every pulse.

Redis pub/sub is used when a redis URL is configured so that every API worker
sees writes made by the others. Without one, an in-process fan-out is used.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import defaultdict

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "journal"

_CLOSED = object()


def owner_channel(app_id: str, owner_id: str) -> str:
    """Pub/sub channel for one owner's trade collection."""
    return f"{CHANNEL_PREFIX}:{app_id}:users:{owner_id}:trade_records"


class FeedListener(ABC):
    """Async iterator of change pulses on one channel. Stops once closed."""

    def __aiter__(self) -> "FeedListener":
        return self

    @abstractmethod
    async def __anext__(self) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...


class ChangeFeed(ABC):
    """Publish / listen capability used by the trade store."""

    @abstractmethod
    async def publish(self, channel: str) -> None: ...

    @abstractmethod
    async def listen(self, channel: str) -> FeedListener:
        """Start listening. Pulses published after this returns are delivered."""

    async def aclose(self) -> None:
        return None


class _LocalListener(FeedListener):
    def __init__(self, feed: "LocalChangeFeed", channel: str) -> None:
        self._feed = feed
        self._channel = channel
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    def notify(self) -> None:
        self._queue.put_nowait(None)

    async def __anext__(self) -> None:
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return None

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._feed._detach(self._channel, self)
        self._queue.put_nowait(_CLOSED)


class LocalChangeFeed(ChangeFeed):
    """In-process fan-out. Delivery order is publish order."""

    def __init__(self) -> None:
        self._listeners: dict[str, set[_LocalListener]] = defaultdict(set)

    async def publish(self, channel: str) -> None:
        for listener in list(self._listeners.get(channel, ())):
            listener.notify()

    async def listen(self, channel: str) -> FeedListener:
        listener = _LocalListener(self, channel)
        self._listeners[channel].add(listener)
        return listener

    def listener_count(self, channel: str) -> int:
        return len(self._listeners.get(channel, ()))

    def _detach(self, channel: str, listener: _LocalListener) -> None:
        listeners = self._listeners.get(channel)
        if listeners is None:
            return
        listeners.discard(listener)
        if not listeners:
            del self._listeners[channel]


class _RedisListener(FeedListener):
    def __init__(self, pubsub, channel: str) -> None:
        self._pubsub = pubsub
        self._channel = channel
        self._closed = False

    async def __anext__(self) -> None:
        while not self._closed:
            message = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=None)
            if message is not None and message.get("type") == "message":
                return None
        raise StopAsyncIteration

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._pubsub.unsubscribe(self._channel)
            await self._pubsub.aclose()
        except Exception as e:
            logger.warning("Failed to close pub/sub listener on %s: %s", self._channel, e)


class RedisChangeFeed(ChangeFeed):
    """Redis pub/sub feed, shared across API worker processes."""

    def __init__(self, redis_url: str) -> None:
        self._redis_url = redis_url
        self._redis: aioredis.Redis | None = None

    def _get_redis(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = aioredis.from_url(self._redis_url, decode_responses=True)
        return self._redis

    async def publish(self, channel: str) -> None:
        await self._get_redis().publish(channel, "changed")

    async def listen(self, channel: str) -> FeedListener:
        pubsub = self._get_redis().pubsub()
        await pubsub.subscribe(channel)
        return _RedisListener(pubsub, channel)

    async def aclose(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


def make_change_feed(redis_url: str) -> ChangeFeed:
    """Redis feed when configured, in-process fan-out otherwise."""
    if redis_url:
        return RedisChangeFeed(redis_url)
    logger.info("No redis_url configured, using in-process change feed")
    return LocalChangeFeed()
