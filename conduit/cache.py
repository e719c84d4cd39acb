import json
import logging

import redis.asyncio as redis

from conduit.config import settings

logger = logging.getLogger(__name__)

TAGS_KEY = "conduit:tags"


class CacheManager:
    """
    Redis cache-aside store for the global tag list.

    The tag list is the only response that looks the same to every
    caller, so it is the only thing kept here.  Article shapes carry a
    per-user ``favorited`` flag and always come from the database.

    With no Redis connection every lookup is a miss and every write is
    dropped; callers never need to check whether Redis is up.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None
        self._hits = 0
        self._misses = 0

    async def connect(self) -> None:
        """Open the pool at startup, or leave the cache off if Redis is down."""
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await client.ping()
        except Exception as exc:  # pragma: no cover
            logger.warning("Redis unreachable at %s, tag cache off: %s", settings.REDIS_URL, exc)
            await client.aclose()
            return
        self._redis = client
        logger.info("Tag cache using Redis at %s", settings.REDIS_URL)

    async def disconnect(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    async def get_tags(self) -> list[str] | None:
        """Cached tag list, or None when absent or Redis is unavailable."""
        raw = None
        if self._redis is not None:
            try:
                raw = await self._redis.get(TAGS_KEY)
            except redis.RedisError as exc:
                logger.debug("Tag cache read failed: %s", exc)
        if raw is None:
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(raw)

    async def store_tags(self, tags: list[str]) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.set(TAGS_KEY, json.dumps(tags), ex=settings.CACHE_TTL_TAGS)
        except redis.RedisError as exc:
            logger.debug("Tag cache write failed: %s", exc)

    async def invalidate_tags(self) -> None:
        """Forget the tag list; the next read goes to the database."""
        if self._redis is None:
            return
        try:
            await self._redis.delete(TAGS_KEY)
        except redis.RedisError as exc:
            logger.warning("Tag cache invalidation failed: %s", exc)

    @property
    def stats(self) -> dict:
        lookups = self._hits + self._misses
        return {
            "connected": self._redis is not None,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / lookups * 100, 1) if lookups else 0.0,
        }


cache = CacheManager()
