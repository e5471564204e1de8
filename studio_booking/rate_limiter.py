"""
Hybrid in-memory + Redis rate limiting for public endpoints.
Counts are kept in process memory and written through to Redis every few
seconds so several API workers converge on a shared count.
"""

import logging
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request, status

from . import config

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None

# {key: {"count": int, "reset_time": int, "last_redis_sync": int}}
memory_cache: dict[str, dict] = {}
cache_lock = Lock()

MEMORY_CACHE_SYNC_INTERVAL = 10  # seconds between Redis write-throughs
MEMORY_CACHE_CLEANUP_INTERVAL = 60
last_cleanup_time = 0


def get_redis_client() -> redis.Redis:
    """Get or create the shared Redis client (REDIS_URL wins over host/port settings)"""
    global redis_client

    if redis_client is not None:
        return redis_client

    options = {
        "decode_responses": True,
        "socket_connect_timeout": 15,
        "socket_timeout": 30,
        "retry_on_timeout": True,
        "health_check_interval": 30,
        "max_connections": 20,
    }

    if config.REDIS_URL:
        logger.info("📡 Connecting to Redis for rate limiting via REDIS_URL")
        client = redis.from_url(config.REDIS_URL, **options)
    else:
        logger.info(
            f"📡 Connecting to Redis for rate limiting at {config.REDIS_HOST}:{config.REDIS_PORT}"
        )
        client = redis.Redis(
            host=config.REDIS_HOST,
            port=config.REDIS_PORT,
            password=config.REDIS_PASSWORD,
            ssl=config.REDIS_SSL,
            **options,
        )

    try:
        client.ping()
    except redis.RedisError as e:
        logger.error(f"❌ Failed to connect to Redis: {e}")
        raise

    redis_client = client
    logger.info("✅ Redis connected")
    return redis_client


def cleanup_expired_cache(now: int) -> None:
    global last_cleanup_time

    if now - last_cleanup_time < MEMORY_CACHE_CLEANUP_INTERVAL:
        return

    with cache_lock:
        expired = [k for k, v in memory_cache.items() if now >= v["reset_time"]]
        for k in expired:
            del memory_cache[k]
    if expired:
        logger.debug(f"🧹 Cleaned up {len(expired)} expired rate limit entries")

    last_cleanup_time = now


def _load_entry(key: str, window_seconds: int, client: redis.Redis, now: int) -> dict:
    """Start a window from Redis' count if another worker already opened one"""
    try:
        stored = client.get(key)
        ttl = client.ttl(key)
    except redis.RedisError as e:
        logger.warning(f"⚠️ Failed to load {key} from Redis, counting in memory only: {e}")
        stored, ttl = None, -1

    if stored and ttl > 0:
        return {"count": int(stored), "reset_time": now + ttl, "last_redis_sync": now}
    return {"count": 0, "reset_time": now + window_seconds, "last_redis_sync": now}


def check_rate_limit(
    key: str, limit: int, window_seconds: int, client: redis.Redis
) -> tuple[bool, int, int]:
    """
    Count one request against key.

    Returns:
        Tuple of (is_allowed, current_count, ttl_seconds)
    """
    now = int(time.time())
    cleanup_expired_cache(now)

    with cache_lock:
        entry = memory_cache.get(key)
        if entry is None:
            entry = memory_cache[key] = _load_entry(key, window_seconds, client, now)

        if now >= entry["reset_time"]:
            entry.update(count=0, reset_time=now + window_seconds, last_redis_sync=0)

        is_allowed = entry["count"] < limit
        if is_allowed:
            entry["count"] += 1

        if now - entry["last_redis_sync"] >= MEMORY_CACHE_SYNC_INTERVAL:
            try:
                client.set(key, entry["count"], ex=window_seconds)
                entry["last_redis_sync"] = now
            except redis.RedisError as e:
                logger.warning(f"⚠️ Failed to sync {key} to Redis: {e}")

        return is_allowed, entry["count"], max(0, entry["reset_time"] - now)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def create_rate_limiter(limit: int, window_seconds: int, key_prefix: str = "rate_limit"):
    """
    Create a per-IP rate limiting dependency.

    Example:
        booking_rate_limit = create_rate_limiter(10, 60, key_prefix="booking_submit")

        @router.post("")
        async def create_booking(data: BookingCreate, _: None = Depends(booking_rate_limit)):
            ...
    """

    async def rate_limiter(request: Request) -> None:
        key = f"{key_prefix}:{client_ip(request)}"
        try:
            is_allowed, count, ttl = check_rate_limit(
                key, limit, window_seconds, get_redis_client()
            )
        except redis.RedisError as e:
            logger.error(f"❌ Rate limiting unavailable for {key}: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Rate limiting service temporarily unavailable",
            ) from e

        if not is_allowed:
            logger.warning(f"🚫 Rate limit exceeded for {key} - {count}/{limit}")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                headers={"Retry-After": str(ttl)},
            )

        request.state.rate_limit_remaining = limit - count

    return rate_limiter


booking_rate_limit = create_rate_limiter(
    limit=config.BOOKING_RATE_LIMIT,
    window_seconds=config.BOOKING_RATE_WINDOW,
    key_prefix="booking_submit",
)
