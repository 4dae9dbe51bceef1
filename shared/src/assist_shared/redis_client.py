import redis.asyncio as aioredis
from redis.asyncio import Redis

# One pool per Redis URL, shared by every client in the process
_pools: dict[str, aioredis.ConnectionPool] = {}


def get_redis(redis_url: str) -> Redis:
    """Return a client on the process-wide pool for ``redis_url``.

    Responses stay as bytes; the stream helpers decode them. Call
    close_redis() once on shutdown.
    """
    pool = _pools.get(redis_url)
    if pool is None:
        pool = aioredis.ConnectionPool.from_url(redis_url, max_connections=10)
        _pools[redis_url] = pool
    return aioredis.Redis(connection_pool=pool)


async def close_redis() -> None:
    """Disconnect every pool created by get_redis()."""
    while _pools:
        _url, pool = _pools.popitem()
        await pool.aclose()
