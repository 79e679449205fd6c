import threading
from typing import Optional

import redis

from redis_collector.conf.config_collector import ConfigRedisCollector
from redis_collector.conf.config_redis import ConfigRedis
from redis_collector.traceable_redis import TraceableRedis

_REDIS_POOLS: dict[str, redis.ConnectionPool] = {}
_POOLS_LOCK = threading.RLock()


def get_pool_key(conf: ConfigRedis) -> str:
    if conf.redis_url:
        return conf.redis_url
    return f"{conf.redis_host}:{conf.redis_port}:{conf.redis_db}:{conf.redis_username or ''}:{conf.redis_password or ''}"


def get_redis_client(conf: ConfigRedis) -> redis.Redis:
    """Get a Redis client using connection pooling."""
    pool_key = get_pool_key(conf)

    with _POOLS_LOCK:
        if pool_key not in _REDIS_POOLS:
            max_connections = conf.redis_pool_max_connections
            if conf.redis_url:
                _REDIS_POOLS[pool_key] = redis.ConnectionPool.from_url(
                    conf.redis_url,
                    max_connections=max_connections,
                    socket_timeout=conf.socket_timeout,
                    socket_connect_timeout=conf.socket_connect_timeout,
                    socket_keepalive=True,
                    health_check_interval=conf.redis_pool_health_check_interval,
                )
            else:
                _REDIS_POOLS[pool_key] = redis.ConnectionPool(
                    host=conf.redis_host,
                    port=conf.redis_port,
                    db=conf.redis_db,
                    username=None if not conf.redis_username else conf.redis_username,
                    password=None if not conf.redis_password else conf.redis_password,
                    socket_timeout=conf.socket_timeout,
                    socket_connect_timeout=conf.socket_connect_timeout,
                    socket_keepalive=True,
                    health_check_interval=conf.redis_pool_health_check_interval,
                    max_connections=max_connections,
                )

    return redis.Redis(connection_pool=_REDIS_POOLS[pool_key])


def get_traceable_redis(
    conf: ConfigRedisCollector, name: Optional[str] = None
) -> TraceableRedis:
    """Get a pooled Redis client wrapped in a TraceableRedis."""
    return TraceableRedis(get_redis_client(conf), name=name, conf=conf)


def clear_pools() -> None:
    """Disconnects and forgets every shared connection pool."""
    with _POOLS_LOCK:
        for pool in _REDIS_POOLS.values():
            pool.disconnect()
        _REDIS_POOLS.clear()
