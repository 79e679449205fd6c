from redis_collector.collector import RedisCollector
from redis_collector.conf.config_collector import ConfigRedisCollector, MemorySource
from redis_collector.formatter import BaseDataFormatter, DataFormatter
from redis_collector.time_collector import Measure, TimeDataCollector
from redis_collector.traceable_redis import TraceableRedis
from redis_collector.traced_statement import TracedStatement
from redis_collector.util.redis_client import (
    clear_pools,
    get_redis_client,
    get_traceable_redis,
)

__all__ = [
    "BaseDataFormatter",
    "ConfigRedisCollector",
    "DataFormatter",
    "Measure",
    "MemorySource",
    "RedisCollector",
    "TimeDataCollector",
    "TraceableRedis",
    "TracedStatement",
    "clear_pools",
    "get_redis_client",
    "get_traceable_redis",
]
