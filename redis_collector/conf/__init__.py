from .config_base import ConfigCollectorBase
from .config_collector import ConfigRedisCollector, MemorySource
from .config_redis import ConfigRedis

__all__ = [
    "ConfigCollectorBase",
    "ConfigRedis",
    "ConfigRedisCollector",
    "MemorySource",
]
