from enum import StrEnum, auto

from cistell import ConfigField

from redis_collector.conf.config_redis import ConfigRedis


class MemorySource(StrEnum):
    """
    Controls where the memory samples of each traced statement come from.

    :cvar RSS:
        Current resident set size of the process, from ``psutil``.
    :cvar TRACEMALLOC:
        Memory currently traced by ``tracemalloc``. Tracing starts on first use.
    :cvar DISABLED:
        Do not sample memory, every sample is 0.
    """

    RSS = auto()
    TRACEMALLOC = auto()
    DISABLED = auto()


class ConfigRedisCollector(ConfigRedis):
    """
    Main config of the redis collector.

    :cvar str collector_name:
        Name under which the collected data is published. Default 'redis'.
    :cvar str default_connection_name:
        Connection name used for the client passed to the collector constructor.
        Default 'default'.
    :cvar bool reraise_errors:
        If True, a Redis error raised by a traced command is recorded and then
        raised again to the caller. If False it is only recorded and the command
        returns None. Default True.
    :cvar str binary_placeholder:
        Text that replaces parameters holding binary (non UTF-8) data.
    :cvar bool escape_parameters:
        If True, parameters are HTML escaped in the collected data. Default True.
    :cvar MemorySource memory_source:
        Where memory samples are taken from: RSS, TRACEMALLOC or DISABLED.
        Default RSS.
    :cvar float slow_statement_threshold:
        Statements taking longer than this many seconds are logged at INFO level.
        Default 0.1.
    :cvar int max_log_arg_length:
        Maximum length of an argument or result in the log messages. Default 100.
    :cvar str logging_level:
        The logging level of the collector ('info', 'warning', 'error', etc.).
    """

    collector_name = ConfigField("redis")
    default_connection_name = ConfigField("default")
    reraise_errors = ConfigField(True)
    binary_placeholder = ConfigField("[BINARY DATA]")
    escape_parameters = ConfigField(True)
    memory_source = ConfigField(MemorySource.RSS)
    slow_statement_threshold = ConfigField(0.1)
    max_log_arg_length = ConfigField(100)
    logging_level = ConfigField("info")
