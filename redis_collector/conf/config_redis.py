from cistell import ConfigField

from redis_collector.conf.config_base import ConfigCollectorBase


class ConfigRedis(ConfigCollectorBase):
    """
    Connection settings for the Redis clients created by the collector.

    These values are only used when the client is built by
    :func:`~redis_collector.util.redis_client.get_redis_client`. A client
    created elsewhere and wrapped directly in a
    :class:`~redis_collector.traceable_redis.TraceableRedis` keeps its own settings.

    :cvar ConfigField[str] redis_username:
        The username to use when connecting to the Redis server. Defaults to an empty
        string, indicating that no username is provided.

    :cvar ConfigField[str] redis_password:
        The password to use when connecting to the Redis server. Defaults to an empty
        string, indicating that no password is provided.

    :cvar ConfigField[str] redis_host:
        The hostname of the Redis server. Defaults to 'localhost'.

    :cvar ConfigField[int] redis_port:
        The port number on which the Redis server is listening. Defaults to 6379.

    :cvar ConfigField[int] redis_db:
        The database number to connect to on the Redis server. Defaults to 0.

    :cvar ConfigField[str] redis_url:
        The URL of the Redis server. Defaults to an empty string.
        If specified will override all other connection parameters.

    :cvar ConfigField[float] socket_timeout:
        Timeout in seconds for socket operations. Defaults to 5.0 seconds.

    :cvar ConfigField[float] socket_connect_timeout:
        Timeout in seconds for socket connection establishment. Defaults to 5.0 seconds.

    :cvar ConfigField[int] redis_pool_max_connections:
        Maximum number of connections to keep in the Redis connection pool.
        Default is 100.

    :cvar ConfigField[float] redis_pool_health_check_interval:
        Interval in seconds for checking the health of connections in the pool.
        Default is 30.0 seconds.
    """

    redis_username = ConfigField("")
    redis_password = ConfigField("")
    redis_host = ConfigField("localhost")
    redis_port = ConfigField(6379)
    redis_db = ConfigField(0)
    redis_url = ConfigField("")

    socket_timeout = ConfigField(5.0)
    socket_connect_timeout = ConfigField(5.0)

    redis_pool_max_connections = ConfigField(100)
    redis_pool_health_check_interval = ConfigField(30.0)
