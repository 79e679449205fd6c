"""
Redis proxy which traces statements

Every command called through a :class:`TraceableRedis` is forwarded to the
wrapped client, timed, memory profiled and stored as a
:class:`~redis_collector.traced_statement.TracedStatement`.
"""
import itertools
import logging
import threading
from functools import cached_property, partial
from typing import Any, Callable, Optional

import redis

from redis_collector.conf.config_collector import ConfigRedisCollector
from redis_collector.traced_statement import TracedStatement
from redis_collector.util.log import ConnectionLoggerAdapter, create_logger, format_arg
from redis_collector.util.memory import get_memory_usage

# Client plumbing returned without tracing
UNTRACED_METHODS = frozenset(
    {
        "close",
        "from_pool",
        "from_url",
        "get_connection_kwargs",
        "get_encoder",
        "parse_response",
        "set_response_callback",
    }
)

_connection_counter = itertools.count(1)


def next_connection_name() -> str:
    """Unique name for a connection registered without one."""
    return f"redis-{next(_connection_counter)}"


class TraceableRedis:
    """
    Wraps a Redis client and records every command executed through it.

    Public methods of the client are traced when accessed through the proxy,
    any other attribute is read from and written to the client directly.

    :param Any client: The Redis client to wrap, usually a ``redis.Redis``
    :param Optional[str] name: Name of the connection, generated if omitted
    :param Optional[ConfigRedisCollector] conf: Collector configuration
    :param tuple traced_exceptions: Errors recorded as failed statements
    """

    _OWN_ATTRIBUTES = frozenset(
        {"_client", "_name", "_conf", "_statements", "_lock", "_traced_exceptions"}
    )

    def __init__(
        self,
        client: Any,
        name: Optional[str] = None,
        conf: Optional[ConfigRedisCollector] = None,
        traced_exceptions: tuple[type[BaseException], ...] = (redis.RedisError,),
    ) -> None:
        object.__setattr__(self, "_client", client)
        object.__setattr__(self, "_name", name or next_connection_name())
        object.__setattr__(self, "_conf", conf)
        object.__setattr__(self, "_statements", [])
        object.__setattr__(self, "_lock", threading.Lock())
        object.__setattr__(self, "_traced_exceptions", traced_exceptions)

    def __repr__(self) -> str:
        return f"TraceableRedis({self._name}, {len(self._statements)} statements)"

    @property
    def client(self) -> Any:
        """The wrapped Redis client"""
        return self._client

    @property
    def name(self) -> str:
        return self._name

    @property
    def conf(self) -> ConfigRedisCollector:
        if self._conf is None:
            object.__setattr__(self, "_conf", ConfigRedisCollector())
        return self._conf

    @cached_property
    def logger(self) -> ConnectionLoggerAdapter:
        return ConnectionLoggerAdapter(create_logger(self.conf), self._name)

    def __getattr__(self, name: str) -> Any:
        # only reached for attributes missing on the proxy itself
        if name in self._OWN_ATTRIBUTES:
            raise AttributeError(name)
        attr = getattr(self._client, name)
        if callable(attr) and not name.startswith("_") and name not in UNTRACED_METHODS:
            return partial(self.invoke, name)
        return attr

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self._OWN_ATTRIBUTES or name in type(self).__dict__:
            object.__setattr__(self, name, value)
        else:
            setattr(self._client, name, value)

    def _sample_memory(self) -> int:
        return get_memory_usage(self.conf.memory_source)

    def invoke(self, method: str, *args: Any, **kwargs: Any) -> Any:
        """
        Profiles a call on a Redis method

        :param str method: Name of the client method
        :return: The result of the call, None if a swallowed error occurred
        :raises AttributeError: If the client has no such method
        """
        func: Callable[..., Any] = getattr(self._client, method)
        statement = TracedStatement(
            method, args, kwargs, binary_placeholder=self.conf.binary_placeholder
        )
        statement.start(start_memory=self._sample_memory())
        try:
            result = func(*args, **kwargs)
        except self._traced_exceptions as ex:
            self._finish(statement, ex)
            if self.conf.reraise_errors:
                raise
            return None
        self._finish(statement, None)
        self._log_success(statement, result)
        return result

    def _finish(
        self, statement: TracedStatement, exception: Optional[BaseException]
    ) -> None:
        statement.end(exception, end_memory=self._sample_memory())
        self.add_executed_statement(statement)
        if exception is not None:
            self.logger.warning(
                f"{statement.method} failed after {statement.duration:.6f}s - "
                f"{type(exception).__name__}: {exception}"
            )

    def _log_success(self, statement: TracedStatement, result: Any) -> None:
        result_str = format_arg(result, self.conf.max_log_arg_length)
        if statement.duration > self.conf.slow_statement_threshold:
            self.logger.info(
                f"SLOW: {statement.method} took {statement.duration:.6f}s - "
                f"Result: {result_str}"
            )
        elif self.logger.isEnabledFor(logging.DEBUG):
            args_str = ", ".join(
                format_arg(a, self.conf.max_log_arg_length) for a in statement.args
            )
            self.logger.debug(
                f"{statement.method}({args_str}) took {statement.duration:.6f}s - "
                f"Result: {result_str}"
            )

    def add_executed_statement(self, statement: TracedStatement) -> None:
        """Adds an executed TracedStatement"""
        with self._lock:
            self._statements.append(statement)

    def get_executed_statements(self) -> tuple[TracedStatement, ...]:
        """Returns the executed statements in execution order"""
        with self._lock:
            return tuple(self._statements)

    def get_failed_executed_statements(self) -> tuple[TracedStatement, ...]:
        """Returns the failed statements in execution order"""
        return tuple(s for s in self.get_executed_statements() if not s.is_success)

    def get_accumulated_statements_duration(self) -> float:
        """Returns the accumulated execution time of statements"""
        return sum((s.duration for s in self.get_executed_statements()), 0.0)

    def get_memory_usage(self) -> int:
        """Returns the memory used while performing statements"""
        return sum(s.memory_usage for s in self.get_executed_statements())

    def get_peak_memory_usage(self) -> int:
        """Returns the peak memory usage while performing statements"""
        return max(
            (s.end_memory or 0 for s in self.get_executed_statements()), default=0
        )
