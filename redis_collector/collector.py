"""
Collects data about Redis commands executed on several traced connections.
"""
import logging
import threading
from functools import cached_property
from typing import Any, Iterable, Optional

from redis_collector.conf.config_collector import ConfigRedisCollector
from redis_collector.exceptions import ConnectionNotFoundError
from redis_collector.formatter import BaseDataFormatter, DataFormatter
from redis_collector.time_collector import MeasureCollector
from redis_collector.traceable_redis import TraceableRedis
from redis_collector.traced_statement import TracedStatement
from redis_collector.util.log import create_logger


class RedisCollector:
    """
    Merges the statements of several :class:`TraceableRedis` into one report.

    Each statement is sent to the time collector at most once, however many
    times the data is collected.

    :param Optional[TraceableRedis] redis: Connection registered under the default name
    :param Optional[MeasureCollector] time_collector: Receives one measure per statement
    :param Optional[BaseDataFormatter] formatter: Formats durations and sizes
    :param Optional[ConfigRedisCollector] conf: Collector configuration
    """

    def __init__(
        self,
        redis: Optional[TraceableRedis] = None,
        time_collector: Optional[MeasureCollector] = None,
        formatter: Optional[BaseDataFormatter] = None,
        conf: Optional[ConfigRedisCollector] = None,
    ) -> None:
        self.conf = conf or ConfigRedisCollector()
        self.time_collector = time_collector
        self.formatter = formatter or DataFormatter()
        self._connections: dict[str, TraceableRedis] = {}
        self._emitted: set[TracedStatement] = set()
        self._emitted_lock = threading.Lock()
        if redis is not None:
            self.add_connection(redis, self.conf.default_connection_name)

    @cached_property
    def logger(self) -> logging.Logger:
        return create_logger(self.conf)

    def get_name(self) -> str:
        return self.conf.collector_name

    def add_connection(self, redis: TraceableRedis, name: Optional[str] = None) -> None:
        """
        Adds a new traced connection to be collected.

        A connection added under an existing name replaces the previous one.

        :param TraceableRedis redis: The traced connection
        :param Optional[str] name: Connection name, the connection's own name if omitted
        """
        name = name or redis.name
        if name in self._connections:
            self.logger.debug(f"Replacing redis connection {name}")
        self._connections[name] = redis

    def get_connections(self) -> dict[str, TraceableRedis]:
        """Returns the traced connections by name, in registration order"""
        return dict(self._connections)

    def get_connection(self, name: str) -> TraceableRedis:
        """
        Returns a traced connection by name.

        :raises ConnectionNotFoundError: If no connection has that name
        """
        if name not in self._connections:
            raise ConnectionNotFoundError(name, "connection is not registered")
        return self._connections[name]

    def collect(self, emit_measures: bool = True) -> dict[str, Any]:
        """
        Collects the statements and totals of every connection.

        Counts, durations and memory usage are added up across connections, the
        peak memory usage is the highest peak of any connection.

        :param bool emit_measures: Whether to send the statements to the time collector
        """
        data: dict[str, Any] = {
            "nb_statements": 0,
            "nb_failed_statements": 0,
            "accumulated_duration": 0.0,
            "memory_usage": 0,
            "peak_memory_usage": 0,
            "statements": [],
        }

        for name, redis in self.get_connections().items():
            try:
                redis_data = self.collect_redis(redis, emit_measures)
            except Exception as ex:
                self.logger.error(
                    f"Error collecting redis connection {name}: {ex}", exc_info=True
                )
                continue

            data["nb_statements"] += redis_data["nb_statements"]
            data["nb_failed_statements"] += redis_data["nb_failed_statements"]
            data["accumulated_duration"] += redis_data["accumulated_duration"]
            data["memory_usage"] += redis_data["memory_usage"]
            data["peak_memory_usage"] = max(
                data["peak_memory_usage"], redis_data["peak_memory_usage"]
            )
            data["statements"].extend(
                {**statement, "connection": name}
                for statement in redis_data["statements"]
            )

        data["accumulated_duration_str"] = self.formatter.format_duration(
            data["accumulated_duration"]
        )
        data["memory_usage_str"] = self.formatter.format_bytes(data["memory_usage"])
        data["peak_memory_usage_str"] = self.formatter.format_bytes(
            data["peak_memory_usage"]
        )
        return data

    def collect_redis(
        self, redis: TraceableRedis, emit_measures: bool = True
    ) -> dict[str, Any]:
        """
        Collects data from a single TraceableRedis instance.

        The statements are sent to the time collector only once the whole
        connection has been collected.
        """
        executed = redis.get_executed_statements()
        statements = [self.format_statement(statement) for statement in executed]
        accumulated_duration = redis.get_accumulated_statements_duration()
        memory_usage = redis.get_memory_usage()
        peak_memory_usage = redis.get_peak_memory_usage()
        data = {
            "nb_statements": len(statements),
            "nb_failed_statements": len(redis.get_failed_executed_statements()),
            "accumulated_duration": accumulated_duration,
            "accumulated_duration_str": self.formatter.format_duration(
                accumulated_duration
            ),
            "memory_usage": memory_usage,
            "memory_usage_str": self.formatter.format_bytes(memory_usage),
            "peak_memory_usage": peak_memory_usage,
            "peak_memory_usage_str": self.formatter.format_bytes(peak_memory_usage),
            "statements": statements,
        }
        if emit_measures:
            self._add_measures(executed)
        return data

    def emit_measures(self) -> None:
        """Sends the statements not yet in the time collector to it."""
        for name, redis in self.get_connections().items():
            try:
                executed = redis.get_executed_statements()
            except Exception as ex:
                self.logger.error(
                    f"Error reading redis connection {name}: {ex}", exc_info=True
                )
                continue
            self._add_measures(executed)

    def _add_measures(self, statements: Iterable[TracedStatement]) -> None:
        if self.time_collector is None:
            return
        with self._emitted_lock:
            for statement in statements:
                if statement in self._emitted:
                    continue
                self._emitted.add(statement)
                self.time_collector.add_measure(
                    statement.method, statement.start_time, statement.end_time
                )

    def format_statement(self, statement: TracedStatement) -> dict[str, Any]:
        """Presentation record of a statement"""
        end_memory = statement.end_memory or 0
        return {
            "method": statement.method,
            "params": statement.get_parameters(escape=self.conf.escape_parameters),
            "duration": statement.duration,
            "duration_str": self.formatter.format_duration(statement.duration),
            "memory": statement.memory_usage,
            "memory_str": self.formatter.format_bytes(statement.memory_usage),
            "end_memory": end_memory,
            "end_memory_str": self.formatter.format_bytes(end_memory),
            "is_success": statement.is_success,
            "error_code": statement.error_code,
            "error_message": statement.error_message,
        }
