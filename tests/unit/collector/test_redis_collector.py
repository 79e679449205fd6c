import logging
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, Mock

import pytest

from redis_collector.collector import RedisCollector
from redis_collector.conf.config_collector import ConfigRedisCollector
from redis_collector.exceptions import ConnectionNotFoundError
from redis_collector.formatter import BaseDataFormatter
from redis_collector.time_collector import TimeDataCollector
from redis_collector.traceable_redis import TraceableRedis
from redis_collector.traced_statement import TracedStatement
from tests.util import FakeRedis, FakeRedisError

if TYPE_CHECKING:
    from _pytest.logging import LogCaptureFixture

STATEMENT_KEYS = {
    "method",
    "params",
    "duration",
    "duration_str",
    "memory",
    "memory_str",
    "end_memory",
    "end_memory_str",
    "is_success",
    "error_code",
    "error_message",
    "connection",
}


def add_statement(
    redis: TraceableRedis,
    method: str,
    start: float,
    end: float,
    start_memory: int = 0,
    end_memory: int = 0,
    exception: Exception | None = None,
) -> TracedStatement:
    statement = TracedStatement(method, ("key",))
    statement.start(start_time=start, start_memory=start_memory)
    statement.end(exception, end_time=end, end_memory=end_memory)
    redis.add_executed_statement(statement)
    return statement


@pytest.fixture
def connection_a(conf: ConfigRedisCollector) -> TraceableRedis:
    redis = TraceableRedis(FakeRedis(), name="a", conf=conf)
    add_statement(redis, "get", 1.0, 1.5, 100, 300)
    add_statement(redis, "set", 2.0, 2.25, 300, 250)
    return redis


@pytest.fixture
def connection_b(conf: ConfigRedisCollector) -> TraceableRedis:
    redis = TraceableRedis(FakeRedis(), name="b", conf=conf)
    add_statement(redis, "hget", 3.0, 3.5, 0, 200)
    add_statement(redis, "hset", 4.0, 4.5, 200, 210, FakeRedisError("oops", 5))
    add_statement(redis, "del", 5.0, 5.25, 210, 220)
    return redis


@pytest.fixture
def collector(
    conf: ConfigRedisCollector, connection_a: TraceableRedis, connection_b: TraceableRedis
) -> RedisCollector:
    collector = RedisCollector(conf=conf)
    collector.add_connection(connection_a, "A")
    collector.add_connection(connection_b, "B")
    return collector


def test_collect_counts_and_tags(collector: RedisCollector) -> None:
    data = collector.collect()

    assert data["nb_statements"] == 5
    assert data["nb_failed_statements"] == 1
    assert len(data["statements"]) == 5
    assert [s["connection"] for s in data["statements"]] == ["A", "A", "B", "B", "B"]
    assert [s["method"] for s in data["statements"]] == [
        "get",
        "set",
        "hget",
        "hset",
        "del",
    ]
    for statement in data["statements"]:
        assert set(statement) == STATEMENT_KEYS


def test_collect_totals(collector: RedisCollector) -> None:
    data = collector.collect()

    assert data["accumulated_duration"] == pytest.approx(0.75 + 1.25)
    assert data["memory_usage"] == (200 - 50) + (200 + 10 + 10)
    assert data["accumulated_duration_str"] == "2s"
    assert data["memory_usage_str"] == "370B"


def test_peak_memory_is_max_not_sum(
    collector: RedisCollector, connection_a: TraceableRedis, connection_b: TraceableRedis
) -> None:
    data = collector.collect()
    assert connection_a.get_peak_memory_usage() == 300
    assert connection_b.get_peak_memory_usage() == 220
    assert data["peak_memory_usage"] == 300
    assert data["peak_memory_usage_str"] == "300B"


def test_failed_statement_record(collector: RedisCollector) -> None:
    failed = [s for s in collector.collect()["statements"] if not s["is_success"]]
    assert len(failed) == 1
    assert failed[0]["method"] == "hset"
    assert failed[0]["error_code"] == 5
    assert failed[0]["error_message"] == "oops"
    assert failed[0]["connection"] == "B"


def test_statement_record_values(collector: RedisCollector) -> None:
    first = collector.collect()["statements"][0]
    assert first == {
        "method": "get",
        "params": {"0": "key"},
        "duration": 0.5,
        "duration_str": "500ms",
        "memory": 200,
        "memory_str": "200B",
        "end_memory": 300,
        "end_memory_str": "300B",
        "is_success": True,
        "error_code": 0,
        "error_message": "",
        "connection": "A",
    }


def test_collect_redis_single_connection(
    collector: RedisCollector, connection_b: TraceableRedis
) -> None:
    data = collector.collect_redis(connection_b)
    assert data["nb_statements"] == 3
    assert data["nb_failed_statements"] == 1
    assert data["memory_usage"] == 220
    assert data["memory_usage_str"] == "220B"
    assert data["peak_memory_usage"] == 220
    assert "connection" not in data["statements"][0]


def test_empty_collector(conf: ConfigRedisCollector) -> None:
    data = RedisCollector(conf=conf).collect()
    assert data == {
        "nb_statements": 0,
        "nb_failed_statements": 0,
        "accumulated_duration": 0.0,
        "accumulated_duration_str": "0μs",
        "memory_usage": 0,
        "memory_usage_str": "0B",
        "peak_memory_usage": 0,
        "peak_memory_usage_str": "0B",
        "statements": [],
    }


def test_connection_without_statements_adds_zero(
    collector: RedisCollector, conf: ConfigRedisCollector
) -> None:
    before = collector.collect()
    collector.add_connection(TraceableRedis(FakeRedis(), conf=conf), "empty")
    after = collector.collect()
    for key in ("nb_statements", "accumulated_duration", "memory_usage"):
        assert after[key] == before[key]
    assert after["peak_memory_usage"] == before["peak_memory_usage"]


def test_time_collector_receives_measures(
    conf: ConfigRedisCollector, connection_a: TraceableRedis
) -> None:
    time_collector = MagicMock()
    collector = RedisCollector(connection_a, time_collector=time_collector, conf=conf)
    collector.collect()

    assert time_collector.add_measure.call_count == 2
    time_collector.add_measure.assert_any_call("get", 1.0, 1.5)
    time_collector.add_measure.assert_any_call("set", 2.0, 2.25)


def test_measures_not_emitted_when_disabled(
    conf: ConfigRedisCollector, connection_a: TraceableRedis
) -> None:
    time_collector = MagicMock()
    collector = RedisCollector(connection_a, time_collector=time_collector, conf=conf)
    collector.collect(emit_measures=False)
    time_collector.add_measure.assert_not_called()


def test_measures_emitted_once_per_statement(
    conf: ConfigRedisCollector, connection_a: TraceableRedis
) -> None:
    time_collector = MagicMock()
    collector = RedisCollector(connection_a, time_collector=time_collector, conf=conf)
    collector.collect()
    collector.collect()
    collector.emit_measures()
    assert time_collector.add_measure.call_count == 2

    add_statement(connection_a, "del", 3.0, 3.5)
    collector.collect()
    assert time_collector.add_measure.call_count == 3
    time_collector.add_measure.assert_called_with("del", 3.0, 3.5)


def test_emit_measures_without_collecting(
    conf: ConfigRedisCollector, connection_a: TraceableRedis
) -> None:
    time_collector = TimeDataCollector(request_start_time=0.0)
    collector = RedisCollector(connection_a, time_collector=time_collector, conf=conf)
    collector.emit_measures()
    assert [m.label for m in time_collector.get_measures()] == ["get", "set"]


def test_failed_connection_emits_no_measures(
    conf: ConfigRedisCollector, connection_a: TraceableRedis
) -> None:
    half_broken = Mock(spec=TraceableRedis)
    half_broken.get_executed_statements.return_value = (
        connection_a.get_executed_statements()
    )
    half_broken.get_accumulated_statements_duration.return_value = 0.75
    half_broken.get_memory_usage.return_value = 150
    half_broken.get_peak_memory_usage.side_effect = RuntimeError("lost connection")
    time_collector = MagicMock()
    collector = RedisCollector(time_collector=time_collector, conf=conf)
    collector.add_connection(half_broken, "half")

    data = collector.collect()

    assert data["nb_statements"] == 0
    time_collector.add_measure.assert_not_called()


def test_constructor_registers_default_connection(
    connection_a: TraceableRedis,
) -> None:
    collector = RedisCollector(connection_a)
    assert collector.get_connections() == {"default": connection_a}
    assert collector.get_name() == "redis"


def test_add_connection_defaults_to_connection_name(
    conf: ConfigRedisCollector, connection_a: TraceableRedis
) -> None:
    collector = RedisCollector(conf=conf)
    collector.add_connection(connection_a)
    assert list(collector.get_connections()) == ["a"]


def test_add_connection_last_write_wins(
    conf: ConfigRedisCollector,
    connection_a: TraceableRedis,
    connection_b: TraceableRedis,
) -> None:
    collector = RedisCollector(conf=conf)
    collector.add_connection(connection_a, "main")
    collector.add_connection(connection_b, "main")
    assert collector.get_connections() == {"main": connection_b}
    assert collector.collect()["nb_statements"] == 3


def test_get_connections_returns_copy(collector: RedisCollector) -> None:
    collector.get_connections().clear()
    assert list(collector.get_connections()) == ["A", "B"]


def test_get_connection(collector: RedisCollector, connection_a: TraceableRedis) -> None:
    assert collector.get_connection("A") is connection_a
    with pytest.raises(ConnectionNotFoundError) as exc_info:
        collector.get_connection("missing")
    assert "missing" in str(exc_info.value)


def test_misbehaving_connection_is_skipped(
    collector: RedisCollector, caplog: "LogCaptureFixture"
) -> None:
    broken = Mock(spec=TraceableRedis)
    broken.get_executed_statements.side_effect = RuntimeError("broken connection")
    collector.add_connection(broken, "broken")
    collector.logger.addHandler(caplog.handler)

    data = collector.collect()

    assert data["nb_statements"] == 5
    assert "broken" not in {s["connection"] for s in data["statements"]}
    assert any("broken connection" in r.getMessage() for r in caplog.records)


def test_binary_parameters_in_records(conf: ConfigRedisCollector) -> None:
    redis = TraceableRedis(FakeRedis(), name="bin", conf=conf)
    redis.set("blob", b"\xff\x00\xfe")
    params = RedisCollector(redis, conf=conf).collect()["statements"][0]["params"]
    assert params == {"0": "blob", "1": "[BINARY DATA]"}


def test_parameters_not_escaped_when_disabled(conf: ConfigRedisCollector) -> None:
    conf.escape_parameters = False
    redis = TraceableRedis(FakeRedis(), name="raw", conf=conf)
    redis.set("<b>", 3)
    params = RedisCollector(redis, conf=conf).collect()["statements"][0]["params"]
    assert params == {"0": "<b>", "1": 3}


def test_injected_formatter(
    conf: ConfigRedisCollector, connection_a: TraceableRedis
) -> None:
    formatter = Mock(spec=BaseDataFormatter)
    formatter.format_duration.return_value = "D"
    formatter.format_bytes.return_value = "B"
    data = RedisCollector(connection_a, formatter=formatter, conf=conf).collect()

    assert data["accumulated_duration_str"] == "D"
    assert data["memory_usage_str"] == "B"
    assert data["statements"][0]["duration_str"] == "D"
    assert data["statements"][0]["end_memory_str"] == "B"
    formatter.format_duration.assert_any_call(0.5)


def test_collector_logger_uses_configuration(conf: ConfigRedisCollector) -> None:
    conf.collector_name = "sessions"
    conf.logging_level = "warning"
    logger = RedisCollector(conf=conf).logger
    assert logger.name == "redis_collector.sessions"
    assert logger.level == logging.WARNING
