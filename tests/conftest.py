import logging
from collections.abc import Generator

import pytest

from redis_collector.conf.config_collector import ConfigRedisCollector, MemorySource
from redis_collector.traceable_redis import TraceableRedis
from redis_collector.util.log import ROOT_LOGGER_NAME
from tests.util import FakeRedis


@pytest.fixture
def fake_client() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def conf() -> ConfigRedisCollector:
    config = ConfigRedisCollector()
    config.memory_source = MemorySource.DISABLED
    return config


@pytest.fixture
def traced(fake_client: FakeRedis, conf: ConfigRedisCollector) -> TraceableRedis:
    return TraceableRedis(fake_client, name="main", conf=conf)


@pytest.fixture(autouse=True)
def reset_collector_loggers() -> Generator[None, None, None]:
    """Undo the handlers, levels and propagation set by create_logger."""
    yield
    for name in list(logging.root.manager.loggerDict):
        if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
            collector_logger = logging.getLogger(name)
            collector_logger.handlers = []
            collector_logger.propagate = True
            collector_logger.setLevel(logging.NOTSET)
