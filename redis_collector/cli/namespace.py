import argparse
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from redis_collector.collector import RedisCollector


@dataclass
class CollectorCLINamespace(argparse.Namespace):
    """
    A dataclass for holding command line arguments in the redis collector CLI.

    :cvar Optional[str] collector:
        The module and name of the collector instance. Default is None.
    :cvar Optional[bool] verbose:
        Flag to increase output verbosity. Default is None.
    :cvar Optional[RedisCollector] collector_instance:
        The loaded collector, set after parsing arguments.
    """

    collector: str | None = None
    verbose: bool | None = None
    collector_instance: Optional["RedisCollector"] = None
