import tracemalloc

import psutil

from redis_collector.conf.config_collector import MemorySource


def get_rss_memory() -> int:
    """Current resident set size of this process in bytes."""
    return psutil.Process().memory_info().rss


def get_tracemalloc_memory() -> int:
    """Size in bytes of the memory blocks currently traced by tracemalloc."""
    if not tracemalloc.is_tracing():
        tracemalloc.start()
    current, _ = tracemalloc.get_traced_memory()
    return current


def get_memory_usage(source: MemorySource = MemorySource.RSS) -> int:
    """
    Take a memory sample from the given source.

    Every source reports current usage, so a sample can be lower than the
    previous one.

    :param MemorySource source: Where to read the memory usage from.
    :return: The memory usage in bytes, 0 if sampling is disabled.
    """
    if source == MemorySource.TRACEMALLOC:
        return get_tracemalloc_memory()
    if source == MemorySource.DISABLED:
        return 0
    return get_rss_memory()
