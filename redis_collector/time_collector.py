"""
Timeline of named measures.

The :class:`RedisCollector` publishes one measure per traced statement to any
object implementing :class:`MeasureCollector`. :class:`TimeDataCollector` is the
default implementation, keeping the measures relative to a request start time.
"""
import threading
import time
from typing import Any, NamedTuple, Optional, Protocol

from redis_collector.exceptions import MeasureNotStartedError
from redis_collector.formatter import BaseDataFormatter, DataFormatter


class MeasureCollector(Protocol):
    """Anything able to receive a timed measure."""

    def add_measure(self, label: str, start: float, end: float) -> Any:
        ...


class Measure(NamedTuple):
    """A timed section of the request."""

    label: str
    start: float
    end: float
    params: dict[str, Any]
    collector: Optional[str]

    @property
    def duration(self) -> float:
        return self.end - self.start


class TimeDataCollector:
    """
    Collects measures on a timeline starting at ``request_start_time``.

    :param Optional[float] request_start_time: Start of the timeline, now if omitted
    :param Optional[BaseDataFormatter] formatter: Formatter for the durations
    """

    def __init__(
        self,
        request_start_time: Optional[float] = None,
        formatter: Optional[BaseDataFormatter] = None,
    ) -> None:
        self.request_start_time = (
            time.time() if request_start_time is None else request_start_time
        )
        self.request_end_time: Optional[float] = None
        self.formatter = formatter or DataFormatter()
        self._started_measures: dict[str, tuple[str, float, Optional[str]]] = {}
        self._measures: list[Measure] = []
        self._lock = threading.Lock()

    def start_measure(
        self, name: str, label: Optional[str] = None, collector: Optional[str] = None
    ) -> None:
        """Starts an open measure, closed later by :meth:`stop_measure`."""
        with self._lock:
            self._started_measures[name] = (label or name, time.time(), collector)

    def has_started_measure(self, name: str) -> bool:
        with self._lock:
            return name in self._started_measures

    def stop_measure(self, name: str, params: Optional[dict[str, Any]] = None) -> None:
        """
        Stops an open measure and stores it.

        :raises MeasureNotStartedError: If no measure was started with that name
        """
        end = time.time()
        with self._lock:
            if name not in self._started_measures:
                raise MeasureNotStartedError(name)
            label, start, collector = self._started_measures.pop(name)
        self.add_measure(label, start, end, params, collector)

    def add_measure(
        self,
        label: str,
        start: float,
        end: float,
        params: Optional[dict[str, Any]] = None,
        collector: Optional[str] = None,
    ) -> None:
        """Stores a finished measure."""
        measure = Measure(label, start, end, params or {}, collector)
        with self._lock:
            self._measures.append(measure)

    def get_measures(self) -> list[Measure]:
        with self._lock:
            return list(self._measures)

    def get_request_duration(self) -> float:
        end = self.request_end_time or time.time()
        return end - self.request_start_time

    def collect(self) -> dict[str, Any]:
        """
        Returns the timeline: overall start, end and duration plus every measure
        with its position relative to the request start.
        """
        end = self.request_end_time or time.time()
        measures = []
        for measure in sorted(self.get_measures(), key=lambda m: m.start):
            measures.append(
                {
                    "label": measure.label,
                    "start": measure.start,
                    "relative_start": measure.start - self.request_start_time,
                    "end": measure.end,
                    "relative_end": measure.end - self.request_start_time,
                    "duration": measure.duration,
                    "duration_str": self.formatter.format_duration(measure.duration),
                    "params": measure.params,
                    "collector": measure.collector,
                }
            )
        duration = end - self.request_start_time
        return {
            "start": self.request_start_time,
            "end": end,
            "duration": duration,
            "duration_str": self.formatter.format_duration(duration),
            "measures": measures,
        }
