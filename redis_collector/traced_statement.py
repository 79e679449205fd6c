"""
Record of a single command executed through a traced Redis connection.

A :class:`TracedStatement` is filled exactly twice: once when the command
starts and once when it ends. After :meth:`TracedStatement.end` it is
read-only and only exposes its data through properties.
"""
import html
import time
from typing import Any, Optional

from redis_collector.exceptions import StatementStateError
from redis_collector.util.memory import get_memory_usage

BINARY_DATA_PLACEHOLDER = "[BINARY DATA]"


def check_parameter(value: Any, placeholder: str = BINARY_DATA_PLACEHOLDER) -> Any:
    """
    Replace binary data in a parameter by a placeholder.

    Bytes holding valid UTF-8 are decoded to text. Dicts, lists, tuples and sets
    are checked recursively, dict keys included. Anything else is kept as is.

    :param Any value: The parameter value
    :param str placeholder: Text used for non UTF-8 data
    :return: The sanitized value
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            return placeholder
    if isinstance(value, dict):
        return {
            check_parameter(k, placeholder): check_parameter(v, placeholder)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [check_parameter(v, placeholder) for v in value]
    if isinstance(value, tuple):
        return tuple(check_parameter(v, placeholder) for v in value)
    if isinstance(value, (set, frozenset)):
        return {check_parameter(v, placeholder) for v in value}
    return value


class TracedStatement:
    """
    Holds information about a Redis method call.

    :param str method: Name of the called method
    :param tuple args: Positional arguments of the call
    :param Optional[dict] kwargs: Keyword arguments of the call
    :param str binary_placeholder: Text replacing binary parameters
    """

    def __init__(
        self,
        method: str,
        args: tuple = (),
        kwargs: Optional[dict[str, Any]] = None,
        binary_placeholder: str = BINARY_DATA_PLACEHOLDER,
    ) -> None:
        self._method = method
        self._args = tuple(check_parameter(a, binary_placeholder) for a in args)
        self._kwargs = {
            k: check_parameter(v, binary_placeholder)
            for k, v in (kwargs or {}).items()
        }
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None
        self._start_memory: Optional[int] = None
        self._end_memory: Optional[int] = None
        self._exception: Optional[BaseException] = None

    def __repr__(self) -> str:
        status = "pending"
        if self.is_finished:
            status = "success" if self.is_success else "failed"
        return f"TracedStatement({self._method}, {status})"

    def start(
        self, start_time: Optional[float] = None, start_memory: Optional[int] = None
    ) -> None:
        """
        Marks the beginning of the call.

        :param Optional[float] start_time: Timestamp to use instead of the current time
        :param Optional[int] start_memory: Memory sample to use instead of a new one
        :raises StatementStateError: If the statement was already started
        """
        if self._start_time is not None:
            raise StatementStateError(self._method, "statement already started")
        self._start_time = time.time() if start_time is None else start_time
        self._start_memory = (
            get_memory_usage() if start_memory is None else start_memory
        )

    def end(
        self,
        exception: Optional[BaseException] = None,
        end_time: Optional[float] = None,
        end_memory: Optional[int] = None,
    ) -> None:
        """
        Marks the end of the call.

        :param Optional[BaseException] exception: The error raised by the call, if any
        :param Optional[float] end_time: Timestamp to use instead of the current time
        :param Optional[int] end_memory: Memory sample to use instead of a new one
        :raises StatementStateError: If the statement is not started or already ended
        """
        if self._start_time is None:
            raise StatementStateError(self._method, "statement not started")
        if self._end_time is not None:
            raise StatementStateError(self._method, "statement already ended")
        self._end_time = time.time() if end_time is None else end_time
        self._end_memory = get_memory_usage() if end_memory is None else end_memory
        self._exception = exception

    @property
    def is_finished(self) -> bool:
        return self._end_time is not None

    @property
    def method(self) -> str:
        """The method called"""
        return self._method

    @property
    def args(self) -> tuple:
        return self._args

    @property
    def kwargs(self) -> dict[str, Any]:
        return dict(self._kwargs)

    def get_parameters(self, escape: bool = True) -> dict[str, Any]:
        """
        Returns the parameters used with the method, ready for display.

        Positional arguments are keyed by their index, keyword arguments by name.

        :param bool escape: Whether to HTML escape the values
        :return: Mapping of parameter key to its displayed value
        """
        params: dict[str, Any] = {str(i): arg for i, arg in enumerate(self._args)}
        params.update(self._kwargs)
        if not escape:
            return params
        return {name: html.escape(str(value)) for name, value in params.items()}

    @property
    def start_time(self) -> Optional[float]:
        return self._start_time

    @property
    def end_time(self) -> Optional[float]:
        return self._end_time

    @property
    def duration(self) -> float:
        """Duration in seconds of the execution, 0 until the statement ends"""
        if self._start_time is None or self._end_time is None:
            return 0.0
        return self._end_time - self._start_time

    @property
    def start_memory(self) -> Optional[int]:
        return self._start_memory

    @property
    def end_memory(self) -> Optional[int]:
        return self._end_memory

    @property
    def memory_usage(self) -> int:
        """Memory delta in bytes during the execution, 0 until the statement ends"""
        if self._start_memory is None or self._end_memory is None:
            return 0
        return self._end_memory - self._start_memory

    @property
    def is_success(self) -> bool:
        return self._exception is None

    @property
    def exception(self) -> Optional[BaseException]:
        return self._exception

    @property
    def error_code(self) -> int:
        """The code of the exception: its ``code``, or its ``errno``, or 0"""
        if self._exception is None:
            return 0
        for attr in ("code", "errno"):
            code = getattr(self._exception, attr, None)
            if isinstance(code, int):
                return code
        return 0

    @property
    def error_message(self) -> str:
        if self._exception is None:
            return ""
        return str(self._exception)
