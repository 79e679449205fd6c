"""
Global redis collector exception classes.
"""
from typing import Optional


class RedisCollectorError(Exception):
    """Base class for all redis collector related errors."""


class StatementStateError(RedisCollectorError):
    """Error raised when a traced statement is started or ended out of order."""

    def __init__(self, method: str, message: str) -> None:
        self.method = method
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"StatementStateError({self.method}): {self.message}"


class ConnectionNotFoundError(RedisCollectorError):
    """Error raised when a connection name is not registered in the collector."""

    def __init__(self, name: str, message: Optional[str] = None) -> None:
        self.name = name
        self.message = message

    def __str__(self) -> str:
        if self.message:
            return f"ConnectionNotFoundError({self.name}): {self.message}"
        return f"ConnectionNotFoundError({self.name})"


class MeasureNotStartedError(RedisCollectorError):
    """Error raised when stopping a measure that was never started."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __str__(self) -> str:
        return f"MeasureNotStartedError({self.name})"


class CollectorImportError(RedisCollectorError):
    """Error raised when a collector instance cannot be loaded from a path."""
