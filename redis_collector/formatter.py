from abc import ABC, abstractmethod
from typing import Optional

BYTE_SUFFIXES = ("B", "KB", "MB", "GB", "TB")


def format_number(value: float, precision: int = 0) -> str:
    """Rounds a number and drops the trailing zeros of its decimals."""
    if precision <= 0:
        return str(int(round(value)))
    return f"{value:.{precision}f}".rstrip("0").rstrip(".")


class BaseDataFormatter(ABC):
    """Turns raw durations and byte counts into human readable text."""

    @abstractmethod
    def format_duration(self, seconds: float) -> str:
        """
        Formats a duration.

        :param float seconds: The duration in seconds
        :return: The readable duration
        """

    @abstractmethod
    def format_bytes(self, size: Optional[int], precision: int = 2) -> str:
        """
        Formats a size in bytes.

        :param Optional[int] size: The number of bytes, may be negative
        :param int precision: Decimals kept
        :return: The readable size
        """


class DataFormatter(BaseDataFormatter):
    """Default formatter, microseconds up to seconds and bytes up to terabytes."""

    def format_duration(self, seconds: float) -> str:
        if seconds < 0.001:
            return f"{format_number(seconds * 1_000_000)}μs"
        if seconds < 0.1:
            return f"{format_number(seconds * 1000, 2)}ms"
        if seconds < 1:
            return f"{format_number(seconds * 1000)}ms"
        return f"{format_number(seconds, 2)}s"

    def format_bytes(self, size: Optional[int], precision: int = 2) -> str:
        if not size:
            return "0B"
        sign = "-" if size < 0 else ""
        value = float(abs(size))
        exponent = 0
        while value >= 1024 and exponent < len(BYTE_SUFFIXES) - 1:
            value /= 1024
            exponent += 1
        return f"{sign}{format_number(value, precision)}{BYTE_SUFFIXES[exponent]}"
