import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from logging import LogRecord

    from redis_collector.conf.config_collector import ConfigRedisCollector

ROOT_LOGGER_NAME = "redis_collector"


class Colors:
    """ANSI color codes for terminal coloring."""

    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    RED_BG = "\033[41m"
    WHITE = "\033[37m"


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors the level, logger name and message with ANSI codes.

    Messages starting with a ``[...]`` prefix, as produced by
    :class:`ConnectionLoggerAdapter`, get the prefix colored separately.
    """

    LEVEL_COLORS = {
        "DEBUG": Colors.CYAN,
        "INFO": Colors.GREEN,
        "WARNING": Colors.YELLOW,
        "ERROR": Colors.RED,
        "CRITICAL": f"{Colors.WHITE}{Colors.RED_BG}",
    }

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: Literal["%", "{", "$"] = "%",
        validate: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style, validate=validate)

    def format(self, record: "LogRecord") -> str:
        levelname = record.levelname
        name = record.name
        msg = record.msg

        if levelname in self.LEVEL_COLORS:
            color = self.LEVEL_COLORS[levelname]
            record.levelname = f"{color}{levelname:<8}{Colors.RESET}"
            record.name = f"{Colors.BLUE}{name}{Colors.RESET}"

            if isinstance(record.msg, str) and record.msg.startswith("["):
                closing_bracket = record.msg.find("]")
                if closing_bracket != -1:
                    prefix = record.msg[: closing_bracket + 1]
                    rest = record.msg[closing_bracket + 1 :]
                    record.msg = (
                        f"{color}{prefix}{Colors.RESET}{color}{rest}{Colors.RESET}"
                    )
                else:
                    record.msg = f"{color}{record.msg}{Colors.RESET}"
            else:
                record.msg = f"{color}{record.msg}{Colors.RESET}"

        result = super().format(record)

        # restore the record for any other handler
        record.levelname = levelname
        record.name = name
        record.msg = msg

        return result


def create_logger(
    conf: "ConfigRedisCollector", use_colors: bool = True
) -> logging.Logger:
    """
    Creates the logger of a collector with timestamps and optional colors.

    Collectors and connections sharing a configuration log under
    ``redis_collector.<collector_name>``.

    :param ConfigRedisCollector conf: The configuration holding the name and level.
    :param bool use_colors: Whether to use colored output (defaults to True).
    :return: The configured logger.
    :raises ValueError: If the logging level is invalid.
    """
    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{conf.collector_name}")

    handler = logging.StreamHandler()
    if use_colors:
        formatter: logging.Formatter = ColoredFormatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)-8s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)
    logger.handlers = [handler]

    if level_name := conf.logging_level:
        numeric_level = getattr(logging, level_name.upper(), None)
        if not isinstance(numeric_level, int):
            raise ValueError(f"Invalid log level: {level_name}")
        logger.setLevel(numeric_level)

    logger.propagate = False
    return logger


class ConnectionLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter for traced connections.

    Prefixes every message with the name of the connection it refers to.

    :param logging.Logger logger: The logger instance.
    :param str connection_name: The name of the traced connection.
    """

    def __init__(self, logger: logging.Logger, connection_name: str):
        super().__init__(logger, {})
        self.connection_name = connection_name

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple:
        prefix = f"[connection: {self.connection_name}]"
        return f"{prefix} {msg}", kwargs


def format_arg(arg: Any, max_length: int) -> str:
    """
    Format a single argument for logging, truncating if too long.

    :param Any arg: Argument to format
    :param int max_length: Maximum length kept, 0 disables the truncation
    :return: String representation of the argument
    """
    str_arg = str(arg)
    if max_length and len(str_arg) > max_length:
        return f"{str_arg[:max_length]}... [truncated, len={len(str_arg)}]"
    return str_arg
