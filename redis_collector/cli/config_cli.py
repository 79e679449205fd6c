import argparse
import re
from functools import wraps
from typing import Callable, Type, TypeVar

from cistell import ConfigBase

from redis_collector.cli.namespace import CollectorCLINamespace
from redis_collector.conf.config_collector import ConfigRedisCollector

T = TypeVar("T", bound="ConfigBase")


def config_cls_cache(
    func: Callable[[Type[T]], dict[str, str]]
) -> Callable[[Type[T]], dict[str, str]]:
    """
    Caches the field descriptions extracted from a config class, by class name.

    :param Callable[[Type[T]], dict[str, str]] func: The function to be decorated.
    :return: A wrapped function with caching capability.
    """
    cache: dict[str, dict[str, str]] = {}

    @wraps(func)
    def wrapper(config_cls: Type[T]) -> dict[str, str]:
        class_name = config_cls.__name__
        if class_name not in cache:
            cache[class_name] = func(config_cls)
        return cache[class_name]

    return wrapper


@config_cls_cache
def extract_descriptions_from_docstring(
    config_cls: Type["ConfigBase"],
) -> dict[str, str]:
    """
    Extract field descriptions from the ``:cvar`` entries of a config docstring.

    Parent classes are processed first, so a child description wins.

    :param Type[ConfigBase] config_cls: The configuration class.
    :return: A dictionary mapping field names to their descriptions.
    """
    if config_cls == ConfigBase:
        return {}
    field_docs = {}
    for parent in config_cls.__bases__:
        if parent != ConfigBase and issubclass(parent, ConfigBase):
            field_docs.update(extract_descriptions_from_docstring(parent))

    if not (docstring := config_cls.__doc__):
        return field_docs

    pattern = r":cvar\s+(\w+\[?.*?\]?)\s+(\w+):\s*(.*?)(?=\n\s*:cvar|$)"
    for match in re.finditer(pattern, docstring, re.DOTALL):
        _, field_name, description = match.groups()
        description = " ".join(line.strip() for line in description.split("\n"))
        field_docs[field_name] = description.strip()

    return field_docs


def add_config_subparser(subparsers: argparse._SubParsersAction) -> None:
    """Add the 'show_config' command to the main parser."""
    show_config_parser = subparsers.add_parser(
        "show_config", help="Show collector configuration"
    )
    show_config_parser.set_defaults(func=show_config_command)


def show_config_command(args: CollectorCLINamespace) -> None:
    """
    Print every configuration field with its current value and description.

    Uses the configuration of the loaded collector, or the default one.
    """
    if args.collector_instance is not None:
        config = args.collector_instance.conf
        print(f"Showing configuration for collector: {args.collector}")
    else:
        config = ConfigRedisCollector()
        print("Showing default configuration")
    print(f"Config {config.__class__.__name__}:")
    for field, description in extract_descriptions_from_docstring(
        config.__class__
    ).items():
        print("-" * 50)
        print(f"{field}: ")
        print(f"  Value: {getattr(config, field)}")
        print(f"  Description: {description}")
    print("-" * 50)
