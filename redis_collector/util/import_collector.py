import importlib
import logging
import os
import sys
import types
from importlib.util import module_from_spec, spec_from_file_location

from redis_collector.collector import RedisCollector
from redis_collector.exceptions import CollectorImportError

logger = logging.getLogger(__name__)


def load_module_from_file(file_path: str) -> types.ModuleType:
    """
    Loads a module from a python file.

    :param str file_path: Path of the file, with or without the .py suffix
    :return: The loaded module
    :raises CollectorImportError: If the file does not exist or cannot be loaded
    """
    if not file_path.endswith(".py"):
        file_path = f"{file_path}.py"
    file_path = os.path.abspath(file_path)
    if not os.path.isfile(file_path):
        raise CollectorImportError(f"File not found: {file_path}")

    module_dir = os.path.dirname(file_path)
    if module_dir not in sys.path:
        sys.path.insert(0, module_dir)

    module_name = os.path.basename(file_path)[: -len(".py")]
    spec = spec_from_file_location(module_name, file_path)
    if spec is None or spec.loader is None:
        raise CollectorImportError(f"Could not create module spec for {file_path}")
    module = module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def find_collector_instance_in_module(module: types.ModuleType) -> RedisCollector:
    """
    Finds and returns the first RedisCollector instance of a module.

    :raises CollectorImportError: If the module holds no RedisCollector
    """
    for attr_name in dir(module):
        attr = getattr(module, attr_name)
        if isinstance(attr, RedisCollector):
            return attr
    module_name = getattr(module, "__name__", "unknown")
    raise CollectorImportError(f"No RedisCollector instance found in '{module_name}'")


def _get_collector_attribute(module: types.ModuleType, attr_name: str) -> RedisCollector:
    attr = getattr(module, attr_name, None)
    if not isinstance(attr, RedisCollector):
        raise CollectorImportError(
            f"'{attr_name}' in '{module.__name__}' is not a RedisCollector instance"
        )
    return attr


def find_collector_instance(collector_spec: str | None) -> RedisCollector:
    """
    Find and load a RedisCollector instance.

    :param str | None collector_spec: One of
        ``package.module:attribute``, ``package.module.attribute``,
        ``package.module`` (searched for an instance) or ``path/to/file.py``.
    :return: The RedisCollector instance.
    :raises CollectorImportError: If the collector cannot be loaded.
    """
    if not collector_spec:
        raise CollectorImportError("No collector spec provided")
    logger.debug(f"Attempting to find collector instance for: {collector_spec}")

    if os.path.sep in collector_spec or collector_spec.endswith(".py"):
        return find_collector_instance_in_module(load_module_from_file(collector_spec))

    if ":" in collector_spec:
        module_name, attr_name = collector_spec.split(":", 1)
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as ex:
            raise CollectorImportError(
                f"Could not import module '{module_name}': {ex}"
            ) from ex
        return _get_collector_attribute(module, attr_name)

    try:
        module = importlib.import_module(collector_spec)
    except ModuleNotFoundError as ex:
        if "." not in collector_spec:
            raise CollectorImportError(
                f"Could not import module '{collector_spec}': {ex}"
            ) from ex
        module_name, attr_name = collector_spec.rsplit(".", 1)
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as parent_ex:
            raise CollectorImportError(
                f"Could not import module '{collector_spec}' nor '{module_name}': {parent_ex}"
            ) from parent_ex
        return _get_collector_attribute(module, attr_name)
    return find_collector_instance_in_module(module)
