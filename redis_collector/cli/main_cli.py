import argparse
import logging
import sys

from redis_collector.cli.config_cli import add_config_subparser
from redis_collector.cli.monitor_cli import add_monitor_subparser
from redis_collector.cli.namespace import CollectorCLINamespace
from redis_collector.exceptions import CollectorImportError
from redis_collector.util.import_collector import find_collector_instance


def main() -> None:
    """
    Execute the redis collector Command Line Interface.

    Parses the arguments, sets up logging, loads the collector given with
    ``--collector`` (when there is one) and runs the selected subcommand.
    """
    parser = argparse.ArgumentParser(description="Redis Collector Command Line Interface")
    parser.add_argument(
        "--collector",
        help="RedisCollector instance to use, as 'package.module:attribute', "
        "'package.module.attribute' or a file path (e.g., 'debug/collectors.py')",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Increase output verbosity"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    add_config_subparser(subparsers)
    add_monitor_subparser(subparsers)

    args = CollectorCLINamespace()
    parser.parse_args(namespace=args)

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    try:
        if args.collector:
            args.collector_instance = find_collector_instance(args.collector)
        args.func(args)
    except CollectorImportError as e:
        logging.error(f"Failed to load collector: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
