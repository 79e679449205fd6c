import argparse
import importlib.util
import sys

from redis_collector.cli.namespace import CollectorCLINamespace


def add_monitor_subparser(subparsers: argparse._SubParsersAction) -> None:
    """Add the monitor subparser to the main CLI."""
    monitor_parser = subparsers.add_parser(
        "monitor", help="Start the web monitoring interface"
    )
    monitor_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind the server (default: 127.0.0.1)",
    )
    monitor_parser.add_argument(
        "--port", type=int, default=8000, help="Port to bind the server (default: 8000)"
    )
    monitor_parser.set_defaults(func=start_monitor_command)


def start_monitor_command(args: CollectorCLINamespace) -> None:
    """Execute the monitor command, serving the collected data over HTTP."""
    if not _check_monitor_dependencies():
        print(
            "Monitor dependencies not installed. Please install with: "
            "pip install redis-collector[monitor]"
        )
        sys.exit(1)

    if args.collector_instance is None:
        print("Error: the monitor needs a collector, use --collector.")
        sys.exit(1)

    from redismon.app import start_monitor

    print(f"Starting monitoring for collector: {args.collector}")
    start_monitor(args.collector_instance, host=args.host, port=args.port)


def _check_monitor_dependencies() -> bool:
    """Check if required monitoring dependencies are installed."""
    for dep in ("fastapi", "uvicorn"):
        if importlib.util.find_spec(dep) is None:
            return False
    return True
