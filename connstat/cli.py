"""Command-line interface for connstat."""

import argparse
import json
import sys
import time
from datetime import date

from connstat import __version__
from connstat.collector import COLLECTOR_NAME, NetStatCollector
from connstat.core import Output, load_config, query_logs
from connstat.core.logging import LOG_LEVELS, CollectorLogger, get_log_path
from connstat.lib.errors import ConnstatError


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="connstat",
        description="Count open TCP sockets by remote ASN and connection state",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"connstat {__version__}",
    )
    parser.add_argument(
        "--asn-file",
        help="ASN CSV file's path (default: /etc/net_exporter/asn_db.csv)",
    )
    parser.add_argument(
        "--proc-root",
        help="Mount point of procfs (default: /proc)",
    )
    parser.add_argument(
        "--format",
        choices=["plain", "json"],
        default="plain",
        help="Output format (default: plain)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # collect command
    subparsers.add_parser("collect", help="Run one collection cycle and print it")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Expose metrics over HTTP")
    serve_parser.add_argument(
        "--listen-address",
        help="Address to listen on (default: 0.0.0.0)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        help="Port to listen on (default: 9100)",
    )

    # logs command
    logs_parser = subparsers.add_parser("logs", help="Show collector log entries")
    logs_parser.add_argument(
        "--date",
        type=date.fromisoformat,
        help="Day to show, YYYY-MM-DD (default: today)",
    )
    logs_parser.add_argument(
        "--level",
        choices=list(LOG_LEVELS),
        default="debug",
        help="Minimum level to show (default: debug)",
    )
    logs_parser.add_argument(
        "--limit",
        type=int,
        help="Maximum number of entries",
    )

    return parser


def open_logger(config) -> CollectorLogger:
    return CollectorLogger(COLLECTOR_NAME, get_log_path(COLLECTOR_NAME, config.log_dir))


def cmd_collect(args: argparse.Namespace, config) -> int:
    """Run one collection cycle."""
    output = Output()
    try:
        with open_logger(config) as logger:
            collector = NetStatCollector.from_config(config, logger=logger)
            output.add_samples(collector.samples())
    except (ConnstatError, OSError) as e:
        # OSError: the log directory could not be written
        print(f"Error: {e}", file=sys.stderr)
        if args.format == "json":
            output.error(str(e))
            output.render("json")
        return 2

    output.emit({"asn_file": config.asn_file, "asn_records": len(collector.asn_table)})
    output.render(args.format, title="Sockets by ASN")
    return 0


def cmd_serve(args: argparse.Namespace, config) -> int:
    """Serve metrics until interrupted."""
    from prometheus_client import CollectorRegistry, start_http_server

    logger = open_logger(config)
    try:
        collector = NetStatCollector.from_config(config, logger=logger)
    except (ConnstatError, OSError) as e:
        logger.close()
        print(f"Error: {e}", file=sys.stderr)
        return 2

    registry = CollectorRegistry()
    registry.register(collector)
    start_http_server(config.listen_port, addr=config.listen_address, registry=registry)
    print(f"[prometheus] exporting on {config.listen_address}:{config.listen_port}")

    try:
        while True:
            time.sleep(3600)
    except KeyboardInterrupt:
        pass
    finally:
        logger.close()

    return 0


def cmd_logs(args: argparse.Namespace, config) -> int:
    """Show logged collector entries."""
    entries = query_logs(
        config.log_dir,
        COLLECTOR_NAME,
        log_date=args.date,
        min_level=args.level,
        limit=args.limit,
    )

    if args.format == "json":
        print(json.dumps(entries, indent=2))
        return 0

    if not entries:
        print("No log entries found.")
        return 0

    for entry in entries:
        extra = {
            k: v for k, v in entry.items()
            if k not in ("timestamp", "level", "collector", "message")
        }
        line = f"{entry.get('timestamp', '')} [{entry.get('level', 'debug').upper()}] {entry.get('message', '')}"
        if extra:
            line += " " + " ".join(f"{k}={v}" for k, v in extra.items())
        print(line)

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    overrides = {
        "asn_file": args.asn_file,
        "proc_root": args.proc_root,
        "listen_address": getattr(args, "listen_address", None),
        "listen_port": getattr(args, "port", None),
    }
    try:
        config = load_config(overrides)
    except ConnstatError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    commands = {
        "collect": cmd_collect,
        "serve": cmd_serve,
        "logs": cmd_logs,
    }

    return commands[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
