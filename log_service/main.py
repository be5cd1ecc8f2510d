"""log-service — ingest/query API, web dashboard, and demo seeding."""

import logging
import signal
import sys
import threading
from argparse import ArgumentParser

from log_service.api import create_app
from log_service.client import LogServiceClient
from log_service.config import load_dashboard_config, load_service_config
from log_service.dashboard import DashboardClient
from log_service.dashboard_app import create_dashboard_app, run_dashboard
from log_service.errors import ConfigurationError
from log_service.simulator import seed

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="log-service",
        description="Ingest, query, and watch application log entries.",
    )
    parser.add_argument("--config", help="YAML config file (default: $CONFIG_PATH)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("api", help="Run the ingest and query endpoints")
    sub.add_parser("dashboard", help="Run the web dashboard")

    seed_parser = sub.add_parser("seed", help="Submit random demo log entries")
    seed_parser.add_argument(
        "--count",
        type=int,
        default=10,
        help="Number of entries to submit (default: 10)",
    )
    return parser


def run_api(config_path):
    config = load_service_config(config_path).validate()
    app = create_app(config)
    logger.info(
        "Starting log API on %s:%d (backend=%s, table=%s)",
        config.host, config.port, config.store_backend, config.table_name,
    )
    app.run(host=config.host, port=config.port)


def run_dashboard_server(config_path):
    config = load_dashboard_config(config_path).validate()
    client = LogServiceClient.from_config(config)
    dashboard = DashboardClient.from_config(client, config)
    app = create_dashboard_app(dashboard)
    shutdown_event = threading.Event()

    def handle_signal(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    dashboard.start()
    threading.Thread(
        target=run_dashboard, args=(app, config.host, config.port), daemon=True
    ).start()
    logger.info("Dashboard on %s:%d polling %s", config.host, config.port, config.query_url)

    try:
        shutdown_event.wait()
    finally:
        dashboard.stop()
        client.close()


def run_seed(config_path, count):
    config = load_dashboard_config(config_path)
    client = LogServiceClient.from_config(config)
    try:
        return seed(client, count)
    finally:
        client.close()


def main(argv=None):
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [log-service] %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    args = build_parser().parse_args(argv)

    try:
        if args.command == "api":
            run_api(args.config)
        elif args.command == "dashboard":
            run_dashboard_server(args.config)
        elif args.command == "seed":
            run_seed(args.config, args.count)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
