"""
Command-line entry point.

    blog-aggregator serve        run the API with the freshness scheduler
    blog-aggregator fetch-once   run a single scheduler tick and exit
"""

import argparse
import signal
import sys
from typing import Optional, Sequence

from blog_aggregator.config import Config, get_config, load_config_from_yaml, set_config
from blog_aggregator.logger import get_logger, setup_logger

logger = get_logger(__name__)


def _load_config(path: Optional[str]) -> Config:
    if path:
        set_config(load_config_from_yaml(path))
    return get_config()


def _install_shutdown_handlers(scheduler) -> None:
    """Stop the scheduler cleanly on SIGTERM / SIGINT."""

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signal.Signals(signum).name}, shutting down")
        if scheduler is not None and scheduler.is_running():
            scheduler.stop(wait=True)
        sys.exit(0)

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)


def cmd_serve(args: argparse.Namespace) -> int:
    from blog_aggregator.core.scheduler import create_scheduler
    from blog_aggregator.storage.database import DatabaseManager
    from blog_aggregator.web.app import create_app

    config = get_config()
    db_manager = DatabaseManager(db_config=config.database)
    app = create_app(config=config, db_manager=db_manager)

    scheduler = None
    if config.scheduler.enabled and not args.no_scheduler:
        scheduler = create_scheduler(db_manager)
        scheduler.start()
    else:
        logger.info("Freshness scheduler disabled")

    _install_shutdown_handlers(scheduler)

    host = args.host or config.web.host
    port = args.port or config.web.port
    logger.info(f"Starting server on {host}:{port}")
    try:
        # The reloader would fork a second scheduler
        app.run(host=host, port=port, debug=app.config["DEBUG"], use_reloader=False)
    finally:
        if scheduler is not None and scheduler.is_running():
            scheduler.stop(wait=True)
        db_manager.close()
    return 0


def cmd_fetch_once(args: argparse.Namespace) -> int:
    from blog_aggregator.core.scheduler import create_scheduler
    from blog_aggregator.storage.database import DatabaseManager

    with DatabaseManager(db_config=get_config().database) as db_manager:
        result = create_scheduler(db_manager).run_once()

    if result.skipped:
        logger.error(f"Tick skipped: {result.error}")
        return 1

    print(
        f"Selected {len(result.selected)} feeds: "
        f"{len(result.marked)} marked fetched, {len(result.failed)} failed"
    )
    return 0 if not result.failed else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="blog-aggregator", description="Blog aggregator backend")
    parser.add_argument("--config", help="Path to a YAML configuration file")
    parser.add_argument("--log-level", help="Override the configured log level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the API server and scheduler")
    serve.add_argument("--host", help="Bind address")
    serve.add_argument("--port", type=int, help="Bind port")
    serve.add_argument("--no-scheduler", action="store_true", help="Do not run the scheduler")
    serve.set_defaults(func=cmd_serve)

    fetch_once = subparsers.add_parser("fetch-once", help="Run one scheduler tick and exit")
    fetch_once.set_defaults(func=cmd_fetch_once)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = _load_config(args.config)
    setup_logger(level=args.log_level, log_config=config.logging)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
