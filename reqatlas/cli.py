from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from .config import DEFAULT_COLLECTION, DEFAULT_ENVIRONMENT, relay_settings
from .http_client import RelayClient
from .logging_setup import configure_console_logging, configure_logging
from .parsing import format_response, format_run_result, format_summary
from .relay import ensure_loopback, serve_relay
from .session import ApiSession
from .state import AppState
from .storage import ConfigurationError, load_config_file, load_last_state

logger = logging.getLogger(__name__)

USAGE_ERROR = 2


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="reqatlas", description="API client with a local forwarding relay.")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to reqatlas.log in the current directory.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    relay = commands.add_parser("relay", help="Serve the loopback forwarding relay.")
    relay.add_argument("--host", default=None, help="Bind address (default 127.0.0.1).")
    relay.add_argument("--port", type=int, default=None, help="Bind port (default 3001).")

    for name, target, help_text in (
        ("send", "request_id", "Send one request through the relay."),
        ("run", "collection_id", "Run every request of a collection in order."),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument(target)
        sub.add_argument("--config", default=None, help="Exported configuration file to load.")
        sub.add_argument("--env", default=None, help="Environment id to activate.")
        sub.add_argument("--relay-url", default=None, help="Relay endpoint URL.")
        if name == "run":
            sub.add_argument("--tui", action="store_true", help="Show the interactive runner view.")

    return parser.parse_args(argv)


def default_state() -> AppState:
    return AppState(
        collections=(DEFAULT_COLLECTION,),
        environments=(DEFAULT_ENVIRONMENT,),
        active_environment_id=DEFAULT_ENVIRONMENT.id,
    )


def build_session(args: argparse.Namespace) -> ApiSession:
    state = load_last_state(default_state())
    if args.config:
        state = load_config_file(args.config, state)
    session = ApiSession(state, RelayClient(args.relay_url))
    if args.env:
        session.select_environment(args.env)
    return session


def _fail(message: str) -> int:
    print(message, file=sys.stderr)
    return USAGE_ERROR


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    log_path = configure_logging(args.debug)
    if args.debug and log_path is None:
        logger.warning("Debug logging requested but log file could not be created.")

    if args.command == "relay":
        try:
            host = ensure_loopback(args.host or relay_settings()[0])
        except ValueError as exc:
            return _fail(str(exc))
        configure_console_logging()
        serve_relay(host, args.port)
        return 0

    try:
        session = build_session(args)
    except ConfigurationError as exc:
        return _fail(f"Invalid configuration: {exc}")
    except (KeyError, ValueError) as exc:
        return _fail(f"Unknown environment or relay URL: {exc}")

    if args.command == "send":
        request = session.find_request(args.request_id)
        if request is None:
            return _fail(f"No request with id {args.request_id!r}.")
        response = asyncio.run(session.send_request(request))
        print(format_response(response))
        return 0

    collection = session.state.find_collection(args.collection_id)
    if collection is None:
        return _fail(f"No collection with id {args.collection_id!r}.")
    if args.tui:
        from .app import CollectionRunnerApp

        CollectionRunnerApp(session, collection).run()
        return 0
    report = asyncio.run(session.run_collection(collection, on_progress=lambda p: print(format_run_result(p.result))))
    print(format_summary(report.summary))
    return 0
