"""CLI entry point for meilikit."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

import httpx

from meilikit.client.client import MeiliClient
from meilikit.config.settings import Settings
from meilikit.exceptions import MeiliError
from meilikit.models.status import TaskRef, TaskStatus
from meilikit.observability.logging import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_TIMEOUT = 2


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            return EXIT_FAILED
        settings = Settings.from_yaml(config_path)
    else:
        settings = Settings()

    # Apply CLI overrides
    if args.host:
        settings.host = args.host
    if args.api_key:
        settings.api_key = args.api_key
    if args.log_level:
        settings.observability.log_level = args.log_level

    setup_logging(settings.observability)

    client = MeiliClient(settings.host, settings.api_key, timeout=settings.timeout)
    try:
        return int(args.handler(client, args, settings))
    except (MeiliError, httpx.HTTPError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meilikit",
        description="meilikit — MeiliSearch index and update-status client",
    )
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to YAML configuration file")
    parser.add_argument("--host", type=str, default=None, help="Server URL (overrides config)")
    parser.add_argument("--api-key", type=str, default=None, help="API key (overrides config)")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument("--version", action="version", version=f"meilikit {_get_version()}")

    sub = parser.add_subparsers(dest="command", required=True)

    p_indexes = sub.add_parser("indexes", help="List indexes")
    p_indexes.set_defaults(handler=_cmd_indexes)

    p_settings = sub.add_parser("settings", help="Show the settings of an index")
    p_settings.add_argument("index", help="Index uid")
    p_settings.set_defaults(handler=_cmd_settings)

    p_updates = sub.add_parser("updates", help="Show every update status of an index")
    p_updates.add_argument("index", help="Index uid")
    p_updates.set_defaults(handler=_cmd_updates)

    p_status = sub.add_parser("status", help="Show the status of one update")
    p_status.add_argument("index", help="Index uid")
    p_status.add_argument("update_id", type=int, help="Update id")
    p_status.add_argument("--wait", action="store_true", help="Poll until the update is processed")
    p_status.add_argument("--interval", type=float, default=None, help="Seconds between checks (overrides config)")
    p_status.add_argument("--timeout", type=float, default=None, help="Seconds before giving up (overrides config)")
    p_status.set_defaults(handler=_cmd_status)

    p_clear = sub.add_parser("clear", help="Delete every document of an index")
    p_clear.add_argument("index", help="Index uid")
    p_clear.set_defaults(handler=_cmd_clear)

    return parser


# ── Commands ──


def _cmd_indexes(client: MeiliClient, args: argparse.Namespace, settings: Settings) -> int:
    _print_json([index.model_dump(mode="json", by_alias=True) for index in client.list_indexes()])
    return EXIT_OK


def _cmd_settings(client: MeiliClient, args: argparse.Namespace, settings: Settings) -> int:
    index_settings = client.get_settings(args.index)
    _print_json(index_settings.model_dump(mode="json", by_alias=True, exclude_none=True))
    return EXIT_OK


def _cmd_updates(client: MeiliClient, args: argparse.Namespace, settings: Settings) -> int:
    _print_json([_status_to_json(status) for status in client.get_all_update_status(args.index)])
    return EXIT_OK


def _cmd_status(client: MeiliClient, args: argparse.Namespace, settings: Settings) -> int:
    task = TaskRef(task_id=args.update_id, index_uid=args.index)
    if not args.wait:
        status = client.get_status(task)
        _print_json(_status_to_json(status))
        return _exit_code(status)

    interval = args.interval if args.interval is not None else settings.poll.interval
    timeout = args.timeout if args.timeout is not None else settings.poll.timeout
    status = wait_for_status(client, task, interval=interval, timeout=timeout)
    _print_json(_status_to_json(status))
    if not status.is_terminal:
        print(f"Error: update {task.task_id} still enqueued after {timeout}s", file=sys.stderr)
        return EXIT_TIMEOUT
    return _exit_code(status)


def _cmd_clear(client: MeiliClient, args: argparse.Namespace, settings: Settings) -> int:
    task = client.delete_all_documents(args.index)
    _print_json(task.model_dump(mode="json"))
    return EXIT_OK


# ── Helpers ──


def wait_for_status(
    client: MeiliClient,
    task: TaskRef,
    *,
    interval: float,
    timeout: float,
) -> TaskStatus:
    """Check ``task`` every ``interval`` seconds until it is processed.

    Returns the last status read, which is still enqueued if ``timeout``
    elapsed first.
    """
    deadline = time.monotonic() + timeout
    while True:
        status = client.get_status(task)
        if status.is_terminal:
            return status
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return status
        logger.debug("Update %d still enqueued, retrying in %.2fs", task.task_id, interval)
        time.sleep(min(interval, remaining))


def _exit_code(status: TaskStatus) -> int:
    if status.is_terminal and getattr(status, "failed", False):
        return EXIT_FAILED
    return EXIT_OK


def _status_to_json(status: TaskStatus) -> dict[str, Any]:
    data = status.model_dump(mode="json", by_alias=True, exclude_none=True)
    data["status"] = "processed" if status.is_terminal else "enqueued"
    return data


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _get_version() -> str:
    """Get the package version."""
    try:
        from meilikit import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    sys.exit(main())
