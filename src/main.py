# src/main.py — v3
"""CLI entry point: run, history, config, serve commands.

Usage:
    reelforge run
    reelforge history [--limit N]
    reelforge config show
    reelforge config set [--brand-color ...] [--tone ...] ...
    reelforge serve [--host H] [--port P]

``run`` exits 0 only when the video was published; any recorded or raised
failure exits 1.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from reelforge.version import __version__

logger = logging.getLogger(__name__)

_BRAND_FIELDS = (
    "brand_color",
    "accent_color",
    "tone",
    "video_style",
    "voice_profile",
    "channel_name",
    "tagline",
)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from reelforge.config.settings import ConfigurationError, load_settings

    overrides = {"data_root": args.data_root} if args.data_root is not None else {}
    try:
        settings = load_settings(**overrides)
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    _setup_logging(settings, args.verbose)

    if args.command == "serve":
        return _cmd_serve(args, settings)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="reelforge",
        description=f"reelforge v{__version__}: daily short-video production pipeline",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--data-root", type=Path, default=None,
        help="Override DATA_ROOT for this invocation",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- run ---
    p_run = subparsers.add_parser("run", help="Produce and publish one short")
    p_run.set_defaults(func=_cmd_run)

    # --- history ---
    p_history = subparsers.add_parser("history", help="Show recent runs")
    p_history.add_argument(
        "-n", "--limit", type=int, default=10,
        help="Number of runs to show (default: 10)",
    )
    p_history.set_defaults(func=_cmd_history)

    # --- config ---
    p_config = subparsers.add_parser("config", help="Show or update the brand config")
    config_sub = p_config.add_subparsers(dest="config_command", required=True)

    p_show = config_sub.add_parser("show", help="Print the saved brand config")
    p_show.set_defaults(func=_cmd_config_show)

    p_set = config_sub.add_parser("set", help="Merge values into the brand config")
    for field in _BRAND_FIELDS:
        p_set.add_argument(f"--{field.replace('_', '-')}", dest=field, default=None)
    p_set.add_argument(
        "--hashtags", default=None,
        help="Comma-separated hashtags",
    )
    p_set.add_argument(
        "--keywords", default=None,
        help="Comma-separated keywords",
    )
    p_set.set_defaults(func=_cmd_config_set)

    # --- serve ---
    p_serve = subparsers.add_parser("serve", help="Start the HTTP API")
    p_serve.add_argument("--host", default=None, help="Bind host (default: API_HOST)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: API_PORT)")
    p_serve.set_defaults(func=_cmd_serve)

    return parser


async def _cmd_run(args: argparse.Namespace, settings) -> int:
    """Execute one run and map its outcome to an exit code."""
    from reelforge.api.facade import execute_daily_run

    try:
        record = await execute_daily_run(settings)
    except Exception as exc:
        _print_json({"ok": False, "error": str(exc)}, stream=sys.stderr)
        return 1

    _print_json({"ok": True, "runId": record.id, "status": record.status})
    return 0 if record.status == "success" else 1


async def _cmd_history(args: argparse.Namespace, settings) -> int:
    """Print a one-line summary per recent run."""
    from reelforge.storage.local_writer import LocalWriter
    from reelforge.storage.run_store import RunStore

    store = RunStore(LocalWriter(settings.data_root), max_history=settings.history_limit)
    history = await store.get_history()
    if not history:
        print("No runs recorded yet.")
        return 0

    for record in history[: args.limit]:
        title = record.topic.title if record.topic else "-"
        line = f"{record.started_at:%Y-%m-%d %H:%M} {record.status:7s} {record.id[:8]} {title}"
        if record.error:
            line += f"  ({record.error})"
        print(line)
    return 0


async def _cmd_config_show(args: argparse.Namespace, settings) -> int:
    from reelforge.storage.config_store import BrandConfigStore
    from reelforge.storage.local_writer import LocalWriter

    config = await BrandConfigStore(LocalWriter(settings.data_root)).get()
    if config is None:
        print("No brand config saved. Use `reelforge config set` first.", file=sys.stderr)
        return 1
    _print_json(config.model_dump(mode="json"))
    return 0


async def _cmd_config_set(args: argparse.Namespace, settings) -> int:
    from pydantic import ValidationError

    from reelforge.storage.config_store import BrandConfigStore
    from reelforge.storage.local_writer import LocalWriter

    partial = {field: getattr(args, field) for field in _BRAND_FIELDS}
    for list_field in ("hashtags", "keywords"):
        raw = getattr(args, list_field)
        if raw is not None:
            partial[list_field] = _split_csv(raw)

    try:
        config = await BrandConfigStore(LocalWriter(settings.data_root)).upsert(partial)
    except ValidationError as exc:
        print(f"Invalid brand config: {exc}", file=sys.stderr)
        return 1
    _print_json(config.model_dump(mode="json"))
    return 0


def _cmd_serve(args: argparse.Namespace, settings) -> int:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from reelforge.api.routes import create_app

    uvicorn.run(
        create_app(settings),
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        log_config=None,
    )
    return 0


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def _print_json(payload: object, stream=None) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False), file=stream or sys.stdout)


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from reelforge.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
