from __future__ import annotations

from argparse import ArgumentParser, Namespace
import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
import json
import signal
import sys

from netdiag.config import load_settings
from netdiag.logging_utils import configure_logging
from netdiag.probe_lib.engine import NetworkDiagnosticsEngine, build_engine
from netdiag.probe_lib.models import ErrorKind, ProbeConfig, ProbeResult
from netdiag.report_formatter import (
    format_attempt,
    format_diagnosis,
    format_statistics,
)


EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNREACHABLE = 2


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="netdiag",
        description="Connectivity probing and failure diagnosis.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    ping = subparsers.add_parser("ping", help="Probe a host several times.")
    ping.add_argument("target")
    ping.add_argument("--count", type=int, dest="attempts")
    ping.add_argument("--timeout", type=float, dest="timeout_seconds")
    ping.add_argument("--interval", type=float, dest="interval_seconds")
    ping.add_argument("--size", type=int, dest="packet_size")
    ping.add_argument("--retries", type=int)
    ping.add_argument("--retry-interval", type=float, dest="retry_interval_seconds")
    ping.add_argument("--diagnose", action="store_true")
    ping.add_argument("--json", action="store_true", dest="as_json")

    diagnose = subparsers.add_parser("diagnose", help="Explain a failure for a host.")
    diagnose.add_argument("target")
    diagnose.add_argument(
        "--kind",
        choices=[kind.value for kind in ErrorKind],
        default=ErrorKind.OTHER.value,
    )
    diagnose.add_argument("--message", default="")
    diagnose.add_argument("--json", action="store_true", dest="as_json")

    check = subparsers.add_parser("check", help="Check general network connectivity.")
    check.add_argument("--json", action="store_true", dest="as_json")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    as_json = getattr(args, "as_json", False)
    try:
        settings = load_settings()
        configure_logging(settings.log_level)
        engine = build_engine(settings)
    except Exception as exc:
        return _print_error_and_exit(exc, as_json=as_json)

    try:
        if args.command == "ping":
            return asyncio.run(_run_ping(engine, args))
        if args.command == "diagnose":
            return asyncio.run(_run_diagnose(engine, args))
        if args.command == "check":
            return asyncio.run(_run_check(engine, args))
        return _print_error_and_exit("invalid command", as_json=as_json)
    except ValueError as exc:
        return _print_error_and_exit(exc, as_json=as_json)


def _config_from_args(base: ProbeConfig, args: Namespace) -> ProbeConfig:
    overrides = {
        name: getattr(args, name)
        for name in (
            "attempts",
            "timeout_seconds",
            "interval_seconds",
            "packet_size",
            "retries",
            "retry_interval_seconds",
        )
        if getattr(args, name, None) is not None
    }
    return replace(base, **overrides)


async def _run_ping(engine: NetworkDiagnosticsEngine, args: Namespace) -> int:
    config = _config_from_args(engine.default_config, args)
    cancel_event = asyncio.Event()

    def on_progress(attempt: int, result: ProbeResult) -> None:
        if not args.as_json:
            print(format_attempt(attempt, config.attempts, result), flush=True)

    with _cancel_on_sigint(cancel_event):
        results = await engine.ping(args.target, config, on_progress, cancel_event)
    stats = engine.analyze_ping_results(results)

    diagnosis = None
    if args.diagnose:
        last_failure = next((item for item in reversed(results) if not item.success), None)
        if last_failure is not None and last_failure.error_kind is not None:
            diagnosis = await engine.diagnose_failure(
                last_failure.error_kind,
                last_failure.error_message or "",
                args.target,
            )

    if args.as_json:
        payload = {
            "target": args.target,
            "strategy": engine.strategy_name,
            "cancelled": cancel_event.is_set(),
            "results": [item.to_dict() for item in results],
            "statistics": stats.to_dict(),
            "diagnosis": diagnosis.to_dict() if diagnosis else None,
        }
        print(json.dumps(payload, ensure_ascii=False))
    else:
        if cancel_event.is_set():
            print(f"cancelled after {len(results)} of {config.attempts} attempts")
        print(format_statistics(args.target, stats))
        if diagnosis is not None:
            print(format_diagnosis(args.target, diagnosis))
    return EXIT_OK if stats.success_count else EXIT_UNREACHABLE


async def _run_diagnose(engine: NetworkDiagnosticsEngine, args: Namespace) -> int:
    diagnosis = await engine.diagnose_failure(
        ErrorKind(args.kind),
        args.message,
        args.target,
    )
    if args.as_json:
        print(json.dumps(diagnosis.to_dict(), ensure_ascii=False))
    else:
        print(format_diagnosis(args.target, diagnosis))
    return EXIT_OK


async def _run_check(engine: NetworkDiagnosticsEngine, args: Namespace) -> int:
    connected = await engine.is_network_connected()
    if args.as_json:
        print(json.dumps({"connected": connected}))
    else:
        print("connected" if connected else "not connected")
    return EXIT_OK if connected else EXIT_UNREACHABLE


@contextmanager
def _cancel_on_sigint(cancel_event: asyncio.Event) -> Iterator[None]:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
        installed = True
    except (NotImplementedError, RuntimeError, ValueError):
        # No signal support on this loop or thread; Ctrl+C aborts the run instead.
        installed = False
    try:
        yield
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


def _print_error_and_exit(exc: Exception | str, *, as_json: bool) -> int:
    message = str(exc)
    if as_json:
        print(json.dumps({"ok": False, "error": message}, ensure_ascii=False))
    else:
        print(f"ERROR: {message}", file=sys.stderr)
    return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
