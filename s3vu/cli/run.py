"""Run command — execute a scenario on local virtual users.

Handles signal-based shutdown, periodic stats reporting and the final
summary line.
"""

from __future__ import annotations

import signal
from argparse import Namespace
from threading import Event, Thread

from s3vu.config import DEFAULT_STATS_INTERVAL
from s3vu.logging_setup import get_logger, setup_logging
from s3vu.runner import RunStats, run_scenario
from s3vu.scenarios import SCENARIOS
from s3vu.utils import format_bytes, format_duration, parse_duration


def _format_latency_line(percentiles: dict[str, dict[str, float]]) -> str:
    """Format latency percentiles into a compact log line."""
    parts: list[str] = []
    for name, p in sorted(percentiles.items()):
        parts.append(
            f"{name} p50={p['p50']:.0f}ms "
            f"p95={p['p95']:.0f}ms "
            f"p99={p['p99']:.0f}ms"
        )
    return " | ".join(parts)


def _format_stats(stats: RunStats, label: str) -> str:
    counters = stats.snapshot()
    elapsed = stats.elapsed()
    its_sec = counters["iterations"] / elapsed if elapsed > 0 else 0
    bytes_sec = counters["bytes"] / elapsed if elapsed > 0 else 0
    return (
        f"{label}: iterations={counters['iterations']:,} "
        f"({its_sec:.1f}/s), "
        f"bytes={format_bytes(counters['bytes'])} "
        f"({format_bytes(bytes_sec)}/s), "
        f"errors={counters['errors']}, "
        f"elapsed={format_duration(int(elapsed))}"
    )


def cmd_run(args: Namespace) -> int:
    """Run a scenario locally.

    Args:
        args: Parsed CLI arguments with ``scenario``, ``vus``,
            ``iterations``, ``duration``, ``log_level`` and
            ``stats_interval`` attributes.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    setup_logging(level=getattr(args, "log_level", None))

    name = getattr(args, "scenario", None)
    logger = get_logger(scenario=name)

    scenario_class = SCENARIOS.get(name or "")
    if not scenario_class:
        logger.error(
            f"Unknown scenario: {name} "
            f"(available: {', '.join(sorted(SCENARIOS))})"
        )
        return 1

    duration_seconds: int | None = None
    raw_duration = getattr(args, "duration", None)
    if raw_duration:
        try:
            duration_seconds = parse_duration(raw_duration)
        except ValueError as e:
            logger.error(str(e))
            return 1

    iterations = getattr(args, "iterations", None)
    stop_event = Event()

    def signal_handler(sig: int, frame: object) -> None:
        logger.info("Received stop signal, shutting down...")
        stop_event.set()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    stats = RunStats()
    stats_interval = getattr(args, "stats_interval", None)
    if stats_interval is None:
        stats_interval = DEFAULT_STATS_INTERVAL
    stats_stop = Event()
    stats_thread: Thread | None = None

    if stats_interval > 0:

        def stats_reporter() -> None:
            while not stats_stop.wait(stats_interval):
                msg = _format_stats(stats, "STATS")
                lat_line = _format_latency_line(stats.drain_latencies())
                if lat_line:
                    msg += f" | {lat_line}"
                logger.info(msg, extra={"op_type": "STATS"})

        stats_thread = Thread(target=stats_reporter, daemon=True)
        stats_thread.start()

    try:
        run_scenario(
            scenario_class(),
            vus=getattr(args, "vus", 1),
            iterations=iterations,
            duration_seconds=duration_seconds,
            stop_event=stop_event,
            stats=stats,
        )
    finally:
        if stats_thread:
            stats_stop.set()
            stats_thread.join(timeout=1)

        counters = stats.snapshot()
        msg = (
            f"{_format_stats(stats, 'FINAL')}, "
            f"vu_failures={counters['vu_failures']}"
        )
        lat_line = _format_latency_line(stats.get_latency_percentiles())
        if lat_line:
            msg += f"\n  Latency: {lat_line}"
        logger.info(msg, extra={"op_type": "FINAL"})

    return 0
