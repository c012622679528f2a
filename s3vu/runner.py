"""Local host runtime — runs a scenario across virtual users.

Each virtual user (VU) gets its own thread, its own :class:`~s3vu.module.S3`
facade and its own client handle, then executes scenario iterations
sequentially until the iteration count, the duration or the stop event
ends the run. Iteration failures are counted and logged; they never
stop the run.

Usage::

    from s3vu.runner import run_scenario
    from s3vu.scenarios import SCENARIOS

    stats = run_scenario(SCENARIOS["data"](), vus=4, iterations=100)
    print(stats.snapshot())
"""

from __future__ import annotations

import time
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from threading import Event, Lock
from typing import TYPE_CHECKING

from s3vu.logging_setup import get_logger
from s3vu.module import RootModule
from s3vu.utils import format_duration

if TYPE_CHECKING:
    from s3vu.scenarios.base import Scenario


@dataclass(frozen=True)
class VUContext:
    """Identity of the iteration being executed."""

    vu_id: int
    iteration: int


class RunStats:
    """Thread-safe counters and latency samples for one run."""

    def __init__(self) -> None:
        self.counters = {
            "iterations": 0, "errors": 0, "bytes": 0, "vu_failures": 0,
        }
        self.lock = Lock()
        self.start_time = time.time()
        self._latencies: dict[str, list[float]] = defaultdict(list)
        self._latency_lock = Lock()

    def update(self, **kwargs: int) -> None:
        """Thread-safe counter update."""
        with self.lock:
            for key, value in kwargs.items():
                self.counters[key] = self.counters.get(key, 0) + value

    def snapshot(self) -> dict[str, int]:
        """Copy of the counters."""
        with self.lock:
            return self.counters.copy()

    def elapsed(self) -> float:
        return time.time() - self.start_time

    def record_latency(self, name: str, duration_ms: float) -> None:
        """Record a latency measurement (thread-safe)."""
        with self._latency_lock:
            self._latencies[name].append(duration_ms)

    def get_latency_percentiles(self) -> dict[str, dict[str, float]]:
        """Get p50/p95/p99/max latency per scenario.

        Returns:
            Dict like ``{"upload": {"p50": 2.1, "p95": 15.3, ...}}``.
        """
        with self._latency_lock:
            snapshot = {
                name: sorted(vals)
                for name, vals in self._latencies.items()
                if vals
            }
        result: dict[str, dict[str, float]] = {}
        for name, vals in snapshot.items():
            n = len(vals)
            result[name] = {
                "p50": vals[int(n * 0.50)],
                "p95": vals[int(min(n * 0.95, n - 1))],
                "p99": vals[int(min(n * 0.99, n - 1))],
                "max": vals[-1],
                "count": n,
            }
        return result

    def drain_latencies(self) -> dict[str, dict[str, float]]:
        """Get percentiles and reset. Prevents unbounded memory growth."""
        result = self.get_latency_percentiles()
        with self._latency_lock:
            self._latencies.clear()
        return result


def run_scenario(
    scenario: Scenario,
    *,
    vus: int,
    iterations: int | None = None,
    duration_seconds: float | None = None,
    stop_event: Event | None = None,
    stats: RunStats | None = None,
    root: RootModule | None = None,
) -> RunStats:
    """Run ``scenario`` on ``vus`` virtual users.

    Args:
        scenario: Scenario to execute.
        vus: Number of virtual users (threads).
        iterations: Iterations per VU. ``None`` runs until the duration
            elapses or ``stop_event`` is set.
        duration_seconds: Optional wall-clock limit for the run.
        stop_event: Event that stops all VUs after their current
            iteration.
        stats: Stats object to fill, e.g. one watched by a reporter.
        root: Facade factory; a fresh :class:`RootModule` by default.

    Returns:
        The run's :class:`RunStats`.
    """
    if vus < 1:
        raise ValueError(f"vus must be >= 1, got {vus}")
    if iterations is None and duration_seconds is None and stop_event is None:
        raise ValueError(
            "one of iterations, duration_seconds or stop_event is required"
        )

    stop_event = stop_event or Event()
    stats = stats or RunStats()
    root = root or RootModule()
    logger = get_logger(scenario=scenario.name)

    def should_continue(done: int) -> bool:
        if stop_event.is_set():
            return False
        if iterations is not None and done >= iterations:
            return False
        if duration_seconds and stats.elapsed() >= duration_seconds:
            return False
        return True

    def vu_loop(vu_id: int) -> None:
        s3 = root.new_module_instance(vu_id, scenario.name)
        client = scenario.setup(s3)
        done = 0
        while should_continue(done):
            started = time.perf_counter()
            try:
                nbytes = scenario.iteration(
                    s3, client, VUContext(vu_id=vu_id, iteration=done),
                )
            except Exception as e:
                stats.update(errors=1)
                s3.logger.warning(f"Iteration {done} failed: {e}")
            else:
                stats.update(iterations=1, bytes=nbytes)
                stats.record_latency(
                    scenario.name,
                    (time.perf_counter() - started) * 1000,
                )
            done += 1

    logger.info(f"Starting {scenario.name} with {vus} VUs")
    if duration_seconds:
        logger.info(f"Running for {format_duration(int(duration_seconds))}")

    with ThreadPoolExecutor(max_workers=vus) as executor:
        futures = [executor.submit(vu_loop, vu_id) for vu_id in range(vus)]
        for future in as_completed(futures):
            try:
                future.result()
            except Exception as e:
                stats.update(vu_failures=1)
                logger.error(f"VU failed: {e}")

    failures = stats.snapshot()["vu_failures"]
    if failures > 0:
        logger.warning(f"{failures}/{vus} VUs failed")
    return stats
