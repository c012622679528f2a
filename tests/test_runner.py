"""Tests for the local runtime and bundled scenarios."""

from threading import Event
from unittest.mock import MagicMock

import pytest

from s3vu.module import RootModule
from s3vu.runner import RunStats, VUContext, run_scenario
from s3vu.scenarios import SCENARIOS, DataScenario, LargeFileScenario, UploadScenario
from s3vu.scenarios.base import Scenario
from tests.conftest import ACCESS_KEY, BUCKET, ENDPOINT, SECRET_KEY

MiB = 1024 * 1024


class CountingScenario(Scenario):
    name = "counting"

    def __init__(self, fail_on: int | None = None) -> None:
        super().__init__(bucket=BUCKET)
        self.fail_on = fail_on
        self.seen: list[VUContext] = []

    def setup(self, s3):
        return MagicMock()

    def iteration(self, s3, client, vu):
        self.seen.append(vu)
        if vu.iteration == self.fail_on:
            raise RuntimeError("boom")
        return 10


def _fake_backed(scenario_cls, fake_s3, **kwargs):
    """Scenario subclass whose handles talk to ``fake_s3``."""

    class Backed(scenario_cls):
        def setup(self, s3):
            client = super().setup(s3)
            client.client.meta.events.register("before-send.s3", fake_s3.handle)
            return client

    return Backed(
        bucket=BUCKET, endpoint=ENDPOINT, access_key=ACCESS_KEY,
        secret_key=SECRET_KEY, region="us-east-1", **kwargs,
    )


class TestRunScenario:
    """Test run_scenario."""

    def test_iterations_per_vu(self):
        scenario = CountingScenario()

        stats = run_scenario(scenario, vus=3, iterations=4)

        counters = stats.snapshot()
        assert counters["iterations"] == 12
        assert counters["bytes"] == 120
        assert counters["errors"] == 0
        assert sorted({vu.vu_id for vu in scenario.seen}) == [0, 1, 2]
        assert stats.get_latency_percentiles()["counting"]["count"] == 12

    def test_failures_counted_not_fatal(self):
        stats = run_scenario(CountingScenario(fail_on=1), vus=2, iterations=3)

        counters = stats.snapshot()
        assert counters["errors"] == 2
        assert counters["iterations"] == 4

    def test_setup_failure_counts_vu_failure(self):
        class Broken(CountingScenario):
            def setup(self, s3):
                raise RuntimeError("no client")

        stats = run_scenario(Broken(), vus=2, iterations=1)
        assert stats.snapshot()["vu_failures"] == 2

    def test_stop_event_stops_run(self):
        stop = Event()
        stop.set()

        stats = run_scenario(CountingScenario(), vus=2, stop_event=stop)
        assert stats.snapshot()["iterations"] == 0

    def test_one_facade_per_vu(self):
        root = MagicMock(wraps=RootModule())

        run_scenario(CountingScenario(), vus=3, iterations=1, root=root)

        vu_ids = sorted(c.args[0] for c in root.new_module_instance.call_args_list)
        assert vu_ids == [0, 1, 2]

    def test_requires_a_limit(self):
        with pytest.raises(ValueError):
            run_scenario(CountingScenario(), vus=1)

    def test_requires_a_vu(self):
        with pytest.raises(ValueError):
            run_scenario(CountingScenario(), vus=0, iterations=1)


class TestRunStats:
    def test_drain_resets_latencies(self):
        stats = RunStats()
        for ms in (1.0, 2.0, 3.0, 4.0):
            stats.record_latency("op", ms)

        drained = stats.drain_latencies()

        assert drained["op"]["max"] == 4.0
        assert drained["op"]["p50"] == 3.0
        assert stats.get_latency_percentiles() == {}


class TestBundledScenarios:
    """Run bundled scenarios against the in-memory store."""

    def test_registry(self):
        assert SCENARIOS == {
            "data": DataScenario,
            "largefile": LargeFileScenario,
            "upload": UploadScenario,
        }

    def test_data_scenario(self, fake_s3):
        scenario = _fake_backed(DataScenario, fake_s3, payload_size=4096)

        stats = run_scenario(scenario, vus=2, iterations=3)

        counters = stats.snapshot()
        assert counters["errors"] == 0
        assert counters["iterations"] == 6
        assert counters["bytes"] == 6 * 4096 * 2
        assert len(fake_s3.objects) == 6

    def test_data_scenario_read_failure_counted(self, fake_s3):
        scenario = _fake_backed(DataScenario, fake_s3, payload_size=64)
        fake_s3.truncate_body = True

        stats = run_scenario(scenario, vus=1, iterations=1)
        assert stats.snapshot()["errors"] == 1

    def test_upload_scenario(self, fake_s3, make_file):
        path = make_file(b"z" * 500)
        scenario = _fake_backed(UploadScenario, fake_s3, file_path=path)

        stats = run_scenario(scenario, vus=2, iterations=2)

        assert stats.snapshot()["bytes"] == 2000
        assert all(v == b"z" * 500 for v in fake_s3.objects.values())
        assert all(k.startswith("s3vu/upload/vu") for _, k in fake_s3.objects)

    def test_upload_scenario_missing_file(self, fake_s3, tmp_path):
        scenario = _fake_backed(
            UploadScenario, fake_s3, file_path=str(tmp_path / "missing.bin"),
        )

        stats = run_scenario(scenario, vus=1, iterations=2)

        assert stats.snapshot()["errors"] == 2
        assert fake_s3.requests == []

    def test_largefile_scenario(self, fake_s3, tmp_path):
        scenario = _fake_backed(
            LargeFileScenario, fake_s3,
            file_path=str(tmp_path / "large.bin"),
            file_size=11 * MiB, part_size=5 * MiB, concurrency=3,
        )

        stats = run_scenario(scenario, vus=1, iterations=1)

        assert stats.snapshot()["errors"] == 0
        assert fake_s3.operations().count("PUT ?partNumber&uploadId") == 3
        with open(tmp_path / "large.bin", "rb") as f:
            assert list(fake_s3.objects.values()) == [f.read()]
