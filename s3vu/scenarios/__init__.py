from __future__ import annotations

# Scenario registry

from s3vu.scenarios.base import Scenario
from s3vu.scenarios.data import DataScenario
from s3vu.scenarios.largefile import LargeFileScenario
from s3vu.scenarios.upload import UploadScenario

SCENARIOS: dict[str, type[Scenario]] = {
    "data": DataScenario,
    "largefile": LargeFileScenario,
    "upload": UploadScenario,
}

__all__ = [
    "SCENARIOS",
    "Scenario",
    "DataScenario",
    "LargeFileScenario",
    "UploadScenario",
]
