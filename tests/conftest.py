from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from matrixci.config import PipelineConfig
from matrixci.model import BuildStep, DeviceEntry, StepOutcome
from matrixci.ui.console import Console


@dataclass
class Call:
    step: BuildStep
    executable: str
    args: List[str]
    cwd: str
    env: Dict[str, str]


@dataclass
class FakeRunner:
    """Records every invocation; fails the ones `fail_when` selects."""
    fail_when: Optional[Callable[[int, BuildStep], bool]] = None
    exit_code: int = 101
    launch_error: bool = False
    calls: List[Call] = field(default_factory=list)

    def run(self, step, executable, args, working_dir, env=None):
        index = len(self.calls)
        self.calls.append(Call(step, executable, list(args), os.getcwd(), dict(env or {})))
        if self.fail_when is not None and self.fail_when(index, step):
            return StepOutcome(step, False, "error: could not compile\n", self.exit_code, self.launch_error)
        return StepOutcome(step, True, "ok\n", 0)

    @property
    def steps(self) -> List[BuildStep]:
        return [c.step for c in self.calls]


TWO_DEVICES = (
    DeviceEntry("51", "tA"),
    DeviceEntry("52840", "tB"),
)


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """A minimal project tree with the crate and docs directories the pipeline needs."""
    (tmp_path / "rubble-nrf5x").mkdir()
    (tmp_path / "rubble-docs").mkdir()
    return tmp_path


@pytest.fixture()
def config() -> PipelineConfig:
    return PipelineConfig(devices=TWO_DEVICES, rustflags="--deny warnings")


@pytest.fixture()
def console() -> Console:
    return Console(debug=False)


@pytest.fixture()
def runner() -> FakeRunner:
    return FakeRunner()
