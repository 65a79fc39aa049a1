# pipeline.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from .cargo import invocation_for
from .config import PipelineConfig
from .devices import validate_devices
from .errors import ConfigurationError
from .executor import StepExecutor
from .matrix import DemoSet, PatternClassifier, demo_phase_steps, device_check_steps, discover_demos
from .model import PHASES, BuildStep, DemoEntry, DeviceEntry, Phase
from .ui.console import Console, get_console


def progress_message(step: BuildStep, config: PipelineConfig) -> str:
    """Human-readable progress line printed before a step runs."""
    phase = step.phase
    if phase is Phase.UNIT_TEST:
        return "Running tests with Cargo..."
    if phase is Phase.DEVICE_CHECK:
        return (
            f"Checking {config.device_crate} for {step.device.label(config.family)} "
            f"({step.device.target})..."
        )
    if phase is Phase.DEMO_BUILD:
        suffix = "" if step.default_features else " (no default features)"
        return (
            f"Building {step.demo.path} for device {step.device.label(config.family)}, "
            f"target {step.device.target}{suffix}..."
        )
    if phase is Phase.FORMAT_CHECK:
        return "Checking code formatting..."
    return "Generating documentation..."


@dataclass
class PipelineResult:
    """Steps executed per phase, in phase order, plus skipped matrix cells."""
    counts: Dict[Phase, int] = field(default_factory=lambda: {p: 0 for p in PHASES})
    skipped: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.counts.values())


class Pipeline:
    """
    Runs the five verification phases in strict order.

    Each phase starts only after every step of the previous one succeeded;
    a failing step never returns here (the executor exits the process).
    """

    def __init__(
        self,
        config: PipelineConfig,
        executor: StepExecutor,
        *,
        demos: Optional[DemoSet] = None,
        console: Optional[Console] = None,
    ):
        self.config = config
        self.executor = executor
        self.console = console or get_console()
        self.root = executor.root
        self.demos = demos if demos is not None else DemoSet()
        self._skipped: List[Tuple[str, str]] = []

    # ------------------------------------------------------------------
    # Startup validation
    # ------------------------------------------------------------------

    def preflight(self) -> None:
        """
        Validate static configuration before any phase runs.

        Raises:
            ConfigurationError: bad device matrix or missing crate directories.
        """
        validate_devices(self.config.devices)
        for rel in (self.config.device_crate, self.config.docs_dir):
            path = self.root / rel
            if not path.is_dir():
                raise ConfigurationError("Project directory not found", {"path": str(path)})

    # ------------------------------------------------------------------
    # Step generation
    # ------------------------------------------------------------------

    def _on_skip(self, demo: DemoEntry, device: DeviceEntry) -> None:
        self._skipped.append((demo.path, device.id))
        self.console.print_skip(f"SKIPPING {demo.path} for device {device.label(self.config.family)}")

    def steps(self, phase: Phase) -> Iterator[BuildStep]:
        cfg = self.config
        if phase is Phase.UNIT_TEST:
            yield BuildStep(phase=phase, packages=(cfg.test_package,))
        elif phase is Phase.DEVICE_CHECK:
            yield from device_check_steps(cfg.devices, workdir=cfg.device_crate)
        elif phase is Phase.DEMO_BUILD:
            yield from demo_phase_steps(
                self.demos,
                cfg.devices,
                restrict_prefix=cfg.restricted_prefix,
                on_skip=self._on_skip,
            )
        elif phase is Phase.FORMAT_CHECK:
            yield BuildStep(phase=phase)
        elif phase is Phase.DOC_BUILD:
            yield BuildStep(phase=phase, workdir=cfg.docs_dir, packages=tuple(cfg.doc_packages))

    def plan(self) -> List[BuildStep]:
        """Every step of the run, in execution order, without running anything."""
        self.preflight()
        return [step for phase in PHASES for step in self.steps(phase)]

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run(self) -> PipelineResult:
        self.preflight()
        self._skipped = []
        result = PipelineResult()

        for phase in PHASES:
            self.console.print_phase(phase)
            for step in self.steps(phase):
                self.executor.execute(step, progress_message(step, self.config))
                result.counts[phase] += 1

        result.skipped = list(self._skipped)
        return result


def build_pipeline(
    config: PipelineConfig,
    root: str | Path = ".",
    *,
    runner=None,
    console: Optional[Console] = None,
    classify=None,
    exit=None,
) -> Pipeline:
    """Wire executor, demo discovery and pipeline for a project root."""
    console = console or get_console()
    kwargs = {} if exit is None else {"exit": exit}
    executor = StepExecutor(config, root, runner=runner, console=console, **kwargs)

    classify = classify or PatternClassifier(config.unrestricted_pattern, config.restricted_pattern)
    demos = discover_demos(executor.root, config.demos_dir, classify)
    for path in demos.excluded:
        console.print_debug(f"demo {path} matches no demo pattern, excluded")

    return Pipeline(config, executor, demos=demos, console=console)


def command_line_for(step: BuildStep, config: PipelineConfig) -> str:
    return invocation_for(step, config).command_line()
