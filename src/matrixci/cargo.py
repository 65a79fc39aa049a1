# cargo.py
# Translates a BuildStep into the cargo command line that verifies it.
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .config import RUSTFLAGS_ENV, PipelineConfig
from .model import BuildStep, Phase, features_arg


@dataclass(frozen=True)
class Invocation:
    executable: str
    args: List[str]
    env: Dict[str, str] = field(default_factory=dict)

    def command_line(self) -> str:
        return " ".join([self.executable, *self.args])


# Phases that compile code and therefore honour RUSTFLAGS.
_STRICT_PHASES = {Phase.UNIT_TEST, Phase.DEVICE_CHECK, Phase.DEMO_BUILD}


def _package_args(packages) -> List[str]:
    args: List[str] = []
    for p in packages:
        args.extend(["-p", p])
    return args


def invocation_for(step: BuildStep, config: PipelineConfig) -> Invocation:
    phase = step.phase

    if phase is Phase.UNIT_TEST:
        args = ["test", *_package_args(step.packages)]

    elif phase is Phase.DEVICE_CHECK:
        args = ["check"]
        if step.features:
            args.append(f"--features={features_arg(step.features)}")
        args.append(f"--target={step.device.target}")

    elif phase is Phase.DEMO_BUILD:
        args = ["build", "--target", step.device.target]
        if step.features:
            args.extend(["--features", features_arg(step.features)])
        if not step.default_features:
            args.append("--no-default-features")

    elif phase is Phase.FORMAT_CHECK:
        args = ["fmt", "--all", "--", "--check"]

    elif phase is Phase.DOC_BUILD:
        args = ["doc", "--no-deps", *_package_args(step.packages)]

    else:
        raise ValueError(f"Unknown phase: {phase!r}")

    env = {RUSTFLAGS_ENV: config.rustflags} if phase in _STRICT_PHASES else {}
    return Invocation(config.cargo, args, env)
