# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import FrozenSet, Optional, Tuple


class Phase(Enum):
    """Pipeline phases. Declaration order is execution order."""
    UNIT_TEST = "UnitTest"
    DEVICE_CHECK = "DeviceCheck"
    DEMO_BUILD = "DemoBuild"
    FORMAT_CHECK = "FormatCheck"
    DOC_BUILD = "DocBuild"


PHASES: Tuple[Phase, ...] = tuple(Phase)


class DemoClass(Enum):
    UNRESTRICTED = "unrestricted"
    RESTRICTED = "restricted"
    EXCLUDED = "excluded"


FeatureSet = FrozenSet[str]


def features_arg(features: FeatureSet) -> str:
    """Render a feature set the way cargo expects it (`a,b,c`)."""
    return ",".join(sorted(features))


@dataclass(frozen=True)
class DeviceEntry:
    """One hardware variant and the target triple it is compiled for."""
    id: str
    target: str

    def label(self, family: str = "") -> str:
        return f"{family}{self.id}"


@dataclass(frozen=True)
class DemoEntry:
    """A buildable demo application directory (relative to the project root)."""
    path: str
    name_pattern: str = "*"

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name


@dataclass(frozen=True)
class BuildStep:
    """
    One concrete build-tool invocation.

    `workdir` is relative to the project root. `packages` is the package
    selector list; it is empty when the tool runs inside a crate directory.
    """
    phase: Phase
    device: Optional[DeviceEntry] = None
    demo: Optional[DemoEntry] = None
    features: FeatureSet = field(default_factory=frozenset)
    default_features: bool = True
    workdir: str = "."
    packages: Tuple[str, ...] = ()

    def describe(self) -> str:
        parts = [f"phase={self.phase.value}"]
        if self.demo is not None:
            parts.append(f"demo={self.demo.path}")
        if self.device is not None:
            parts.append(f"device={self.device.id}")
            parts.append(f"target={self.device.target}")
        if self.features:
            parts.append(f"features={{{features_arg(self.features)}}}")
        if not self.default_features:
            parts.append("no-default-features")
        if self.packages:
            parts.append(f"packages={','.join(self.packages)}")
        return " ".join(parts)


@dataclass(frozen=True)
class StepOutcome:
    """Result of running one BuildStep. Never mutated after creation."""
    step: BuildStep
    success: bool
    output: str
    exit_code: int
    launch_error: bool = False
