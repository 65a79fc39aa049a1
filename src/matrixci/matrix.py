# matrix.py
from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path, PurePosixPath
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from .errors import ConfigurationError
from .model import BuildStep, DemoClass, DemoEntry, DeviceEntry, Phase


Classifier = Callable[[str], DemoClass]
SkipCallback = Callable[[DemoEntry, DeviceEntry], None]


# ---------------------------------------------------------------------
# Demo classification
# ---------------------------------------------------------------------

class PatternClassifier:
    """
    Default demo classifier: glob match on the directory name.

    Example:
        PatternClassifier("nrf5x*", "nrf52*")("demos/nrf52-beacon")
        -> DemoClass.RESTRICTED
    """

    def __init__(self, unrestricted: str, restricted: str):
        self.unrestricted = unrestricted
        self.restricted = restricted

    def __call__(self, path: str) -> DemoClass:
        name = PurePosixPath(path).name
        if fnmatch(name, self.unrestricted):
            return DemoClass.UNRESTRICTED
        if fnmatch(name, self.restricted):
            return DemoClass.RESTRICTED
        return DemoClass.EXCLUDED

    def pattern_for(self, kind: DemoClass) -> str:
        if kind is DemoClass.UNRESTRICTED:
            return self.unrestricted
        if kind is DemoClass.RESTRICTED:
            return self.restricted
        return "*"


@dataclass
class DemoSet:
    unrestricted: List[DemoEntry] = field(default_factory=list)
    restricted: List[DemoEntry] = field(default_factory=list)
    excluded: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.unrestricted) + len(self.restricted)


def classify_demos(paths: Iterable[str], classify: Classifier) -> DemoSet:
    pattern_for = getattr(classify, "pattern_for", lambda kind: "*")
    demos = DemoSet()
    for path in paths:
        kind = classify(path)
        if kind is DemoClass.UNRESTRICTED:
            demos.unrestricted.append(DemoEntry(path, pattern_for(kind)))
        elif kind is DemoClass.RESTRICTED:
            demos.restricted.append(DemoEntry(path, pattern_for(kind)))
        else:
            demos.excluded.append(path)
    return demos


def discover_demos(root: str | Path, demos_dir: str, classify: Classifier) -> DemoSet:
    """
    Enumerate demo directories under `root/demos_dir`, sorted by name.

    A missing demos directory is not an error: it yields an empty DemoSet.

    Raises:
        ConfigurationError: the directory exists but cannot be read.
    """
    base = Path(root) / demos_dir
    if not base.exists():
        return DemoSet()
    if not base.is_dir():
        raise ConfigurationError("Demos path is not a directory", {"path": str(base)})

    try:
        names = sorted(p.name for p in base.iterdir() if p.is_dir())
    except OSError as e:
        raise ConfigurationError("Demos directory is unreadable", {"path": str(base), "error": str(e)}) from e

    rel = PurePosixPath(demos_dir)
    return classify_demos((str(rel / n) for n in names), classify)


# ---------------------------------------------------------------------
# Step generation
# ---------------------------------------------------------------------

def device_check_steps(devices: Sequence[DeviceEntry], *, workdir: str = ".") -> Iterator[BuildStep]:
    for device in devices:
        yield BuildStep(
            phase=Phase.DEVICE_CHECK,
            device=device,
            features=frozenset({device.id}),
            workdir=workdir,
        )


def demo_build_steps(
    demo: DemoEntry,
    devices: Sequence[DeviceEntry],
    *,
    restrict_prefix: Optional[str] = None,
    on_skip: Optional[SkipCallback] = None,
) -> Iterator[BuildStep]:
    """
    Two steps per device: default features first, then --no-default-features.

    With `restrict_prefix`, devices whose id does not start with it are
    skipped; `on_skip` is told once per skipped device.
    """
    for device in devices:
        if restrict_prefix is not None and not device.id.startswith(restrict_prefix):
            if on_skip is not None:
                on_skip(demo, device)
            continue

        for default_features in (True, False):
            yield BuildStep(
                phase=Phase.DEMO_BUILD,
                device=device,
                demo=demo,
                features=frozenset({device.id}),
                default_features=default_features,
                workdir=demo.path,
            )


def demo_phase_steps(
    demos: DemoSet,
    devices: Sequence[DeviceEntry],
    *,
    restrict_prefix: str,
    on_skip: Optional[SkipCallback] = None,
) -> Iterator[BuildStep]:
    """Unrestricted demos on every device, then restricted demos on the filtered devices."""
    for demo in demos.unrestricted:
        yield from demo_build_steps(demo, devices)
    for demo in demos.restricted:
        yield from demo_build_steps(demo, devices, restrict_prefix=restrict_prefix, on_skip=on_skip)
