# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from .model import BuildStep


TOOL_HINTS = {
    "cargo": "Install the Rust toolchain (https://rustup.rs) or fix PATH.",
    "rustup": "Install rustup (https://rustup.rs) or fix PATH.",
}


@dataclass
class ConfigurationError(Exception):
    """
    Malformed device matrix, bad config file or missing project directory.

    Raised before any phase runs.
    """
    message: str
    details: Dict[str, str] = field(default_factory=dict)
    kind: str = "configuration_error"

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class InvocationFailure(Exception):
    """The build tool ran and reported failure (non-zero exit)."""
    step: BuildStep
    exit_code: int
    output: str
    kind: str = "invocation_failure"

    def __str__(self) -> str:
        return f"{self.kind}: step failed (exit={self.exit_code})\n{self.step.describe()}"


@dataclass
class InvocationLaunchError(InvocationFailure):
    """The build tool could not be started at all (missing binary, permissions)."""
    kind: str = "launch_error"
    executable: str = ""

    @property
    def hint(self) -> str:
        name = self.executable.rsplit("/", 1)[-1]
        return TOOL_HINTS.get(name, f"Install {name or 'the build tool'} or fix PATH.")

    def __str__(self) -> str:
        return f"{self.kind}: could not start {self.executable!r}\n{self.step.describe()}"
