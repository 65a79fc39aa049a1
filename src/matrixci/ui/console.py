"""Console output formatting utilities for matrixci."""

from __future__ import annotations

import sys
from typing import Mapping, Optional, Sequence

from matrixci.model import BuildStep, DeviceEntry, Phase


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_run_started(
        self,
        root: str,
        devices: Sequence[DeviceEntry],
        demo_count: int,
        rustflags: str,
    ) -> None:
        """Print run start information."""
        print("\nRUN STARTED")
        print(f"Project: {root}")
        print(f"Devices: {', '.join(d.id for d in devices)}")
        print(f"Demos: {demo_count}")
        print(f"RUSTFLAGS: {rustflags}")
        print()

    def print_phase(self, phase: Phase) -> None:
        """Print phase start message."""
        self.print_header(f"PHASE: {phase.value}")

    def print_step(self, message: str) -> None:
        """Print step progress line."""
        print(message, flush=True)

    def print_skip(self, message: str) -> None:
        """Print a skipped matrix cell. Skips are notices, not errors."""
        print(message)

    def print_failure(
        self,
        step: BuildStep,
        reason: str,
        exit_code: Optional[int] = None,
        output: str = "",
        hint: Optional[str] = None,
    ) -> None:
        """
        Print a failed step with its context and the captured tool output.

        Args:
            step: The step that failed
            reason: Failure reason/error message
            exit_code: Optional exit code
            output: Captured output of the tool
            hint: Optional hint for user
        """
        print(f"\nSTEP FAILED: {step.phase.value}", file=sys.stderr)
        print(f"Context: {step.describe()}", file=sys.stderr)
        if exit_code is not None:
            print(f"Exit code: {exit_code}", file=sys.stderr)
        if hint:
            print(f"Hint: {hint}", file=sys.stderr)
        if self.debug:
            print(f"Error details: {reason}", file=sys.stderr)
        if output:
            print("Output:", file=sys.stderr)
            print(output.rstrip("\n"), file=sys.stderr)

    def print_plan_step(self, index: int, message: str, command: str) -> None:
        """Print one planned step (dry run)."""
        print(f"  {index:3d}. {message}")
        print(f"       $ {command}")

    def print_results(self, counts: Mapping[Phase, int], skipped: int) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for phase, count in counts.items():
            print(f"  {phase.value}: {count} step(s) SUCCESS")
        if skipped:
            print(f"  skipped cells: {skipped}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
