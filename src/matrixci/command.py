# command.py
from __future__ import annotations

import os
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from .model import BuildStep, StepOutcome


# Exit codes the shell uses when a command cannot be started.
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126

DEFAULT_OUTPUT_LIMIT = 8000


@contextmanager
def working_directory(path: str | Path) -> Iterator[Path]:
    """Change into `path` for the duration of the block, always restoring the old cwd."""
    original_cwd = os.getcwd()
    os.chdir(path)
    try:
        yield Path(path)
    finally:
        os.chdir(original_cwd)


class SubprocessRunner:
    """
    Runs one external command to completion and reports a StepOutcome.

    stderr is merged into stdout. With `stream=True` every line is also
    handed to `echo` as it arrives. No retries.
    """

    def __init__(
        self,
        *,
        stream: bool = False,
        echo: Optional[Callable[[str], None]] = None,
        output_limit: int = DEFAULT_OUTPUT_LIMIT,
    ):
        self.stream = stream
        self.echo = echo or (lambda line: print(line, end=""))
        self.output_limit = output_limit

    def run(
        self,
        step: BuildStep,
        executable: str,
        args: Sequence[str],
        working_dir: str | Path,
        env: Optional[Dict[str, str]] = None,
    ) -> StepOutcome:
        full_env = os.environ.copy()
        full_env.update(env or {})

        try:
            proc = subprocess.Popen(
                [executable, *args],
                cwd=str(working_dir),
                env=full_env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except FileNotFoundError as e:
            return StepOutcome(step, False, str(e), EXIT_NOT_FOUND, launch_error=True)
        except PermissionError as e:
            return StepOutcome(step, False, str(e), EXIT_NOT_EXECUTABLE, launch_error=True)

        lines: List[str] = []
        with proc:
            assert proc.stdout is not None
            for line in proc.stdout:
                lines.append(line)
                if self.stream:
                    self.echo(line)
            exit_code = proc.wait()

        output = "".join(lines)
        if self.output_limit and len(output) > self.output_limit:
            dropped = len(output) - self.output_limit
            output = f"... ({dropped} chars truncated)\n" + output[-self.output_limit:]

        return StepOutcome(step, exit_code == 0, output, exit_code)
