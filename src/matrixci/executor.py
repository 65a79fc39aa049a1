# executor.py
from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Optional

from .cargo import invocation_for
from .command import SubprocessRunner, working_directory
from .config import PipelineConfig
from .errors import InvocationFailure, InvocationLaunchError
from .model import BuildStep, StepOutcome
from .ui.console import Console, get_console


# ----------------------------------------------------------------------
# Fail-fast policy
# ----------------------------------------------------------------------

def fail_fast(outcome: StepOutcome, executable: str = "") -> None:
    """
    Return if the step succeeded, raise otherwise.

    Raises:
        InvocationLaunchError: the tool could not be started.
        InvocationFailure: the tool ran and reported failure.
    """
    if outcome.success:
        return
    if outcome.launch_error:
        raise InvocationLaunchError(
            step=outcome.step,
            exit_code=outcome.exit_code,
            output=outcome.output,
            executable=executable,
        )
    raise InvocationFailure(step=outcome.step, exit_code=outcome.exit_code, output=outcome.output)


def exit_code_for(error: InvocationFailure) -> int:
    """Propagate the tool's exit code; anything non-positive (signals) becomes 1."""
    return error.exit_code if error.exit_code > 0 else 1


# ----------------------------------------------------------------------
# Step executor
# ----------------------------------------------------------------------

class StepExecutor:
    """
    Runs BuildSteps one at a time and terminates the process on the first failure.

    `exit` is called with a non-zero code after the failure has been
    reported; it defaults to sys.exit. If it returns, the failure is
    re-raised.
    """

    def __init__(
        self,
        config: PipelineConfig,
        root: str | Path = ".",
        *,
        runner=None,
        console: Optional[Console] = None,
        exit: Callable[[int], None] = sys.exit,
    ):
        self.config = config
        self.root = Path(root).resolve()
        self.runner = runner or SubprocessRunner()
        self.console = console or get_console()
        self._exit = exit

    def execute(self, step: BuildStep, message: Optional[str] = None) -> StepOutcome:
        if message:
            self.console.print_step(message)

        inv = invocation_for(step, self.config)
        self.console.print_debug(f"$ {inv.command_line()} (cwd={step.workdir})")

        with working_directory(self.root / step.workdir) as cwd:
            outcome = self.runner.run(step, inv.executable, inv.args, cwd.resolve(), env=inv.env)

        # Streamed output is already on the terminal.
        streamed = bool(getattr(self.runner, "stream", False))

        try:
            fail_fast(outcome, inv.executable)
        except InvocationLaunchError as e:
            self.console.print_failure(step, str(e), exit_code=e.exit_code, output=e.output, hint=e.hint)
            self._exit(exit_code_for(e))
            raise
        except InvocationFailure as e:
            output = "" if streamed else e.output
            self.console.print_failure(step, str(e), exit_code=e.exit_code, output=output)
            self._exit(exit_code_for(e))
            raise

        return outcome
