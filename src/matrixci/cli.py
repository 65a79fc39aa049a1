# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from matrixci.config import PipelineConfig, load_config
from matrixci.devices import parse_device_spec, validate_devices
from matrixci.errors import ConfigurationError
from matrixci.model import Phase
from matrixci.pipeline import build_pipeline, command_line_for, progress_message
from matrixci.command import SubprocessRunner
from matrixci.ui.console import Console, set_console, get_console


EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130

DEFAULT_CONFIG_FILE = "matrixci_config.py"


def resolve_config(root: Path, config_arg: str | None, device_args: tuple[str, ...]) -> PipelineConfig:
    """
    Build the run configuration.

    Precedence: --config file, else <root>/matrixci_config.py if present,
    else built-in defaults. --device values replace the device matrix.
    """
    console = get_console()

    if config_arg:
        cfg = load_config(config_arg)
        console.print_debug(f"Using config file: {config_arg}")
    elif (root / DEFAULT_CONFIG_FILE).exists():
        cfg = load_config(root / DEFAULT_CONFIG_FILE)
        console.print_debug(f"Using config file: {root / DEFAULT_CONFIG_FILE}")
    else:
        cfg = PipelineConfig()

    if device_args:
        cfg = cfg.with_devices(tuple(parse_device_spec(d) for d in device_args))

    validate_devices(cfg.devices)
    return cfg


def _report_config_error(e: ConfigurationError) -> None:
    get_console().print_error(
        "Invalid configuration",
        e.message,
        details=[f"{k}={v}" for k, v in e.details.items()] or None,
        suggestion="Fix the configuration and run again:\n  matrixci plan --root <project>",
    )


def _common_options(fn):
    fn = click.option("--root", default=".", type=click.Path(file_okay=False), help="Project root directory")(fn)
    fn = click.option("--config", "config_file", default=None, help="Python config file defining CONFIG or config()")(fn)
    fn = click.option(
        "--device",
        "device_args",
        multiple=True,
        help="Override the device matrix with ID=TARGET (repeatable, order kept)",
    )(fn)
    return fn


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """matrixci: fail-fast build/check matrix for multi-device cargo projects."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@_common_options
@click.option("--stream/--no-stream", default=False, show_default=True, help="Echo tool output while it runs")
@click.option("--dry-run", is_flag=True, default=False, help="Print the step plan instead of running it")
@click.pass_context
def run(ctx, root, config_file, device_args, stream, dry_run):
    """Run the verification pipeline; stops at the first failing step."""
    if dry_run:
        ctx.invoke(plan, root=root, config_file=config_file, device_args=device_args)
        return

    console = get_console()
    root_p = Path(root).resolve()

    try:
        cfg = resolve_config(root_p, config_file, device_args)
        runner = SubprocessRunner(stream=stream)
        pipeline = build_pipeline(cfg, root_p, runner=runner, console=console)
        pipeline.preflight()

        console.print_run_started(
            root=str(root_p),
            devices=cfg.devices,
            demo_count=len(pipeline.demos),
            rustflags=cfg.rustflags,
        )

        result = pipeline.run()
        console.print_results(result.counts, len(result.skipped))

    except ConfigurationError as e:
        _report_config_error(e)
        sys.exit(EXIT_CONFIG_ERROR)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


@cli.command()
@_common_options
@click.pass_context
def plan(ctx, root, config_file, device_args):
    """Print every step the pipeline would run, in order."""
    console = get_console()
    root_p = Path(root).resolve()

    try:
        cfg = resolve_config(root_p, config_file, device_args)
        pipeline = build_pipeline(cfg, root_p, console=console)
        steps = pipeline.plan()
    except ConfigurationError as e:
        _report_config_error(e)
        sys.exit(EXIT_CONFIG_ERROR)

    current: Phase | None = None
    for i, step in enumerate(steps, start=1):
        if step.phase is not current:
            current = step.phase
            console.print_phase(current)
        console.print_plan_step(i, progress_message(step, cfg), command_line_for(step, cfg))
    console.print_info(f"\n{len(steps)} step(s) planned")


@cli.command()
@_common_options
def devices(root, config_file, device_args):
    """Print the device matrix in iteration order."""
    console = get_console()
    try:
        cfg = resolve_config(Path(root).resolve(), config_file, device_args)
    except ConfigurationError as e:
        _report_config_error(e)
        sys.exit(EXIT_CONFIG_ERROR)

    for entry in cfg.devices:
        console.print_info(f"{entry.label(cfg.family)}\t{entry.target}")


if __name__ == "__main__":
    cli()
