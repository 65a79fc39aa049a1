from .model import Phase, PHASES, DeviceEntry, DemoEntry, DemoClass, BuildStep, StepOutcome
from .devices import DEFAULT_DEVICES
from .config import PipelineConfig, load_config
from .errors import ConfigurationError, InvocationFailure, InvocationLaunchError
from .executor import StepExecutor, fail_fast
from .pipeline import Pipeline, build_pipeline

__all__ = [
    "Phase", "PHASES", "DeviceEntry", "DemoEntry", "DemoClass", "BuildStep", "StepOutcome",
    "DEFAULT_DEVICES", "PipelineConfig", "load_config",
    "ConfigurationError", "InvocationFailure", "InvocationLaunchError",
    "StepExecutor", "fail_fast", "Pipeline", "build_pipeline",
]
