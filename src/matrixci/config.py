# config.py
from __future__ import annotations

import os
import runpy
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .devices import DEFAULT_DEVICES
from .errors import ConfigurationError
from .model import DeviceEntry


RUSTFLAGS_ENV = "RUSTFLAGS"
DEFAULT_RUSTFLAGS = "--deny warnings"


def rustflags_from_env(environ: Optional[Mapping[str, str]] = None) -> str:
    """`${RUSTFLAGS:---deny warnings}`: unset and empty both fall back to the default."""
    environ = os.environ if environ is None else environ
    return environ.get(RUSTFLAGS_ENV) or DEFAULT_RUSTFLAGS


@dataclass(frozen=True)
class PipelineConfig:
    """
    Static description of the project being verified.

    Directory fields are relative to the project root.
    """
    devices: Tuple[DeviceEntry, ...] = DEFAULT_DEVICES
    family: str = "nRF"
    cargo: str = "cargo"

    test_package: str = "rubble"
    device_crate: str = "rubble-nrf5x"
    docs_dir: str = "rubble-docs"
    doc_packages: Tuple[str, ...] = ("rubble", "rubble-nrf5x")

    # Demo selection
    demos_dir: str = "demos"
    unrestricted_pattern: str = "nrf5x*"
    restricted_pattern: str = "nrf52*"
    restricted_prefix: str = "52"

    rustflags: str = field(default_factory=rustflags_from_env)

    def with_devices(self, entries: Tuple[DeviceEntry, ...]) -> PipelineConfig:
        return replace(self, devices=tuple(entries))


# ----------------------------------------------------------------------
# Config file loading (local python file)
# ----------------------------------------------------------------------

def load_config(path: str | Path) -> PipelineConfig:
    """
    Load a PipelineConfig from a python file.

    The file must define either:
      - config() -> PipelineConfig
      - CONFIG = PipelineConfig(...)

    Raises:
      ConfigurationError: missing file, not a .py file, or wrong shape.
    """
    cfg_path = Path(path).expanduser().resolve()
    if not cfg_path.exists():
        raise ConfigurationError("Config file not found", {"path": str(cfg_path)})
    if cfg_path.suffix != ".py":
        raise ConfigurationError("Config must be a .py file", {"path": cfg_path.name})

    module_name = f"matrixci_config_{cfg_path.stem}"
    try:
        globals_dict = runpy.run_path(str(cfg_path), run_name=module_name)
    except Exception as e:
        raise ConfigurationError(
            "Config file could not be evaluated",
            {"path": str(cfg_path), "error": f"{type(e).__name__}: {e}"},
        ) from e

    cfg = None
    if "config" in globals_dict and callable(globals_dict["config"]):
        try:
            cfg = globals_dict["config"]()
        except Exception as e:
            raise ConfigurationError(
                "config() raised an error",
                {"path": str(cfg_path), "error": f"{type(e).__name__}: {e}"},
            ) from e
    elif "CONFIG" in globals_dict:
        cfg = globals_dict["CONFIG"]

    if not isinstance(cfg, PipelineConfig):
        raise ConfigurationError(
            "Config must return/define a PipelineConfig. "
            "Define config() -> PipelineConfig or CONFIG = PipelineConfig(...).",
            {"path": str(cfg_path)},
        )

    return cfg
