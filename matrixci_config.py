# matrixci_config.py
# Configuration for the rubble workspace. Picked up automatically when
# `matrixci run` is started from the project root.
from __future__ import annotations

from matrixci.config import PipelineConfig
from matrixci.model import DeviceEntry


def config():
    return PipelineConfig(
        devices=(
            DeviceEntry("51", "thumbv6m-none-eabi"),
            DeviceEntry("52810", "thumbv7em-none-eabi"),
            DeviceEntry("52832", "thumbv7em-none-eabi"),
            DeviceEntry("52840", "thumbv7em-none-eabi"),
        ),
        test_package="rubble",
        device_crate="rubble-nrf5x",
        docs_dir="rubble-docs",
        doc_packages=("rubble", "rubble-nrf5x"),
        demos_dir="demos",
        unrestricted_pattern="nrf5x*",
        restricted_pattern="nrf52*",
        restricted_prefix="52",
    )
