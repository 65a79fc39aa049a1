"""Tests for the cargo command lines derived from build steps."""

from matrixci.cargo import invocation_for
from matrixci.config import PipelineConfig
from matrixci.model import BuildStep, DemoEntry, DeviceEntry, Phase


CFG = PipelineConfig(rustflags="--deny warnings")
DEV = DeviceEntry("52840", "thumbv7em-none-eabi")


def test_unit_test():
    inv = invocation_for(BuildStep(Phase.UNIT_TEST, packages=("rubble",)), CFG)
    assert inv.command_line() == "cargo test -p rubble"
    assert inv.env == {"RUSTFLAGS": "--deny warnings"}


def test_device_check():
    step = BuildStep(Phase.DEVICE_CHECK, device=DEV, features=frozenset({"52840"}))
    inv = invocation_for(step, CFG)
    assert inv.args == ["check", "--features=52840", "--target=thumbv7em-none-eabi"]


def test_demo_build_both_modes():
    demo = DemoEntry("demos/nrf52-demo")
    with_defaults = BuildStep(Phase.DEMO_BUILD, device=DEV, demo=demo, features=frozenset({"52840"}))
    without = BuildStep(
        Phase.DEMO_BUILD, device=DEV, demo=demo, features=frozenset({"52840"}), default_features=False
    )

    assert invocation_for(with_defaults, CFG).args == [
        "build", "--target", "thumbv7em-none-eabi", "--features", "52840",
    ]
    assert invocation_for(without, CFG).args[-1] == "--no-default-features"


def test_format_and_doc_are_not_strict():
    fmt = invocation_for(BuildStep(Phase.FORMAT_CHECK), CFG)
    doc = invocation_for(BuildStep(Phase.DOC_BUILD, packages=("rubble", "rubble-nrf5x")), CFG)

    assert fmt.args == ["fmt", "--all", "--", "--check"]
    assert doc.args == ["doc", "--no-deps", "-p", "rubble", "-p", "rubble-nrf5x"]
    assert fmt.env == {} and doc.env == {}


def test_custom_cargo_executable():
    cfg = PipelineConfig(cargo="/opt/rust/bin/cargo", rustflags="")
    inv = invocation_for(BuildStep(Phase.FORMAT_CHECK), cfg)
    assert inv.executable == "/opt/rust/bin/cargo"
