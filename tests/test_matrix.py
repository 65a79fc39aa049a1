"""Tests for step generation and demo classification."""

from __future__ import annotations

from pathlib import Path

import pytest

from matrixci.devices import DEFAULT_DEVICES
from matrixci.errors import ConfigurationError
from matrixci.matrix import (
    DemoSet,
    PatternClassifier,
    classify_demos,
    demo_build_steps,
    demo_phase_steps,
    device_check_steps,
    discover_demos,
)
from matrixci.model import DemoClass, DemoEntry, DeviceEntry, Phase

from conftest import TWO_DEVICES


classify = PatternClassifier("nrf5x*", "nrf52*")


class TestPatternClassifier:

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("demos/nrf5x-demo", DemoClass.UNRESTRICTED),
            ("demos/nrf52-beacon", DemoClass.RESTRICTED),
            ("demos/nrf52840-dongle", DemoClass.RESTRICTED),
            ("demos/esp32", DemoClass.EXCLUDED),
            ("demos/nrf51-only", DemoClass.EXCLUDED),
        ],
    )
    def test_classification(self, path, expected):
        assert classify(path) is expected

    def test_classified_entries_carry_pattern(self):
        demos = classify_demos(["demos/nrf5x-a", "demos/nrf52-b", "demos/other"], classify)
        assert demos.unrestricted == [DemoEntry("demos/nrf5x-a", "nrf5x*")]
        assert demos.restricted == [DemoEntry("demos/nrf52-b", "nrf52*")]
        assert demos.excluded == ["demos/other"]

    def test_plain_function_classifier(self):
        demos = classify_demos(["demos/x"], lambda p: DemoClass.UNRESTRICTED)
        assert demos.unrestricted == [DemoEntry("demos/x", "*")]


class TestDiscoverDemos:

    def test_sorted_and_files_ignored(self, tmp_path: Path):
        for name in ("nrf52-b", "nrf5x-z", "nrf5x-a", "misc"):
            (tmp_path / "demos" / name).mkdir(parents=True)
        (tmp_path / "demos" / "nrf5x-readme.txt").write_text("not a demo")

        demos = discover_demos(tmp_path, "demos", classify)

        assert [d.path for d in demos.unrestricted] == ["demos/nrf5x-a", "demos/nrf5x-z"]
        assert [d.path for d in demos.restricted] == ["demos/nrf52-b"]
        assert demos.excluded == ["demos/misc"]
        assert len(demos) == 3

    def test_missing_directory_is_empty(self, tmp_path: Path):
        demos = discover_demos(tmp_path, "demos", classify)
        assert len(demos) == 0

    def test_demos_path_is_a_file(self, tmp_path: Path):
        (tmp_path / "demos").write_text("")
        with pytest.raises(ConfigurationError):
            discover_demos(tmp_path, "demos", classify)


class TestDeviceCheckSteps:

    def test_one_step_per_device_in_order(self):
        steps = list(device_check_steps(DEFAULT_DEVICES, workdir="rubble-nrf5x"))
        assert [s.device.id for s in steps] == ["51", "52810", "52832", "52840"]
        assert all(s.phase is Phase.DEVICE_CHECK for s in steps)
        assert all(s.features == frozenset({s.device.id}) for s in steps)
        assert all(s.demo is None and s.workdir == "rubble-nrf5x" for s in steps)


class TestDemoBuildSteps:

    @pytest.mark.parametrize("n", [0, 1, 4])
    def test_unrestricted_yields_two_per_device(self, n):
        devs = DEFAULT_DEVICES[:n]
        steps = list(demo_build_steps(DemoEntry("demos/x"), devs))
        assert len(steps) == 2 * n

    def test_default_features_before_no_default(self):
        steps = list(demo_build_steps(DemoEntry("demos/x"), TWO_DEVICES))
        assert [(s.device.id, s.default_features) for s in steps] == [
            ("51", True),
            ("51", False),
            ("52840", True),
            ("52840", False),
        ]
        assert all(s.workdir == "demos/x" for s in steps)

    def test_restricted_filters_by_prefix_and_notifies_once(self):
        skipped = []
        demo = DemoEntry("demos/52y")

        steps = list(
            demo_build_steps(
                demo,
                TWO_DEVICES,
                restrict_prefix="52",
                on_skip=lambda d, dev: skipped.append((d.path, dev.id)),
            )
        )

        assert [s.device.id for s in steps] == ["52840", "52840"]
        assert skipped == [("demos/52y", "51")]

    def test_restricted_with_no_matching_device(self):
        steps = list(demo_build_steps(DemoEntry("demos/y"), [DeviceEntry("51", "t")], restrict_prefix="52"))
        assert steps == []

    def test_phase_runs_unrestricted_before_restricted(self):
        demos = DemoSet(unrestricted=[DemoEntry("demos/b")], restricted=[DemoEntry("demos/a")])
        steps = list(demo_phase_steps(demos, TWO_DEVICES, restrict_prefix="52"))
        assert [s.demo.path for s in steps] == ["demos/b"] * 4 + ["demos/a"] * 2

    def test_no_demos_no_steps(self):
        assert list(demo_phase_steps(DemoSet(), TWO_DEVICES, restrict_prefix="52")) == []
