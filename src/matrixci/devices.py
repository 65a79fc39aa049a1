# devices.py
# The device matrix: device id -> target triple, in declaration order.
from __future__ import annotations

from typing import Iterable, Optional, Tuple

from .errors import ConfigurationError
from .model import DeviceEntry


DEFAULT_DEVICES: Tuple[DeviceEntry, ...] = (
    DeviceEntry("51", "thumbv6m-none-eabi"),
    DeviceEntry("52810", "thumbv7em-none-eabi"),
    DeviceEntry("52832", "thumbv7em-none-eabi"),
    DeviceEntry("52840", "thumbv7em-none-eabi"),
)


def validate_devices(entries: Iterable[DeviceEntry]) -> Tuple[DeviceEntry, ...]:
    """
    Check the matrix and freeze it into an ordered tuple.

    Raises:
        ConfigurationError: empty matrix, non-numeric or duplicate id,
            or empty target triple.
    """
    result = tuple(entries)
    if not result:
        raise ConfigurationError("Device matrix is empty")

    seen: set[str] = set()
    for entry in result:
        if not isinstance(entry, DeviceEntry):
            raise ConfigurationError(
                "Device matrix entries must be DeviceEntry values",
                {"entry": repr(entry)},
            )
        if not isinstance(entry.id, str) or not isinstance(entry.target, str):
            raise ConfigurationError(
                "Device id and target must be strings",
                {"entry": repr(entry)},
            )
        if not entry.id or not entry.id.isdigit():
            raise ConfigurationError("Device id must be numeric", {"device": repr(entry.id)})
        if entry.id in seen:
            raise ConfigurationError("Duplicate device id", {"device": entry.id})
        if not entry.target or not entry.target.strip():
            raise ConfigurationError("Device has no target triple", {"device": entry.id})
        seen.add(entry.id)

    return result


def devices(entries: Optional[Iterable[DeviceEntry]] = None) -> Tuple[DeviceEntry, ...]:
    """Return the validated device matrix (DEFAULT_DEVICES when none given)."""
    return validate_devices(DEFAULT_DEVICES if entries is None else entries)


def parse_device_spec(spec: str) -> DeviceEntry:
    """Parse `52840=thumbv7em-none-eabi` into a DeviceEntry."""
    device_id, sep, target = spec.partition("=")
    if not sep:
        raise ConfigurationError(
            "Device must be given as ID=TARGET",
            {"value": spec},
        )
    return DeviceEntry(device_id.strip(), target.strip())
