"""Extract firmware version information from IFWI images."""

from __future__ import annotations

import json
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Union

# "$FIP" read as a little-endian u32.
FIP_PATTERN = 0x50494624

_U32 = struct.Struct("<I")
_VERSION = struct.Struct("<HH")  # minor, major

_STD_BLOCK = 8
_CHXX_BLOCK = 12
_STD_BLOCKS_BEFORE_CHXX = 17
_CHXX_BLOCKS = 15
_STD_BLOCKS_AFTER_CHXX = 4


def _std_offset(index: int) -> int:
    return 4 + index * _STD_BLOCK


_CHXX_END = _std_offset(_STD_BLOCKS_BEFORE_CHXX) + _CHXX_BLOCKS * _CHXX_BLOCK

FIP_HEADER_SIZE = _CHXX_END + _STD_BLOCKS_AFTER_CHXX * _STD_BLOCK

# Offsets of the version blocks that are reported, within a FIP header.
_COMPONENT_OFFSETS = {
    "chaabi": _std_offset(4),  # ch00_rev
    "scu": _std_offset(7),  # scuc_rev
    "mia": _std_offset(9),  # mia_rev
    "ia32": _std_offset(10),  # ia32_rev
    "valhooks": _std_offset(11),  # oem_rev
    "ifwi": _CHXX_END + 3 * _STD_BLOCK,  # ifwi_rev
}


@dataclass(frozen=True)
class Version:
    """A major/minor version pair."""

    major: int = 0
    minor: int = 0

    def is_valid(self) -> bool:
        """True unless both parts are zero."""
        return self.major != 0 or self.minor != 0

    def __str__(self) -> str:
        return f"{self.major:04X}.{self.minor:04X}"


@dataclass
class FirmwareVersions:
    """Firmware component versions found in an IFWI image."""

    ifwi: Version = field(default_factory=Version)
    scu: Version = field(default_factory=Version)
    scu_bootstrap: Version = field(default_factory=Version)
    ia32: Version = field(default_factory=Version)
    valhooks: Version = field(default_factory=Version)
    chaabi: Version = field(default_factory=Version)
    mia: Version = field(default_factory=Version)

    def format_text(self) -> str:
        """Human-readable listing of the versions."""
        return "\n".join(
            [
                "Image FW versions:",
                f"       ifwi: {self.ifwi}",
                "---- components ----",
                f"        scu: {self.scu}",
                f"  hooks/oem: {self.valhooks}",
                f"       ia32: {self.ia32}",
                f"     chaabi: {self.chaabi}",
                f"        mIA: {self.mia}",
            ]
        )

    def dump(self) -> None:
        """Print the human-readable listing to stdout."""
        print(self.format_text())

    def to_markdown(self) -> str:
        """Format the versions as a markdown table."""
        rows = [
            ("IFWI", self.ifwi),
            ("SCU", self.scu),
            ("Hooks/OEM", self.valhooks),
            ("IA32", self.ia32),
            ("Chaabi", self.chaabi),
            ("mIA", self.mia),
        ]
        lines = ["| Component | Version |", "|-----------|----------|"]
        lines.extend(f"| {name} | {version} |" for name, version in rows)
        return "\n".join(lines) + "\n"

    def to_json(self) -> str:
        """Format the versions as an indented JSON object."""
        return json.dumps(
            {
                "ifwi": str(self.ifwi),
                "scu": str(self.scu),
                "hooks_oem": str(self.valhooks),
                "ia32": str(self.ia32),
                "chaabi": str(self.chaabi),
                "mia": str(self.mia),
            },
            indent=2,
        )


class IfwiError(Exception):
    """An IFWI image could not be read or parsed."""


class FipNotFoundError(IfwiError):
    """No usable FIP header was found in the image."""

    def __init__(self) -> None:
        super().__init__("Couldn't find FIP magic in image")


def _fip_offsets(data: bytes) -> Iterator[int]:
    """Yield the 4-aligned offsets of complete FIP headers in ``data``."""
    offset = 0
    size = len(data)
    while offset + FIP_HEADER_SIZE <= size:
        while offset + 4 <= size and _U32.unpack_from(data, offset)[0] != FIP_PATTERN:
            offset += 4
        if offset + FIP_HEADER_SIZE > size:
            return
        yield offset
        offset += 4


def _merge(current: Version, minor: int, major: int) -> Version:
    return Version(major=major or current.major, minor=minor or current.minor)


def get_image_fw_rev(data: Union[bytes, bytearray, memoryview]) -> FirmwareVersions:
    """Collect component versions from every FIP header in ``data``.

    Later headers override earlier ones, except where their fields are zero.
    Raises FipNotFoundError when neither an IFWI nor an SCU version is found.
    """
    data = bytes(data)
    found = {name: Version() for name in _COMPONENT_OFFSETS}
    for fip in _fip_offsets(data):
        for name, rel in _COMPONENT_OFFSETS.items():
            minor, major = _VERSION.unpack_from(data, fip + rel)
            found[name] = _merge(found[name], minor, major)

    versions = FirmwareVersions(**found)
    if not versions.ifwi.is_valid() and not versions.scu.is_valid():
        raise FipNotFoundError()
    return versions


def check_ifwi_file(data: Union[bytes, bytearray, memoryview]) -> FirmwareVersions:
    """Extract the versions from ``data`` and print them."""
    versions = get_image_fw_rev(data)
    versions.dump()
    return versions


def check_ifwi_path(path: Union[str, Path]) -> FirmwareVersions:
    """Read the image at ``path``, print its versions and return them."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise IfwiError(f"IO error: {exc}") from exc
    return check_ifwi_file(data)