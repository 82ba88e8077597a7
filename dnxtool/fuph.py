"""Firmware Update Payload Header (FUPH) and DnX header parsing."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

FUPH_MAGIC = b"UPH$"
FUPH_HDR_LEN = 36

FUPH_MIP_OFFSET = 0x04
FUPH_IFWI_OFFSET = 0x08
FUPH_PSFW1_OFFSET = 0x0C
FUPH_PSFW2_OFFSET = 0x10
FUPH_SSFW_OFFSET = 0x14
FUPH_SUCP_OFFSET = 0x18
FUPH_VEDFW_OFFSET = 0x1C

DNX_HDR_LEN = 24
DNX_SIZE_OFFSET = 0
DNX_GP_FLAG_OFFSET = 4
DNX_XOR_CHK_OFFSET = 20

_SKIP_BYTES = 8
_FUPH_MAX_LEN = 36
_U32 = 0xFFFFFFFF


class FwRequest(str, Enum):
    """Firmware component request strings sent by the device."""

    DNX_IMAGE = "DXBL"
    FUPH_HDR_SIZE = "RUPHS"
    FUPH = "RUPH"
    MIP = "DMIP"
    IFWI = "IFW"
    LOWER_128K = "LOFW"
    UPPER_128K = "HIFW"
    PSFW1 = "PSFW1"
    PSFW2 = "PSFW2"
    SSFW = "SSFW"
    SUCP = "SuCP"
    VEDFW = "VEDFW"
    UPDATE_DONE = "HLT$"
    UPDATE_ABORT = "HLT0"
    UPDATE_ERROR = "ER"


def find_fuph_header_len(data: bytes) -> Optional[int]:
    """Scan backwards from the end of ``data`` for the FUPH magic.

    Returns the header length, or None when the magic is not found.
    """
    if len(data) < _SKIP_BYTES + 4:
        return None
    offset = len(data) - _SKIP_BYTES
    for count in range(0, _FUPH_MAX_LEN + 1, 4):
        if offset < 4:
            break
        if data[offset - 4 : offset] == FUPH_MAGIC:
            return count + _SKIP_BYTES
        offset = max(offset - 4, 0)
    return None


@dataclass
class FuphHeader:
    """Sizes of the firmware components described by a FUPH header."""

    header_len: int = 0
    mip_size: int = 0
    ifwi_size: int = 0
    psfw1_size: int = 0
    psfw2_size: int = 0
    ssfw_size: int = 0
    sucp_size: int = 0
    vedfw_size: int = 0

    @classmethod
    def parse(cls, data: bytes) -> Optional["FuphHeader"]:
        """Parse the header at the end of ``data``; None if absent."""
        header_len = find_fuph_header_len(data)
        if header_len is None or len(data) < header_len:
            return None
        fuph = bytes(data[len(data) - header_len :])

        def read_size(offset: int) -> int:
            if offset + 4 > len(fuph):
                return 0
            (dwords,) = struct.unpack_from("<I", fuph, offset)
            return (dwords * 4) & _U32

        return cls(
            header_len=header_len,
            mip_size=read_size(FUPH_MIP_OFFSET),
            ifwi_size=read_size(FUPH_IFWI_OFFSET),
            psfw1_size=read_size(FUPH_PSFW1_OFFSET),
            psfw2_size=read_size(FUPH_PSFW2_OFFSET),
            ssfw_size=read_size(FUPH_SSFW_OFFSET),
            sucp_size=read_size(FUPH_SUCP_OFFSET),
            vedfw_size=(
                read_size(FUPH_VEDFW_OFFSET) if header_len >= FUPH_HDR_LEN else 0
            ),
        )

    def total_size(self) -> int:
        """Sum of all component sizes in bytes."""
        return (
            self.mip_size
            + self.ifwi_size
            + self.psfw1_size
            + self.psfw2_size
            + self.ssfw_size
            + self.sucp_size
            + self.vedfw_size
        )

    def __str__(self) -> str:
        rows = [
            ("MIP", self.mip_size),
            ("IFWI", self.ifwi_size),
            ("PSFW1", self.psfw1_size),
            ("PSFW2", self.psfw2_size),
            ("SSFW", self.ssfw_size),
            ("SUCP", self.sucp_size),
            ("VEDFW", self.vedfw_size),
        ]
        lines = [f"FUPH Header (len={self.header_len}):"]
        for name, size in rows:
            label = f"{name}:"
            lines.append(f"  {label:<8}{size:>8} bytes ({size / 1024.0:.2f} KB)")
        total = self.total_size()
        lines.append(f"  Total:  {total:>8} bytes ({total / 1024.0 / 1024.0:.2f} MB)")
        return "\n".join(lines) + "\n"


@dataclass
class DnxHeader:
    """The 24-byte DnX header that precedes a firmware payload."""

    size: int
    gp_flags: int
    reserved: tuple[int, int, int] = field(default=(0, 0, 0))
    xor_checksum: int = 0

    @classmethod
    def create(cls, size: int, gp_flags: int) -> "DnxHeader":
        """Build a header with a correct XOR checksum."""
        return cls(size=size, gp_flags=gp_flags, xor_checksum=size ^ gp_flags)

    @classmethod
    def parse(cls, data: bytes) -> "DnxHeader":
        """Parse a header from the first 24 bytes of ``data``."""
        if len(data) < DNX_HDR_LEN:
            raise ValueError(
                f"DnX header needs {DNX_HDR_LEN} bytes, got {len(data)}"
            )
        size, gp_flags, r0, r1, r2, checksum = struct.unpack_from("<6I", data, 0)
        return cls(
            size=size, gp_flags=gp_flags, reserved=(r0, r1, r2), xor_checksum=checksum
        )

    def to_bytes(self) -> bytes:
        """Serialise to the 24-byte little-endian wire form."""
        return struct.pack(
            "<6I", self.size, self.gp_flags, *self.reserved, self.xor_checksum
        )

    def is_valid(self) -> bool:
        """True when the checksum equals size XOR gp_flags."""
        return self.xor_checksum == (self.size ^ self.gp_flags)