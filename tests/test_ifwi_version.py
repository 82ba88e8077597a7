import json
import struct

import pytest

from dnxtool.ifwi_version import (
    FIP_HEADER_SIZE,
    FIP_PATTERN,
    FipNotFoundError,
    FirmwareVersions,
    IfwiError,
    Version,
    check_ifwi_file,
    check_ifwi_path,
    get_image_fw_rev,
)

# Offsets inside a FIP header: signature, then 17 8-byte blocks,
# 15 12-byte blocks and 4 more 8-byte blocks.
_OFFSETS = {
    "chaabi": 4 + 4 * 8,
    "scu": 4 + 7 * 8,
    "mia": 4 + 9 * 8,
    "ia32": 4 + 10 * 8,
    "oem": 4 + 11 * 8,
    "ifwi": 4 + 17 * 8 + 15 * 12 + 3 * 8,
}


def make_fip(**components):
    buf = bytearray(FIP_HEADER_SIZE)
    buf[0:4] = b"$FIP"
    for name, (major, minor) in components.items():
        struct.pack_into("<HH", buf, _OFFSETS[name], minor, major)
    return bytes(buf)


def test_version_display():
    assert str(Version(0x0094, 0x0171)) == "0094.0171"


def test_fip_pattern():
    assert FIP_PATTERN == 0x50494624
    assert struct.pack("<I", FIP_PATTERN) == b"$FIP"
    buf = bytearray(make_fip(ifwi=(2, 3)))
    buf[0:4] = struct.pack("<I", FIP_PATTERN)
    assert get_image_fw_rev(bytes(buf)).ifwi == Version(2, 3)


def test_fip_header_size_matches_layout():
    assert FIP_HEADER_SIZE == 4 + 21 * 8 + 15 * 12
    data = make_fip(ifwi=(4, 5))
    assert len(data) == FIP_HEADER_SIZE
    assert get_image_fw_rev(data).ifwi == Version(4, 5)


def test_version_validity():
    assert not Version(0, 0).is_valid()
    assert Version(1, 0).is_valid()
    assert Version(0, 1).is_valid()


def test_single_fip_parsed():
    data = b"\x00" * 16 + make_fip(
        ifwi=(0x0094, 0x0171),
        scu=(0x0011, 0x0022),
        ia32=(0x0033, 0x0044),
        oem=(0x0055, 0x0066),
        chaabi=(0x0077, 0x0088),
        mia=(0x0099, 0x00AA),
    ) + b"\x00" * 8
    versions = get_image_fw_rev(data)
    assert versions.ifwi == Version(0x0094, 0x0171)
    assert versions.scu == Version(0x0011, 0x0022)
    assert versions.ia32 == Version(0x0033, 0x0044)
    assert versions.valhooks == Version(0x0055, 0x0066)
    assert versions.chaabi == Version(0x0077, 0x0088)
    assert versions.mia == Version(0x0099, 0x00AA)


def test_later_fip_overrides_only_nonzero_fields():
    first = make_fip(ifwi=(1, 2), scu=(3, 4))
    second = make_fip(ifwi=(0, 9), scu=(7, 0))
    versions = get_image_fw_rev(first + second)
    assert versions.ifwi == Version(1, 9)
    assert versions.scu == Version(7, 4)


def test_no_magic_raises():
    with pytest.raises(FipNotFoundError):
        get_image_fw_rev(b"\x00" * 1024)


def test_fip_not_found_is_ifwi_error():
    with pytest.raises(IfwiError, match="Couldn't find FIP magic"):
        get_image_fw_rev(b"")


def test_unaligned_fip_is_ignored():
    data = b"\x00\x00" + make_fip(ifwi=(1, 1)) + b"\x00" * 6
    with pytest.raises(FipNotFoundError):
        get_image_fw_rev(data)


def test_truncated_fip_is_ignored():
    data = make_fip(ifwi=(1, 1))[:-4]
    with pytest.raises(FipNotFoundError):
        get_image_fw_rev(data)


def test_only_components_without_ifwi_or_scu_raises():
    with pytest.raises(FipNotFoundError):
        get_image_fw_rev(make_fip(chaabi=(5, 5), mia=(6, 6)))


def test_to_json_round_trip():
    versions = get_image_fw_rev(make_fip(ifwi=(0x94, 0x171), oem=(2, 3)))
    parsed = json.loads(versions.to_json())
    assert parsed == {
        "ifwi": str(versions.ifwi),
        "scu": str(versions.scu),
        "hooks_oem": str(versions.valhooks),
        "ia32": str(versions.ia32),
        "chaabi": str(versions.chaabi),
        "mia": str(versions.mia),
    }


def test_to_markdown_rows():
    versions = FirmwareVersions(ifwi=Version(0x0094, 0x0171))
    lines = versions.to_markdown().splitlines()
    assert lines[0] == "| Component | Version |"
    assert lines[2] == "| IFWI | 0094.0171 |"
    assert len(lines) == 8


def test_dump_prints_format_text(capsys):
    versions = FirmwareVersions(scu=Version(0x12, 0x34))
    versions.dump()
    out = capsys.readouterr().out
    assert out == versions.format_text() + "\n"
    assert "        scu: 0012.0034" in out


def test_check_ifwi_file_returns_and_prints(capsys):
    versions = check_ifwi_file(make_fip(ifwi=(0x0094, 0x0171)))
    assert versions.ifwi == Version(0x0094, 0x0171)
    assert "0094.0171" in capsys.readouterr().out


def test_check_ifwi_path(tmp_path, capsys):
    path = tmp_path / "ifwi.bin"
    path.write_bytes(make_fip(scu=(0x10, 0x20)))
    versions = check_ifwi_path(path)
    assert versions.scu == Version(0x10, 0x20)
    assert capsys.readouterr().out.startswith("Image FW versions:")


def test_check_ifwi_path_missing_file(tmp_path):
    with pytest.raises(IfwiError, match="IO error"):
        check_ifwi_path(tmp_path / "missing.bin")