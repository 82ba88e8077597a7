import struct

import pytest

from dnxtool.fuph import (
    DNX_HDR_LEN,
    FUPH_HDR_LEN,
    FUPH_MAGIC,
    DnxHeader,
    FuphHeader,
    find_fuph_header_len,
)


def _image_with_fuph(dwords, prefix_len=64):
    region = struct.pack(f"<{len(dwords)}I", *dwords)
    return b"\xaa" * prefix_len + FUPH_MAGIC + region


def test_dnx_header_create():
    header = DnxHeader.create(109812, 0)
    assert header.size == 109812
    assert header.gp_flags == 0
    assert header.xor_checksum == 109812
    assert header.is_valid()


def test_dnx_header_roundtrip():
    header = DnxHeader.create(12345, 0x80000000)
    raw = header.to_bytes()
    parsed = DnxHeader.parse(raw)
    assert parsed.size == header.size
    assert parsed.gp_flags == header.gp_flags
    assert parsed.xor_checksum == header.xor_checksum
    assert parsed == header


def test_dnx_header_wire_layout():
    raw = DnxHeader.create(12345, 0x80000000).to_bytes()
    assert len(raw) == DNX_HDR_LEN
    assert raw[0:4] == (12345).to_bytes(4, "little")
    assert raw[4:8] == (0x80000000).to_bytes(4, "little")
    assert raw[8:20] == bytes(12)
    assert raw[20:24] == (12345 ^ 0x80000000).to_bytes(4, "little")


def test_dnx_header_parse_too_short():
    with pytest.raises(ValueError):
        DnxHeader.parse(b"\x00" * (DNX_HDR_LEN - 1))


def test_dnx_header_bad_checksum_invalid():
    assert not DnxHeader(size=1, gp_flags=2, xor_checksum=0).is_valid()


def test_fuph_parse_full_header():
    data = _image_with_fuph([0, 1, 2, 3, 4, 5, 6, 7, 0])
    header = FuphHeader.parse(data)
    assert header.header_len == FUPH_HDR_LEN
    assert header.mip_size == 1 * 4
    assert header.ifwi_size == 2 * 4
    assert header.psfw1_size == 3 * 4
    assert header.psfw2_size == 4 * 4
    assert header.ssfw_size == 5 * 4
    assert header.sucp_size == 6 * 4
    assert header.vedfw_size == 7 * 4


def test_fuph_parse_short_header_has_no_vedfw():
    data = _image_with_fuph([0, 10, 20, 30, 40, 50, 60])
    header = FuphHeader.parse(data)
    assert header.header_len == 28
    assert header.mip_size == 10 * 4
    assert header.sucp_size == 60 * 4
    assert header.vedfw_size == 0


def test_fuph_total_size_is_sum():
    header = FuphHeader.parse(_image_with_fuph([0, 1, 2, 3, 4, 5, 6, 7, 0]))
    assert header.total_size() == sum(
        [
            header.mip_size,
            header.ifwi_size,
            header.psfw1_size,
            header.psfw2_size,
            header.ssfw_size,
            header.sucp_size,
            header.vedfw_size,
        ]
    )


def test_fuph_missing_magic():
    assert FuphHeader.parse(b"\x00" * 200) is None
    assert find_fuph_header_len(b"\x00" * 200) is None


def test_fuph_data_too_short():
    assert find_fuph_header_len(b"UPH$" * 2) is None
    assert FuphHeader.parse(b"UPH$") is None


def test_find_header_len_matches_parse():
    data = _image_with_fuph([0, 1, 2, 3, 4, 5, 6, 7, 0])
    assert find_fuph_header_len(data) == FuphHeader.parse(data).header_len


def test_fuph_str_lists_components():
    text = str(FuphHeader.parse(_image_with_fuph([0, 1, 2, 3, 4, 5, 6, 7, 0])))
    assert text.startswith("FUPH Header (len=36):")
    for name in ("MIP:", "IFWI:", "PSFW1:", "PSFW2:", "SSFW:", "SUCP:", "VEDFW:", "Total:"):
        assert name in text
    assert text.endswith("\n")