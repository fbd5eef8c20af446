import pytest

from espflash.cli_args import (
    ChipRevisionError,
    EraseRegionError,
    parse_chip_rev,
    parse_u32,
    validate_erase_region,
)


def test_parse_hex_partition_table_offset():
    assert parse_u32("0x8000") == 0x8000


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("0x1", 0x1),
        ("0X1234", 0x1234),
        ("0xaBcD", 0xABCD),
        ("1234", 1234),
        ("0", 0),
        ("12_34", 1234),
        ("0X12_34", 0x1234),
    ],
)
def test_parse_u32(text, expected):
    assert parse_u32(text) == expected


@pytest.mark.parametrize("text", ["", "0x", "0xg", "-123", "12.34"])
def test_parse_u32_errors(text):
    with pytest.raises(ValueError):
        parse_u32(text)


def test_parse_u32_range():
    assert parse_u32("0xFFFFFFFF") == 0xFFFFFFFF
    with pytest.raises(ValueError):
        parse_u32("0x100000000")
    with pytest.raises(ValueError):
        parse_u32("4294967296")


def test_parse_u32_rejects_whitespace():
    with pytest.raises(ValueError):
        parse_u32(" 12")


@pytest.mark.parametrize(("text", "expected"), [("0.0", 0), ("1.3", 103), ("3.1", 301)])
def test_parse_chip_rev(text, expected):
    assert parse_chip_rev(text) == expected


@pytest.mark.parametrize("text", ["", "1", "1.", "1.2.3", "a.b", "-1.0", "1.x"])
def test_parse_chip_rev_errors(text):
    with pytest.raises(ChipRevisionError) as info:
        parse_chip_rev(text)
    assert info.value.chip_rev == text


def test_parse_chip_rev_overflow():
    with pytest.raises(ChipRevisionError):
        parse_chip_rev("700.0")


def test_validate_erase_region_accepts_aligned():
    assert validate_erase_region(0x1000, 0x2000) == (0x1000, 0x2000)


@pytest.mark.parametrize(("address", "size"), [(0x1001, 0x1000), (0x1000, 0x10), (1, 1)])
def test_validate_erase_region_rejects_unaligned(address, size):
    with pytest.raises(EraseRegionError) as info:
        validate_erase_region(address, size)
    assert (info.value.address, info.value.size) == (address, size)