"""Parsers and checks for command-line argument values."""

from __future__ import annotations

#: Size of a flash sector; erase regions must be aligned to it.
FLASH_SECTOR_SIZE = 0x1000

_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFFFFFF
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_DEC_DIGITS = frozenset("0123456789")


class ChipRevisionError(ValueError):
    """A chip revision is not of the form ``major.minor``."""

    def __init__(self, chip_rev: str) -> None:
        super().__init__(f"Unable to parse chip revision: {chip_rev}")
        self.chip_rev = chip_rev


class EraseRegionError(ValueError):
    """An erase region is not aligned to the flash sector size."""

    def __init__(self, address: int, size: int) -> None:
        super().__init__(
            f"Invalid `address` ({address:#x}) and/or `size` ({size:#x}) argument(s): "
            f"both must be multiples of {FLASH_SECTOR_SIZE:#x}"
        )
        self.address = address
        self.size = size


def _parse_unsigned(text: str, radix: int, maximum: int) -> int:
    digits = text[1:] if text.startswith("+") else text
    allowed = _HEX_DIGITS if radix == 16 else _DEC_DIGITS
    if not digits or any(char not in allowed for char in digits):
        raise ValueError(f"invalid digit found in {text!r}")
    value = int(digits, radix)
    if value > maximum:
        raise ValueError(f"number too large to fit in target type: {text!r}")
    return value


def parse_u32(text: str) -> int:
    """Parse a decimal or ``0x``-prefixed hexadecimal 32-bit unsigned integer.

    Underscores are ignored.
    """
    cleaned = text.replace("_", "")
    if len(cleaned) > 2 and cleaned[:2] in ("0x", "0X"):
        return _parse_unsigned(cleaned[2:], 16, _U32_MAX)
    return _parse_unsigned(cleaned, 10, _U32_MAX)


def parse_chip_rev(text: str) -> int:
    """Parse ``major.minor`` into ``major * 100 + minor``."""
    parts = text.split(".")
    if len(parts) != 2:
        raise ChipRevisionError(text)
    try:
        major, minor = (_parse_unsigned(part, 10, _U16_MAX) for part in parts)
    except ValueError as exc:
        raise ChipRevisionError(text) from exc
    value = major * 100 + minor
    if value > _U16_MAX:
        raise ChipRevisionError(text)
    return value


def validate_erase_region(address: int, size: int) -> tuple[int, int]:
    """Check that an erase region is sector aligned and return it."""
    if address % FLASH_SECTOR_SIZE != 0 or size % FLASH_SECTOR_SIZE != 0:
        raise EraseRegionError(address, size)
    return address, size