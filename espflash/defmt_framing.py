"""Separation of defmt frames from plain text in monitor output.

The target frames defmt data as ``0xFF 0x00 <data> 0x00``; everything outside
those frames is raw text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

FRAME_START = b"\xff\x00"
FRAME_END = b"\x00"


class DefmtError(Exception):
    """The defmt logger could not be set up."""

    def __init__(self, message: str, code: str, help: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.help = help

    @classmethod
    def no_elf(cls) -> DefmtError:
        return cls(
            "No elf data available",
            "espflash::monitor::defmt::no_elf",
            "Please provide an ELF file with the `--elf` argument",
        )

    @classmethod
    def no_defmt_data(cls) -> DefmtError:
        return cls(
            "No defmt data was found in the elf file",
            "espflash::monitor::defmt::no_defmt",
        )

    @classmethod
    def table_parse_failed(cls) -> DefmtError:
        return cls("Failed to parse defmt data", "espflash::monitor::defmt::parse_failed")

    @classmethod
    def unsupported_encoding(cls, encoding: str) -> DefmtError:
        return cls(
            f"Unsupported defmt encoding: {encoding}. Only rzcobs is supported.",
            "espflash::monitor::defmt::unsupported_encoding",
        )


class FrameKind(Enum):
    DEFMT = "defmt"
    RAW = "raw"


@dataclass(frozen=True)
class Frame:
    kind: FrameKind
    data: bytes


def _search(haystack: bytearray, look_for_end: bool) -> tuple[bytes, int] | None:
    needle = FRAME_END if look_for_end else FRAME_START
    start = 0
    if look_for_end:
        # Skip leading zeros.
        start = next((i for i, byte in enumerate(haystack) if byte != 0), -1)
        if start < 0:
            return None
    end = haystack.find(needle, start)
    if end < 0:
        return None
    return bytes(haystack[start:end]), end + len(needle)


class FrameDelimiter:
    """Splits a byte stream into defmt frames and raw data."""

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._in_frame = False

    def feed(self, data: bytes) -> list[Frame]:
        """Add ``data`` and return the frames that are now complete."""
        self._buffer += data
        frames: list[Frame] = []

        while (found := _search(self._buffer, self._in_frame)) is not None:
            frame, consumed = found
            if self._in_frame:
                frames.append(Frame(FrameKind.DEFMT, frame))
            elif frame:
                frames.append(Frame(FrameKind.RAW, frame))
            self._in_frame = not self._in_frame
            del self._buffer[:consumed]

        if not self._in_frame:
            # A trailing 0xFF may be the start of a new frame.
            keep = 1 if self._buffer.endswith(b"\xff") else 0
            consume = len(self._buffer) - keep
            if consume > 0:
                frames.append(Frame(FrameKind.RAW, bytes(self._buffer[:consume])))
                del self._buffer[:consume]

        return frames