"""Parsing and printing of serial monitor output."""

from __future__ import annotations

import codecs
import re
from abc import ABC, abstractmethod
from typing import BinaryIO, Protocol

from espflash.line_endings import normalized

_FN_ADDR = re.compile(r"0[xX][0-9a-fA-F]{8}")

_YELLOW = "\x1b[38;5;11m"
_RESET_COLOR = "\x1b[39m"


class Symbols(Protocol):
    """Looks up function names and source locations by address."""

    def get_name(self, addr: int) -> str | None: ...

    def get_location(self, addr: int) -> tuple[str, int] | None: ...


class InputParser(ABC):
    """Turns bytes received from the device into terminal output."""

    @abstractmethod
    def feed(self, data: bytes, out: BinaryIO) -> None:
        """Process ``data`` and write the result to ``out``."""


class SerialParser(InputParser):
    """Passes serial output through untouched."""

    def feed(self, data: bytes, out: BinaryIO) -> None:
        out.write(bytes(data))


def _write_text(out: BinaryIO, text: str) -> None:
    out.write(text.encode("utf-8"))


def resolve_addresses(symbols: Symbols, line: str, out: BinaryIO) -> None:
    """Write the function name and location of every address found in ``line``."""
    for match in _FN_ADDR.finditer(line):
        matched = match.group(0)
        addr = int(matched[2:], 16)

        name = symbols.get_name(addr)
        location = symbols.get_location(addr)
        if not name:
            continue

        where = f"{location[0]}:{location[1]}" if location is not None else "??:??"
        if line.strip() == f"0x{addr:x}":
            output = f"{name}\r\n    at {where}\r\n"
        else:
            output = f"{matched} - {name}\r\n    at {where}\r\n"
        _write_text(out, f"{_YELLOW}{output}{_RESET_COLOR}")


class Utf8Merger:
    """Decodes chunks of UTF-8, holding back sequences split across chunks.

    Invalid sequences are replaced with U+FFFD; line endings are normalised
    to ``\\r\\n``.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def process(self, data: bytes) -> str:
        return self._decoder.decode(bytes(normalized(data)), final=False)


def _split_lines(text: str) -> tuple[list[str], str | None]:
    """Split ``text`` into complete lines and a trailing incomplete one."""
    if not text:
        return [], None
    parts = text.split("\n")
    incomplete = parts.pop()
    lines = [part[:-1] if part.endswith("\r") else part for part in parts]
    return lines, (incomplete if incomplete else None)


class ResolvingPrinter:
    """A binary writer that prints text and resolves function addresses."""

    def __init__(self, writer: BinaryIO, symbols: Symbols | None = None) -> None:
        self._writer = writer
        self._symbols = symbols
        self._merger = Utf8Merger()
        self._line_fragment = ""

    def write(self, data: bytes) -> int:
        text = self._merger.process(data)
        lines, incomplete = _split_lines(text)

        for line in lines:
            _write_text(self._writer, line)

            # A pending fragment is completed by this line; resolve the whole line.
            full_line = self._line_fragment + line
            self._line_fragment = ""

            _write_text(self._writer, "\r\n")

            if self._symbols is not None:
                resolve_addresses(self._symbols, full_line, self._writer)

        if incomplete is not None:
            _write_text(self._writer, incomplete)
            self._line_fragment += incomplete

        return len(data)

    def flush(self) -> None:
        self._writer.flush()