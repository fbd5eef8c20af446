"""SLIP framing as used by the serial bootloader protocol."""

from __future__ import annotations

from collections import deque
from typing import Protocol

END = 0xC0
ESC = 0xDB
ESC_END = 0xDC
ESC_ESC = 0xDD


class SlipDecodeError(ValueError):
    """A SLIP stream held an escape byte followed by an invalid byte."""


class _Readable(Protocol):
    def read(self, size: int = ...) -> bytes: ...


def slip_encode(data: bytes) -> bytes:
    """Wrap ``data`` in END bytes, escaping END and ESC inside it."""
    body = bytes(data).replace(bytes([ESC]), bytes([ESC, ESC_ESC]))
    body = body.replace(bytes([END]), bytes([ESC, ESC_END]))
    return bytes([END]) + body + bytes([END])


class SlipDecoder:
    """Incremental SLIP decoder.

    Empty frames (such as the leading END of a packet) are skipped.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._escaped = False
        self._pending: deque[bytes] = deque()

    def feed(self, data: bytes) -> list[bytes]:
        """Decode ``data`` and return the frames it completes.

        A malformed escape discards the frame being built and raises
        :class:`SlipDecodeError`; the rest of ``data`` is dropped.
        """
        frames: list[bytes] = []
        for byte in data:
            if self._escaped:
                self._escaped = False
                if byte == ESC_END:
                    self._buffer.append(END)
                elif byte == ESC_ESC:
                    self._buffer.append(ESC)
                else:
                    self._buffer.clear()
                    raise SlipDecodeError(f"invalid escape sequence 0x{ESC:02x} 0x{byte:02x}")
            elif byte == END:
                if self._buffer:
                    frames.append(bytes(self._buffer))
                    self._buffer.clear()
            elif byte == ESC:
                self._escaped = True
            else:
                self._buffer.append(byte)
        return frames

    def read_frame(self, stream: _Readable) -> bytes:
        """Read from ``stream`` until a whole frame has been decoded.

        Raises :class:`TimeoutError` when the stream returns no data.
        """
        while not self._pending:
            chunk = stream.read(1)
            if not chunk:
                raise TimeoutError("timed out waiting for a SLIP frame")
            self._pending.extend(self.feed(chunk))
        return self._pending.popleft()