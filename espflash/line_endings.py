"""Normalisation of line endings in monitor output."""

from __future__ import annotations

from typing import Iterable, Iterator

_CR = 0x0D
_LF = 0x0A


def normalized(data: Iterable[int]) -> Iterator[int]:
    """Yield ``data`` with every bare ``\\n`` turned into ``\\r\\n``.

    A ``\\n`` that already follows a ``\\r`` is passed through unchanged.
    """
    prev_was_cr = False
    for byte in data:
        if byte == _LF and not prev_was_cr:
            yield _CR
            yield _LF
            prev_was_cr = False
        elif byte == _CR:
            prev_was_cr = True
            yield _CR
        else:
            prev_was_cr = False
            yield byte