"""Progress reporting for flashing operations."""

from __future__ import annotations

from typing import TextIO

from tqdm import tqdm

_BAR_FORMAT = "[{elapsed}] [{bar:40}] {n:>7}/{total:<7} {desc}"


def format_image_size(app_size: int, part_size: int | None) -> str:
    """Describe the application size, relative to its partition if known."""
    if part_size is not None:
        percent = app_size / part_size * 100.0
        return f"App/part. size:    {app_size:,}/{part_size:,} bytes, {percent:.2f}%"
    return f"App size:          {app_size:,} bytes"


class EspflashProgress:
    """Progress bar shown while data is written to a device."""

    def __init__(self, file: TextIO | None = None) -> None:
        self._file = file
        self._bar: tqdm | None = None

    @property
    def position(self) -> int | None:
        """Current position of the bar, or None before :meth:`init`."""
        return None if self._bar is None else int(self._bar.n)

    def init(self, addr: int, length: int) -> None:
        """Start a bar for ``length`` bytes written at ``addr``."""
        if self._bar is not None:
            self._bar.close()
        self._bar = tqdm(
            total=length,
            desc=f"0x{addr:X}",
            bar_format=_BAR_FORMAT,
            ascii=" >=",
            file=self._file,
        )

    def update(self, current: int) -> None:
        """Move the bar to ``current``."""
        if self._bar is not None:
            self._bar.n = current
            self._bar.refresh()

    def finish(self) -> None:
        """Complete the bar."""
        if self._bar is not None:
            if self._bar.total is not None:
                self._bar.n = self._bar.total
            self._bar.refresh()
            self._bar.close()