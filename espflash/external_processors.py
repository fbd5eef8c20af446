"""Pipe monitor output through external executables.

Each processor is started with the ELF path (if any) as its first argument,
reads from stdin and writes to stdout. Processors run in the order given.
"""

from __future__ import annotations

import os
import queue
import subprocess
import threading
from pathlib import Path


class ExternalProcessorError(Exception):
    """An external processor could not be started."""

    def __init__(self, executable: str) -> None:
        super().__init__(f"Failed to launch '{executable}'")
        self.executable = executable


class _Processor:
    def __init__(self, child: subprocess.Popen) -> None:
        self._child = child
        self._received: queue.SimpleQueue[bytes] = queue.SimpleQueue()
        self._reader = threading.Thread(target=self._pump, daemon=True)
        self._reader.start()

    def _pump(self) -> None:
        stdout = self._child.stdout
        assert stdout is not None
        while True:
            try:
                chunk = stdout.read1(1024)
            except (OSError, ValueError):
                break
            if not chunk:
                break
            self._received.put(chunk)

    def try_receive(self) -> bytes:
        chunks = []
        while True:
            try:
                chunks.append(self._received.get_nowait())
            except queue.Empty:
                return b"".join(chunks)

    def send(self, data: bytes) -> None:
        if not data:
            return
        stdin = self._child.stdin
        assert stdin is not None
        try:
            stdin.write(data)
            stdin.flush()
        except (OSError, ValueError):
            pass

    def close(self) -> None:
        if self._child.poll() is None:
            self._child.kill()
        self._child.wait()
        for stream in (self._child.stdin, self._child.stdout):
            if stream is not None:
                try:
                    stream.close()
                except OSError:
                    pass


class ExternalProcessors:
    """A chain of external executables that transform monitor output."""

    def __init__(self, processors: str | None = None, elf: str | os.PathLike | None = None) -> None:
        args = [str(Path(elf))] if elf is not None else []
        self._processors: list[_Processor] = []
        if processors is None:
            return
        try:
            for executable in processors.split(","):
                try:
                    child = subprocess.Popen(
                        [executable, *args],
                        stdin=subprocess.PIPE,
                        stdout=subprocess.PIPE,
                        stderr=None,
                    )
                except OSError as exc:
                    raise ExternalProcessorError(executable) from exc
                self._processors.append(_Processor(child))
        except ExternalProcessorError:
            self.close()
            raise

    def process(self, data: bytes) -> bytes:
        """Feed ``data`` through the chain and return whatever output is ready."""
        buffer = bytes(data)
        for processor in self._processors:
            processor.send(buffer)
            buffer = processor.try_receive()
        return buffer

    def close(self) -> None:
        """Kill all running processors."""
        for processor in self._processors:
            processor.close()
        self._processors.clear()

    def __enter__(self) -> ExternalProcessors:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()