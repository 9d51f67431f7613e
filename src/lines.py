"""Buffered line reader for mysh.

Reads raw bytes from a file descriptor in fixed-size chunks and hands out
complete logical lines. The descriptor is closed once, on end-of-input or a
read error, after which the reader is exhausted for good.
"""
from __future__ import annotations

import os
from typing import Iterator, List, Optional

BUFLENGTH = 4096


class LineReader:
    """Yield newline-terminated lines from a file descriptor.

    Lifecycle:
    - Construct with an open, readable fd (the reader takes ownership).
    - Call next_line() until it returns None.
    - The fd is closed on the first empty or failed read; a short read
      just means fewer bytes are buffered.
    """

    def __init__(self, fd: int, chunk_size: int = BUFLENGTH) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self.fd: int = fd
        self.chunk_size = chunk_size
        self._buf: bytes = b""
        self._pos: int = 0

    @classmethod
    def open(cls, path: str, chunk_size: int = BUFLENGTH) -> "LineReader":
        return cls(os.open(path, os.O_RDONLY), chunk_size)

    @property
    def exhausted(self) -> bool:
        return self.fd < 0

    def _fill(self) -> bool:
        # Any failed read counts as end-of-input.
        try:
            data = os.read(self.fd, self.chunk_size)
        except OSError:
            data = b""
        if not data:
            self.close()
            return False
        self._buf = data
        self._pos = 0
        return True

    def close(self) -> None:
        if self.fd >= 0:
            fd, self.fd = self.fd, -1
            os.close(fd)

    def next_line(self) -> Optional[str]:
        """Return the next line without its terminator, or None at end-of-input."""
        if self.exhausted and self._pos >= len(self._buf):
            return None
        pieces: List[bytes] = []
        while True:
            if self._pos >= len(self._buf):
                if self.exhausted or not self._fill():
                    self._buf, self._pos = b"", 0
                    if not pieces:
                        return None
                    return b"".join(pieces).decode("utf-8", errors="replace")
            nl = self._buf.find(b"\n", self._pos)
            if nl >= 0:
                pieces.append(self._buf[self._pos:nl])
                self._pos = nl + 1
                return b"".join(pieces).decode("utf-8", errors="replace")
            pieces.append(self._buf[self._pos:])
            self._pos = len(self._buf)

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line
