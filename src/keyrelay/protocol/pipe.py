"""In-process byte stream connecting two role threads."""
from __future__ import annotations
import threading
from typing import Optional

class BytePipe:
    """Thread-safe FIFO byte buffer.

    One side writes, the other reads. ``read`` blocks until data arrives or the
    pipe is closed. With a ``capacity`` the writer blocks while the buffer is
    full, mirroring a bounded OS pipe.
    """

    def __init__(self, capacity: Optional[int] = None):
        if capacity is not None and capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._buf = bytearray()
        self._cond = threading.Condition()
        self._closed = False
        self.bytes_written = 0

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def write(self, data: bytes) -> None:
        view = memoryview(data)
        with self._cond:
            while view:
                if self._closed:
                    raise BrokenPipeError("pipe closed")
                if self.capacity is None:
                    room = len(view)
                else:
                    room = self.capacity - len(self._buf)
                    if room <= 0:
                        self._cond.wait()
                        continue
                piece = view[:room]
                self._buf.extend(piece)
                self.bytes_written += len(piece)
                view = view[room:]
                self._cond.notify_all()

    def read(self, max_bytes: int) -> bytes:
        if max_bytes <= 0:
            return b""
        with self._cond:
            while not self._buf and not self._closed:
                self._cond.wait()
            out = bytes(self._buf[:max_bytes])
            del self._buf[:max_bytes]
            self._cond.notify_all()
            return out

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()
