"""Length-prefixed framing.

Frame layout::

    [4 bytes - payload length L (big-endian, unsigned)]
    [L bytes - payload]
"""
from __future__ import annotations
import struct
import threading
from typing import Optional, Tuple

from .constants import LENGTH_PREFIX_SIZE, MAX_FRAME_LENGTH
from .pipe import BytePipe

_HEADER = struct.Struct("!I")


class FrameError(ValueError):
    """A buffer does not hold exactly one well-formed frame."""


def encode_frame(payload: bytes) -> bytes:
    if len(payload) > MAX_FRAME_LENGTH:
        raise FrameError(f"payload too large for a frame: {len(payload)}")
    return _HEADER.pack(len(payload)) + bytes(payload)


def decode_frame(data: bytes) -> bytes:
    if len(data) < LENGTH_PREFIX_SIZE:
        raise FrameError("header too short")
    (length,) = _HEADER.unpack_from(data)
    body = data[LENGTH_PREFIX_SIZE:]
    if len(body) < length:
        raise FrameError(f"truncated frame: {len(body)} < {length}")
    if len(body) > length:
        raise FrameError(f"trailing bytes after frame: {len(body) - length}")
    return bytes(body)


class FramedChannel:
    """One endpoint of a duplex message channel."""

    def __init__(self, inbound: BytePipe, outbound: BytePipe):
        self.inbound = inbound
        self.outbound = outbound
        self._send_lock = threading.Lock()

    def send(self, payload: bytes) -> None:
        frame = encode_frame(payload)
        with self._send_lock:
            self.outbound.write(frame)

    def _recv_exact(self, n: int) -> Optional[bytes]:
        """Read exactly *n* bytes, or None if the stream ends first."""
        buf = bytearray()
        while len(buf) < n:
            chunk = self.inbound.read(n - len(buf))
            if not chunk:
                return None
            buf.extend(chunk)
        return bytes(buf)

    def receive(self) -> bytes:
        """Return the next payload.

        An empty result means either an empty message or that the peer closed
        the stream before a whole frame arrived.
        """
        header = self._recv_exact(LENGTH_PREFIX_SIZE)
        if header is None:
            return b""
        (length,) = _HEADER.unpack(header)
        if length == 0:
            return b""
        body = self._recv_exact(length)
        if body is None:
            return b""
        return body

    def close(self) -> None:
        # half-close: the peer sees end-of-stream, our inbound side stays readable
        self.outbound.close()


def duplex_channel(capacity: Optional[int] = None) -> Tuple[FramedChannel, FramedChannel]:
    forward, backward = BytePipe(capacity), BytePipe(capacity)
    return FramedChannel(backward, forward), FramedChannel(forward, backward)
