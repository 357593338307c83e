"""Framing of messages on the byte stream.

Layout of one frame:
    [magic: 6 bytes][length: u32][type: u32][payload: length bytes]

No padding, no terminator. The length counts payload bytes, not characters.

The server writes both integers in its own native byte order and offers no
way to negotiate it. This module fixes the order once, as little-endian,
which matches every platform the server is commonly built for (x86 and
ARM). Talking to a server on a big-endian host is not supported; there is
deliberately no attempt to guess the order from the received bytes.
"""

from __future__ import annotations

import struct
from typing import Optional, Tuple

from .errors import ProtocolError
from .fields import EVENT_BIT


MAGIC = b"i3-ipc"

BYTE_ORDER = "<"

_HEADER = struct.Struct(BYTE_ORDER + "II")

HEADER_SIZE = len(MAGIC) + _HEADER.size

_U32_MAX = 0xFFFFFFFF


class Frame:
    """ One decoded frame. The *type* is the raw 32-bit type field; the
        :attr:`is_event` and :attr:`code` properties split it into the event
        flag and the reply or event code.
    """

    __slots__ = ("type", "payload")

    def __init__(self, type: int, payload: bytes):
        self.type = type
        self.payload = payload

    @property
    def is_event(self) -> bool:
        return bool(self.type & EVENT_BIT)

    @property
    def code(self) -> int:
        return self.type & ~EVENT_BIT

    @property
    def length(self) -> int:
        return len(self.payload)

    def __eq__(self, other):
        if not isinstance(other, Frame):
            return NotImplemented
        return self.type == other.type and self.payload == other.payload

    def __repr__(self):
        kind = "event" if self.is_event else "reply"
        return "Frame(%s %d, %d bytes)" % (kind, self.code, len(self.payload))


def pack_frame(type: int, payload: bytes = b"") -> bytes:
    """
    Serialize (type, payload) -> bytes

    The payload must already be encoded; passing text is a TypeError so that
    the length field can never be computed from a character count.
    """

    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise TypeError("payload must be bytes, not " + _type_name(payload))

    payload = bytes(payload)
    length = len(payload)

    if type < 0 or type > _U32_MAX:
        raise ValueError("type code out of range: %r" % (type,))

    if length > _U32_MAX:
        raise ValueError("payload too large: %d bytes" % (length))

    return MAGIC + _HEADER.pack(length, type) + payload


def pack_event(code: int, payload: bytes = b"") -> bytes:
    """Serialize an event frame; the event bit is applied to *code*."""

    return pack_frame(EVENT_BIT | code, payload)


def unpack_frame(buffer) -> Optional[Tuple[Frame, int]]:
    """
    Deserialize the leading frame of *buffer*.

    Returns (frame, consumed) where *consumed* is the number of bytes of
    *buffer* the frame occupied, or None if the buffer does not yet hold a
    complete frame. Raises :class:`ProtocolError` as soon as the buffer can
    be shown not to begin with the magic string.
    """

    magic_size = len(MAGIC)
    available = len(buffer)

    prefix = bytes(buffer[:magic_size])
    if prefix != MAGIC[:len(prefix)]:
        raise ProtocolError("bad magic at frame boundary: %r" % (prefix,))

    if available < HEADER_SIZE:
        return None

    length, type = _HEADER.unpack_from(buffer, magic_size)
    end = HEADER_SIZE + length

    if available < end:
        return None

    payload = bytes(buffer[HEADER_SIZE:end])
    return Frame(type, payload), end


def _type_name(value) -> str:
    return type(value).__name__
