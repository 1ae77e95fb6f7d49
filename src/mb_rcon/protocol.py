"""Source RCON packet codec.

Little-endian, length-prefixed binary frames over one TCP stream.

Frame:  <int32 size><int32 id><int32 type><body bytes>\\x00\\x00
        size = 4 (id) + 4 (type) + len(body) + 2 (terminators)

AUTH_RESPONSE and EXECCOMMAND share type 2; the direction of the packet tells them apart.
"""

import asyncio
import struct
from dataclasses import dataclass

from mb_rcon.errors import MalformedPacketError

# Packet types
SERVERDATA_AUTH = 3
SERVERDATA_AUTH_RESPONSE = 2
SERVERDATA_EXECCOMMAND = 2
SERVERDATA_RESPONSE_VALUE = 0

# Id the server returns in AUTH_RESPONSE when the password is wrong
AUTH_FAILED_ID = -1

# Body the server sends after mirroring an empty RESPONSE_VALUE request
COMPLETION_MARKER = "\x00\x01\x00\x00"

_SIZE = struct.Struct("<i")
_ID_TYPE = struct.Struct("<ii")
_TERMINATORS = b"\x00\x00"

HEADER_SIZE = _SIZE.size
# id + type + two terminators
MIN_PACKET_SIZE = _ID_TYPE.size + len(_TERMINATORS)


@dataclass(frozen=True)
class Packet:
    """One decoded RCON packet."""

    id: int
    type: int
    body: str = ""

    def size(self, encoding: str = "ascii") -> int:
        """Value of the size header when this packet is encoded with the given encoding.

        Raises:
            MalformedPacketError: Body cannot be represented in the encoding.

        """
        return MIN_PACKET_SIZE + len(_encode_body(self.body, encoding))


def _encode_body(body: str, encoding: str) -> bytes:
    try:
        return body.encode(encoding)
    except UnicodeEncodeError as e:
        raise MalformedPacketError(f"Body is not representable as {encoding}: {e.reason}.") from e


def encode_packet(packet_type: int, packet_id: int, body: str, encoding: str = "ascii") -> bytes:
    """Serialize a packet into a complete frame.

    Raises:
        MalformedPacketError: Body cannot be represented in the encoding.

    """
    payload = _encode_body(body, encoding)
    size = MIN_PACKET_SIZE + len(payload)
    return _SIZE.pack(size) + _ID_TYPE.pack(packet_id, packet_type) + payload + _TERMINATORS


def decode_packet(data: bytes, encoding: str = "ascii") -> Packet:
    """Deserialize exactly one frame.

    Raises:
        MalformedPacketError: Truncated header, declared size below the minimum,
            or declared size not matching the available bytes.

    """
    if len(data) < HEADER_SIZE:
        raise MalformedPacketError(f"Frame too short for size header: {len(data)} bytes.")
    (size,) = _SIZE.unpack_from(data, 0)
    if size < MIN_PACKET_SIZE:
        raise MalformedPacketError(f"Declared size {size} is below minimum of {MIN_PACKET_SIZE}.")
    if len(data) - HEADER_SIZE != size:
        raise MalformedPacketError(f"Declared size {size} does not match {len(data) - HEADER_SIZE} available bytes.")
    packet_id, packet_type = _ID_TYPE.unpack_from(data, HEADER_SIZE)
    body = data[HEADER_SIZE + _ID_TYPE.size : -len(_TERMINATORS)]
    return Packet(id=packet_id, type=packet_type, body=body.decode(encoding, errors="replace"))


async def read_packet(reader: asyncio.StreamReader, encoding: str = "ascii", maximum_packet_size: int = 0) -> Packet:
    """Read one frame from the stream, waiting for partial frames to complete.

    Args:
        reader: Stream to read from.
        encoding: Body text encoding.
        maximum_packet_size: Largest accepted value of the size header (0 = unbounded).

    Raises:
        asyncio.IncompleteReadError: Stream ended mid-frame or before one started.
        MalformedPacketError: Declared size is invalid or exceeds the maximum.

    """
    header = await reader.readexactly(HEADER_SIZE)
    (size,) = _SIZE.unpack(header)
    if size < MIN_PACKET_SIZE:
        raise MalformedPacketError(f"Declared size {size} is below minimum of {MIN_PACKET_SIZE}.")
    if maximum_packet_size > 0 and size > maximum_packet_size:
        raise MalformedPacketError(f"Declared size {size} exceeds maximum of {maximum_packet_size} bytes.")
    rest = await reader.readexactly(size)
    return decode_packet(header + rest, encoding)
