"""
Flood Packet

Fixed 42 byte big-endian frame relayed across the mesh:
ID (1 byte) | TTL (1 byte) | payload (40 bytes)
"""

from dataclasses import dataclass
from typing import Optional, Union
import random
import struct

from lora6100.errors import FramingError


@dataclass(frozen=True)
class FloodPacket:
    """One flooded message instance"""

    packet_id: int
    ttl: int
    payload: bytes

    # Constants
    FORMAT = '>BB40s'
    PAYLOAD_SIZE = 40
    SIZE = 42

    def __post_init__(self):
        if len(self.payload) != self.PAYLOAD_SIZE:
            raise ValueError(f"Payload must be {self.PAYLOAD_SIZE} bytes, got {len(self.payload)}")

    @classmethod
    def create(cls, message: Union[str, bytes], ttl: int,
               packet_id: Optional[int] = None) -> 'FloodPacket':
        """
        Factory method for a locally originated packet

        The message is NUL padded to the payload size. IDs are a single
        random byte with no collision avoidance.
        """
        if isinstance(message, str):
            message = message.encode('utf-8')
        if len(message) > cls.PAYLOAD_SIZE:
            raise ValueError(f"Message too long: {len(message)} bytes, max {cls.PAYLOAD_SIZE}")
        if packet_id is None:
            packet_id = random.randrange(256)

        return cls(
            packet_id=packet_id,
            ttl=ttl,
            payload=message.ljust(cls.PAYLOAD_SIZE, b"\x00")
        )

    def serialize(self) -> bytes:
        """Convert packet to its 42 byte frame"""
        return struct.pack(self.FORMAT, self.packet_id, self.ttl, self.payload)

    @classmethod
    def deserialize(cls, data: bytes) -> 'FloodPacket':
        """
        Parse a 42 byte frame

        Raises:
            FramingError: data is not exactly 42 bytes
        """
        if len(data) != cls.SIZE:
            raise FramingError(cls.SIZE, len(data), what="flood packet")

        packet_id, ttl, payload = struct.unpack(cls.FORMAT, data)
        return cls(packet_id=packet_id, ttl=ttl, payload=payload)

    @property
    def is_terminal(self) -> bool:
        """TTL exhausted, must not be retransmitted"""
        return self.ttl == 0

    @property
    def text(self) -> str:
        """Payload up to the first NUL, decoded for display"""
        return self.payload.split(b"\x00", 1)[0].decode('utf-8', errors='replace')

    def create_repeat(self) -> 'FloodPacket':
        """Create the retransmission copy with TTL decremented"""
        if self.is_terminal:
            raise ValueError(f"Cannot repeat terminal packet {self}")
        return FloodPacket(
            packet_id=self.packet_id,  # Keep message instance
            ttl=self.ttl - 1,          # Decrement TTL
            payload=self.payload
        )

    def __str__(self) -> str:
        """String representation for logging"""
        return f"FloodPacket(id={self.packet_id}, ttl={self.ttl}, msg={self.text!r})"
