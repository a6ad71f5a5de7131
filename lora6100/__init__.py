"""
LoRa6100 Driver and Flood Relay Package

Nice-RF LoRa6100 AES module support with:
- Settings mode state machine over the RTS control line
- Version, parameter read/write and factory reset commands
- Fixed 42 byte flood packet format with TTL
- Multi-hop flood relay with randomized retransmission delay
- Paced single writer transmission
"""

from lora6100.device_types import (
    Command, RetStatus, SerialBaudRate, SerialDataBits, SerialStopBits,
    SerialParity, AESKeySetting, DriverState
)
from lora6100.errors import (
    DriverError, NotOpenError, TransportError, MalformedLineError,
    FramingError, BadReturnStatusError, RelayError
)
from lora6100.parameters import Parameters
from lora6100.line_reader import LineReader
from lora6100.transport import SerialTransport
from lora6100.driver import LoRa6100
from lora6100.flood_packet import FloodPacket
from lora6100.collision_avoidance import CollisionAvoidance
from lora6100.flood_relay import FloodRelay, RelayStats

__all__ = [
    'Command',
    'RetStatus',
    'SerialBaudRate',
    'SerialDataBits',
    'SerialStopBits',
    'SerialParity',
    'AESKeySetting',
    'DriverState',
    'DriverError',
    'NotOpenError',
    'TransportError',
    'MalformedLineError',
    'FramingError',
    'BadReturnStatusError',
    'RelayError',
    'Parameters',
    'LineReader',
    'SerialTransport',
    'LoRa6100',
    'FloodPacket',
    'CollisionAvoidance',
    'FloodRelay',
    'RelayStats',
]
