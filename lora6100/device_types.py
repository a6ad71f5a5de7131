"""
LoRa6100 Protocol Types and Enumerations

Defines command opcodes, return statuses, serial settings codes and the
driver mode for the Nice-RF LoRa6100 AES module.
"""

from enum import Enum, IntEnum
from typing import Optional, Union

from lora6100.errors import BadReturnStatusError

CMD_PREFIX = b"\xAA\xFA"
LINE_ENDING = b"\r\n"


class Command(IntEnum):
    """Settings mode command opcodes"""
    READ_VERSION = 0xAA
    READ_PARAMETERS = 0x01
    RESET_DEFAULT = 0x02
    SET_PARAMETERS = 0x03

    def frame(self, payload: bytes = b"") -> bytes:
        """Wire bytes for this command, without the line ending"""
        return CMD_PREFIX + bytes([self]) + payload


class RetStatus(str, Enum):
    """Status line returned by reset and set commands"""
    OK = "OK"
    ERROR = "ERROR"

    @classmethod
    def parse(cls, line: Union[bytes, str]) -> 'RetStatus':
        """
        Parse a status line (without line ending)

        Raises:
            BadReturnStatusError: line is neither OK nor ERROR
        """
        if isinstance(line, bytes):
            line = line.decode('ascii', errors='replace')
        if line == cls.OK.value:
            return cls.OK
        if line == cls.ERROR.value:
            return cls.ERROR
        raise BadReturnStatusError(line, cls.ERROR)


class SerialBaudRate(IntEnum):
    """Serial baud rate code stored in the module parameters"""
    B1200 = 0
    B2400 = 1
    B4800 = 2
    B9600 = 3
    B14400 = 4
    B19200 = 5
    B38400 = 6
    B57600 = 7
    B76800 = 8
    B115200 = 9
    UNKNOWN = 10

    @classmethod
    def from_speed(cls, speed: int) -> 'SerialBaudRate':
        """Map a baud rate in bits/s to its code, UNKNOWN if unsupported"""
        return _SPEED_TO_BAUD.get(speed, cls.UNKNOWN)

    @property
    def speed(self) -> Optional[int]:
        """Baud rate in bits/s, None for UNKNOWN"""
        return _BAUD_TO_SPEED.get(self)


_SPEED_TO_BAUD = {
    1200: SerialBaudRate.B1200,
    2400: SerialBaudRate.B2400,
    4800: SerialBaudRate.B4800,
    9600: SerialBaudRate.B9600,
    14400: SerialBaudRate.B14400,
    19200: SerialBaudRate.B19200,
    38400: SerialBaudRate.B38400,
    57600: SerialBaudRate.B57600,
    76800: SerialBaudRate.B76800,
    115200: SerialBaudRate.B115200,
}
_BAUD_TO_SPEED = {baud: speed for speed, baud in _SPEED_TO_BAUD.items()}


class SerialDataBits(IntEnum):
    """Serial data bits code"""
    BITS_7 = 0
    BITS_8 = 1


class SerialStopBits(IntEnum):
    """Serial stop bits"""
    ONE = 1
    TWO = 2


class SerialParity(IntEnum):
    """Serial parity code"""
    NONE = 1
    ODD = 2
    EVEN = 3


class AESKeySetting(IntEnum):
    """Which AES key the module encrypts with"""
    DEFAULT = 0        # Built-in key, AES key field ignored
    USER_DEFINED = 1   # AES key field from the parameters


class DriverState(IntEnum):
    """Mode of the module as tracked by the driver"""
    NORMAL = 0       # Transparent data relay
    SETTINGS = 1     # Accepting configuration commands (RTS asserted)
