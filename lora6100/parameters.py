"""
LoRa6100 Module Parameters

Fixed 31 byte big-endian parameter block exchanged with the read-parameters
and set-parameters commands.
"""

from dataclasses import dataclass, field
from typing import Union
import struct
import logging

from lora6100.device_types import (
    SerialBaudRate, SerialDataBits, SerialStopBits, SerialParity, AESKeySetting
)
from lora6100.errors import FramingError


def _coerce(enum_cls, value: int):
    """Enum member for known codes, raw value otherwise"""
    try:
        return enum_cls(value)
    except ValueError:
        logging.warning(f"Unrecognized {enum_cls.__name__} code: {value}")
        return value


@dataclass
class Parameters:
    """Radio and serial configuration of the module"""

    rf_channel: int = 0
    rf_frequency: int = 0
    rf_data_rate: int = 3                                   # 0-9
    tx_power: int = 7                                       # 0-7
    serial_baud: Union[SerialBaudRate, int] = SerialBaudRate.B9600
    serial_data_bits: Union[SerialDataBits, int] = SerialDataBits.BITS_8
    serial_stop_bits: Union[SerialStopBits, int] = SerialStopBits.ONE
    serial_parity: Union[SerialParity, int] = SerialParity.NONE
    net_id: int = 0                                         # 0x00000000 - 0xFFFFFFFF
    node_id: int = 0                                        # 0x0000 - 0xFFFF
    aes_key_setting: Union[AESKeySetting, int] = AESKeySetting.DEFAULT
    aes_key: bytes = field(default=bytes(16))               # AES-128 key

    # Constants
    FORMAT = '>BBBBBBBBIHB16s'
    SIZE = 31
    _LIMITS = (
        ('rf_channel', 0xFF),
        ('rf_frequency', 0xFF),
        ('rf_data_rate', 9),
        ('tx_power', 7),
        ('serial_baud', 0xFF),
        ('serial_data_bits', 0xFF),
        ('serial_stop_bits', 0xFF),
        ('serial_parity', 0xFF),
        ('net_id', 0xFFFFFFFF),
        ('node_id', 0xFFFF),
        ('aes_key_setting', 0xFF),
    )

    @classmethod
    def default(cls) -> 'Parameters':
        """Factory defaults as documented for the module"""
        return cls()

    def serialize(self) -> bytes:
        """Convert parameters to the 31 byte wire block"""
        if len(self.aes_key) != 16:
            raise ValueError(f"AES key must be 16 bytes, got {len(self.aes_key)}")
        for name, high in self._LIMITS:
            value = getattr(self, name)
            if not 0 <= value <= high:
                raise ValueError(f"{name} out of range 0-{high}: {value}")

        return struct.pack(
            self.FORMAT,
            self.rf_channel,          # 1 byte  - B
            self.rf_frequency,        # 1 byte  - B
            self.rf_data_rate,        # 1 byte  - B
            self.tx_power,            # 1 byte  - B
            self.serial_baud,         # 1 byte  - B
            self.serial_data_bits,    # 1 byte  - B
            self.serial_stop_bits,    # 1 byte  - B
            self.serial_parity,       # 1 byte  - B
            self.net_id,              # 4 bytes - I
            self.node_id,             # 2 bytes - H
            self.aes_key_setting,     # 1 byte  - B
            bytes(self.aes_key)       # 16 bytes - 16s
        )

    @classmethod
    def deserialize(cls, data: bytes) -> 'Parameters':
        """
        Parse the 31 byte wire block

        Raises:
            FramingError: data is not exactly 31 bytes
        """
        if len(data) != cls.SIZE:
            raise FramingError(cls.SIZE, len(data), what="parameters")

        (rf_channel, rf_frequency, rf_data_rate, tx_power,
         baud, data_bits, stop_bits, parity,
         net_id, node_id, aes_setting, aes_key) = struct.unpack(cls.FORMAT, data)

        return cls(
            rf_channel=rf_channel,
            rf_frequency=rf_frequency,
            rf_data_rate=rf_data_rate,
            tx_power=tx_power,
            serial_baud=_coerce(SerialBaudRate, baud),
            serial_data_bits=_coerce(SerialDataBits, data_bits),
            serial_stop_bits=_coerce(SerialStopBits, stop_bits),
            serial_parity=_coerce(SerialParity, parity),
            net_id=net_id,
            node_id=node_id,
            aes_key_setting=_coerce(AESKeySetting, aes_setting),
            aes_key=aes_key
        )

    def __str__(self) -> str:
        """String representation for logging"""
        baud = self.serial_baud
        speed = baud.speed if isinstance(baud, SerialBaudRate) else None
        return (f"Parameters(ch={self.rf_channel}, freq={self.rf_frequency}, "
                f"rate={self.rf_data_rate}, power={self.tx_power}, "
                f"baud={speed or baud}, net=0x{self.net_id:08X}, "
                f"node=0x{self.node_id:04X}, aes={int(self.aes_key_setting)})")
