"""
LoRa6100 Device Driver

Drives the Nice-RF LoRa6100 AES module over UART. Configuration commands
are only accepted while the SET pin (wired to RTS) is asserted, so the
driver tracks the module mode and wraps every command exchange in a
settings mode enable/disable pair.
"""

import time
import logging

from lora6100.device_types import (
    Command, RetStatus, SerialBaudRate, DriverState, LINE_ENDING
)
from lora6100.errors import NotOpenError
from lora6100.line_reader import LineReader
from lora6100.parameters import Parameters
from lora6100.transport import SerialTransport, DEFAULT_BAUD_RATE

# Empirical hardware timings. The minimum entry delay seems to be ~6ms but
# has not been verified on every module revision.
SETTINGS_MODE_IN_DELAY = 0.020
SETTINGS_MODE_OUT_DELAY = 0.100


class LoRa6100:
    """
    Settings mode state machine and command exchanges for one module

    Owns the transport while configuring. Once configuration is done the
    transport can be handed to the flood relay for data traffic.
    """

    def __init__(self, transport,
                 settings_in_delay: float = SETTINGS_MODE_IN_DELAY,
                 settings_out_delay: float = SETTINGS_MODE_OUT_DELAY):
        """
        Args:
            transport: Byte stream with read_exact, write_all, set_control_line,
                set_baud, reset_buffers, open and close
            settings_in_delay: Settle time after a SET transition, in seconds
            settings_out_delay: Re-arm time after leaving settings mode, in seconds
        """
        self._transport = transport
        self._reader = LineReader(transport)
        self._state = DriverState.NORMAL
        self._is_open = False
        self.settings_in_delay = settings_in_delay
        self.settings_out_delay = settings_out_delay

    @classmethod
    def from_port(cls, port_name: str, baud_rate: int = DEFAULT_BAUD_RATE, **kwargs) -> 'LoRa6100':
        """Build a driver on a serial port"""
        return cls(SerialTransport(port_name, baud_rate), **kwargs)

    @property
    def transport(self):
        return self._transport

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self):
        """
        Open the transport and force the module into normal mode

        The SET line state after process start is unknown, so settings mode
        is always left once regardless of the tracked state.
        """
        self._transport.open()
        self._is_open = True

        self._transport.reset_buffers()

        self._state = DriverState.SETTINGS
        self.disable_settings()
        logging.info("LoRa6100 opened in normal mode")

    def close(self):
        """Release the transport without touching the module mode"""
        self._is_open = False
        self._transport.close()

    def __enter__(self) -> 'LoRa6100':
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def change_baud(self, rate: SerialBaudRate):
        """
        Switch the local serial port speed

        Used after set_parameters persisted a new baud code on the module.
        """
        speed = SerialBaudRate(rate).speed
        if speed is None:
            raise ValueError(f"Cannot switch to baud code {rate!r}")
        self._transport.set_baud(speed)

    def enable_settings(self):
        """Assert SET and wait for the module to accept commands"""
        if self._state == DriverState.SETTINGS:
            return
        self._transport.set_control_line(True)
        self._state = DriverState.SETTINGS
        logging.debug("Settings mode enabled")
        time.sleep(self.settings_in_delay)

    def disable_settings(self):
        """Release SET and wait for the module to re-arm for data relay"""
        if self._state == DriverState.NORMAL:
            return
        time.sleep(self.settings_in_delay)
        self._transport.set_control_line(False)
        self._state = DriverState.NORMAL
        logging.debug("Settings mode disabled")
        time.sleep(self.settings_out_delay)

    def _exchange(self, command: Command, payload: bytes = b"") -> bytes:
        """Send one command in settings mode and return its response line"""
        if not self._is_open:
            raise NotOpenError()

        self.enable_settings()

        logging.debug(f"Sending command {command.name}")
        self._transport.write_all(command.frame(payload))
        self._transport.write_all(LINE_ENDING)
        resp = self._reader.read_line()

        self.disable_settings()

        logging.debug(f"Response to {command.name}: {resp!r}")
        return resp

    def get_version(self) -> str:
        """Read the module firmware version string"""
        resp = self._exchange(Command.READ_VERSION)
        return resp.decode('ascii', errors='replace')

    def get_parameters(self) -> Parameters:
        """
        Read the current module parameters

        Raises:
            FramingError: response was not exactly 31 bytes
        """
        resp = self._exchange(Command.READ_PARAMETERS)
        return Parameters.deserialize(resp)

    def reset_parameters(self) -> RetStatus:
        """Restore factory default parameters"""
        resp = self._exchange(Command.RESET_DEFAULT)
        status = RetStatus.parse(resp)
        logging.info(f"Reset parameters: {status.value}")
        return status

    def set_parameters(self, params: Parameters) -> RetStatus:
        """
        Write new parameters to the module

        A changed serial baud takes effect on the module side only; call
        change_baud afterwards to follow it.
        """
        resp = self._exchange(Command.SET_PARAMETERS, params.serialize())
        status = RetStatus.parse(resp)
        logging.info(f"Set parameters {params}: {status.value}")
        return status

    def __str__(self) -> str:
        name = getattr(self._transport, 'port_name', None) or type(self._transport).__name__
        state = self._state.name if self._is_open else 'CLOSED'
        return f"LoRa6100(port={name}, state={state})"
