"""
Serial Transport

Thin wrapper over a pyserial port exposing the operations the driver and
the relay engine need: blocking exact reads and writes, the RTS control
line, baud rate changes and buffer resets.
"""

import logging

import serial

from lora6100.errors import TransportError

DEFAULT_BAUD_RATE = 9600


class SerialTransport:
    """Byte stream over a serial port with an RTS control line"""

    def __init__(self, port_name: str, baud_rate: int = DEFAULT_BAUD_RATE):
        self.port_name = port_name
        self.baud_rate = baud_rate
        self.ser = None

    @property
    def is_open(self) -> bool:
        return self.ser is not None and self.ser.is_open

    def open(self):
        """Open the port (8N1, blocking reads)"""
        try:
            self.ser = serial.Serial(self.port_name, self.baud_rate, timeout=None)
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Failed to open {self.port_name}: {e}") from e
        logging.info(f"Serial port {self.port_name} opened at {self.baud_rate} baud")

    def close(self):
        if self.ser is not None:
            self.ser.close()
            logging.info(f"Serial port {self.port_name} closed")

    def _port(self):
        if not self.is_open:
            raise TransportError(f"Serial port {self.port_name} is not open")
        return self.ser

    def reset_buffers(self):
        """Discard anything pending in the input and output buffers"""
        port = self._port()
        try:
            port.reset_input_buffer()
            port.reset_output_buffer()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Failed to reset buffers: {e}") from e

    def read_exact(self, n: int) -> bytes:
        """Block until exactly n bytes were read"""
        port = self._port()
        try:
            data = port.read(n)
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Read failed: {e}") from e
        if len(data) != n:
            raise TransportError(f"Short read: expected {n} bytes, got {len(data)}")
        return data

    def write_all(self, data: bytes):
        """Write every byte of data and wait for it to leave the buffer"""
        port = self._port()
        try:
            written = port.write(data)
            port.flush()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Write failed: {e}") from e
        if written != len(data):
            raise TransportError(f"Short write: expected {len(data)} bytes, wrote {written}")

    def set_control_line(self, asserted: bool):
        """Drive RTS (wired to the module SET pin)"""
        port = self._port()
        try:
            port.rts = asserted
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Failed to set RTS: {e}") from e

    def set_baud(self, rate: int):
        port = self._port()
        try:
            port.baudrate = rate
        except (serial.SerialException, ValueError, OSError) as e:
            raise TransportError(f"Failed to set baud rate {rate}: {e}") from e
        self.baud_rate = rate
        logging.info(f"Serial port {self.port_name} switched to {rate} baud")
