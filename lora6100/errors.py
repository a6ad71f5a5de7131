"""
LoRa6100 Error Types

Every failure raised by the driver and the flood relay derives from
DriverError so startup code can catch a single type.
"""


class DriverError(Exception):
    """Base class for LoRa6100 driver and relay errors"""


class NotOpenError(DriverError):
    """The device has not been opened for communication"""

    def __init__(self, message: str = "The device has not been opened for communication"):
        super().__init__(message)


class TransportError(DriverError):
    """Underlying serial port failure (read, write or control line)"""


class MalformedLineError(DriverError):
    """Read a corrupt line from the device"""

    def __init__(self, buffer: bytes):
        self.buffer = bytes(buffer)
        super().__init__(f"Read a corrupt line: {self.buffer!r}")


class FramingError(DriverError):
    """Binary payload was not the expected size"""

    def __init__(self, expected: int, actual: int, what: str = "payload"):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Incorrect {what} size: expected {expected} bytes, got {actual}")


class BadReturnStatusError(DriverError):
    """
    Response line did not parse to a recognized status token.

    The status is still reported as ERROR, but this exception lets callers
    tell a protocol desync apart from a device reported failure.
    """

    def __init__(self, line: str, status):
        self.line = line
        self.status = status  # always RetStatus.ERROR
        super().__init__(f"Received a bad return status: {line!r}")


class RelayError(DriverError):
    """A flood relay worker thread stopped on a fatal error"""
