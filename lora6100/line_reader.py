"""
Line Reader

Extracts \\r\\n terminated responses from the raw serial byte stream.
There is no timeout: a silent device blocks the caller indefinitely.
"""

from lora6100.errors import MalformedLineError

CR = 0x0D
LF = 0x0A


class LineReader:
    """Reads one response line at a time from a transport"""

    def __init__(self, transport):
        self.transport = transport

    def read_line(self) -> bytes:
        """
        Read bytes until \\r\\n and return the line without the terminator

        A \\n without a preceding \\r, or any byte after \\r other than \\n,
        makes the line malformed. The corrupt buffer, including the offending
        byte, is attached to the exception.

        Raises:
            MalformedLineError: line terminator was violated
            TransportError: underlying read failed
        """
        buf = bytearray()
        cr_seen = False

        while True:
            byte = self.transport.read_exact(1)[0]

            if cr_seen:
                if byte == LF:
                    return bytes(buf)
                # \r must be immediately followed by \n
                buf.append(byte)
                raise MalformedLineError(buf)

            if byte == CR:
                cr_seen = True
            elif byte == LF:
                buf.append(byte)
                raise MalformedLineError(buf)
            else:
                buf.append(byte)
