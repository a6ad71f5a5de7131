"""
In-memory LoRa6100 emulation for tests

Implements the transport interface the driver and the relay use. While RTS
is asserted, written bytes are parsed as vendor commands and answered the
way the module does. While RTS is released, written bytes are recorded as
transmitted frames and reads are served from frames fed by the test.
"""

import threading
import time

from lora6100 import Command, Parameters, TransportError
from lora6100.device_types import CMD_PREFIX, LINE_ENDING


def default_parameters() -> Parameters:
    """Module defaults with byte values that never contain \\r or \\n"""
    return Parameters(
        rf_channel=1,
        rf_frequency=2,
        rf_data_rate=3,
        tx_power=7,
        net_id=0x01020304,
        node_id=0x0506,
        aes_key=bytes(range(0x20, 0x30))
    )


class FakeLoRa6100:
    """Emulated module plus serial port"""

    def __init__(self, version: bytes = b"LoRa6100 AES V1.0", parameters: Parameters = None):
        self.version = version
        self.parameters = parameters or default_parameters()
        self.is_open = False
        self.rts = False
        self.baud_rate = 9600
        self.rts_changes = []       # every set_control_line value, in order
        self.commands = []          # raw command frames received in settings mode
        self.frames = []            # (monotonic time, bytes) written in normal mode
        self.next_response = None   # overrides the reply to the next command
        self.buffer_resets = 0
        self.fail_writes = False
        self.refused_commands = set()  # opcodes answered with ERROR

        self._cond = threading.Condition()
        self._rx = bytearray()
        self._cmd = bytearray()

    # Transport interface

    def open(self):
        self.is_open = True

    def close(self):
        with self._cond:
            self.is_open = False
            self._cond.notify_all()

    def reset_buffers(self):
        self.buffer_resets += 1
        with self._cond:
            self._rx.clear()
        self._cmd.clear()

    def set_control_line(self, asserted: bool):
        self.rts = asserted
        self.rts_changes.append(asserted)

    def set_baud(self, rate: int):
        self.baud_rate = rate

    def read_exact(self, n: int) -> bytes:
        with self._cond:
            while len(self._rx) < n:
                if not self.is_open:
                    raise TransportError("Serial port closed")
                self._cond.wait()
            data = bytes(self._rx[:n])
            del self._rx[:n]
        return data

    def write_all(self, data: bytes):
        if self.fail_writes:
            raise TransportError("Write failed: device unplugged")
        if self.rts:
            self._cmd.extend(data)
            self._process_command()
        else:
            self.frames.append((time.monotonic(), bytes(data)))

    # Test helpers

    def feed(self, data: bytes):
        """Bytes the radio received over the air"""
        with self._cond:
            self._rx.extend(data)
            self._cond.notify_all()

    def sent_frames(self):
        return [data for _, data in self.frames]

    def _reply(self, line: bytes):
        if self.next_response is not None:
            line, self.next_response = self.next_response, None
            self.feed(line)
            return
        self.feed(line + LINE_ENDING)

    def _process_command(self):
        if len(self._cmd) < 3:
            return
        expected = 3 + len(LINE_ENDING)
        if self._cmd[2] == Command.SET_PARAMETERS:
            expected += Parameters.SIZE
        if len(self._cmd) < expected:
            return

        frame = bytes(self._cmd[:expected])
        del self._cmd[:expected]
        self.commands.append(frame)

        if frame[:2] != CMD_PREFIX or not frame.endswith(LINE_ENDING):
            self._reply(b"ERROR")
            return

        opcode = frame[2]
        if opcode in self.refused_commands:
            self._reply(b"ERROR")
            return
        if opcode == Command.READ_VERSION:
            self._reply(self.version)
        elif opcode == Command.READ_PARAMETERS:
            self._reply(self.parameters.serialize())
        elif opcode == Command.RESET_DEFAULT:
            self.parameters = default_parameters()
            self._reply(b"OK")
        elif opcode == Command.SET_PARAMETERS:
            self.parameters = Parameters.deserialize(frame[3:3 + Parameters.SIZE])
            self._reply(b"OK")
        else:
            self._reply(b"ERROR")


class ScriptedTransport:
    """Serves a fixed byte string to read_exact, for line reader tests"""

    def __init__(self, data: bytes):
        self.data = bytearray(data)

    def read_exact(self, n: int) -> bytes:
        if len(self.data) < n:
            raise TransportError("No more data")
        chunk = bytes(self.data[:n])
        del self.data[:n]
        return chunk


def wait_for(condition, timeout: float = 2.0, interval: float = 0.005) -> bool:
    """Poll condition until true or timeout"""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(interval)
    return condition()
