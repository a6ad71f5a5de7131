"""
Flood Relay Engine

Treats the LoRa6100 in normal mode as a shared half-duplex byte stream
carrying fixed size FloodPackets:

- ReceiverThread is the only reader of the transport. It decodes one
  frame at a time into the inbound queue and never waits on sending.
- The dispatcher drains the inbound queue. Packets with TTL > 0 are
  repeated with TTL - 1 after a random jitter delay, TTL 0 packets are
  terminal and only logged.
- Retransmission timers and local messages all end up in the outbound
  queue, which SenderThread (the only writer of the transport) drains in
  FIFO order, sleeping the inter-transmission spacing after every frame.

There is no duplicate suppression or loop detection beyond the TTL.
Any transport or decode failure in a worker thread stops the engine and
is raised from wait().
"""

from threading import Thread
from typing import Optional, Union
import logging
import queue
import random
import threading
import time

from lora6100.collision_avoidance import CollisionAvoidance
from lora6100.errors import RelayError
from lora6100.flood_packet import FloodPacket

DEFAULT_TTL = 10
TX_SPACING = 0.050  # seconds between two transmitted frames

_STOP = object()


class RelayStats:
    """Thread safe counters for the relay"""

    def __init__(self):
        self._lock = threading.Lock()
        self.packets_received = 0
        self.packets_scheduled = 0
        self.packets_terminal = 0
        self.packets_transmitted = 0
        self.messages_originated = 0
        self.start_time = time.time()

    def increment(self, counter: str):
        with self._lock:
            setattr(self, counter, getattr(self, counter) + 1)

    def log_stats(self):
        """Log statistics summary"""
        uptime = time.time() - self.start_time
        logging.info(f"=== Relay Stats (Uptime: {uptime/3600:.1f}h) ===")
        logging.info(f"Received: {self.packets_received}")
        logging.info(f"Retransmissions scheduled: {self.packets_scheduled}")
        logging.info(f"Terminal (TTL 0): {self.packets_terminal}")
        logging.info(f"Originated: {self.messages_originated}")
        logging.info(f"Transmitted: {self.packets_transmitted}")


class ReceiverThread(Thread):
    """Decodes frames from the transport into the inbound queue"""

    def __init__(self, transport, inbound: queue.Queue, stats: RelayStats, on_error):
        Thread.__init__(self, name="flood-receiver", daemon=True)
        self._kill = threading.Event()
        self.transport = transport
        self.inbound = inbound
        self.stats = stats
        self.on_error = on_error

    def run(self):
        try:
            while not self._kill.is_set():
                data = self.transport.read_exact(FloodPacket.SIZE)
                packet = FloodPacket.deserialize(data)
                self.stats.increment('packets_received')
                self.inbound.put(packet)
        except Exception as e:
            # A read interrupted by closing the transport after stop() is expected
            if not self._kill.is_set():
                self.on_error(e)

    def kill(self):
        self._kill.set()


class SenderThread(Thread):
    """Single paced writer of the transport"""

    def __init__(self, transport, outbound: queue.Queue, stats: RelayStats,
                 tx_spacing: float, on_error):
        Thread.__init__(self, name="flood-sender", daemon=True)
        self.transport = transport
        self.outbound = outbound
        self.stats = stats
        self.tx_spacing = tx_spacing
        self.on_error = on_error

    def run(self):
        try:
            while True:
                packet = self.outbound.get()
                if packet is _STOP:
                    break
                self.transport.write_all(packet.serialize())
                self.stats.increment('packets_transmitted')
                logging.info(f"Sent {packet}")
                time.sleep(self.tx_spacing)
        except Exception as e:
            self.on_error(e)


class FloodRelay:
    """
    Flood relay over a transport already in normal (data) mode

    The device driver must have finished all settings mode exchanges
    before start() is called, since the relay takes over both directions
    of the transport.
    """

    def __init__(self, transport, initial_ttl: int = DEFAULT_TTL,
                 jitter_window: float = 0.0, tx_spacing: float = TX_SPACING,
                 rng: random.Random = None):
        """
        Args:
            transport: Byte stream with blocking read_exact and write_all
            initial_ttl: Hop budget given to locally originated messages
            jitter_window: Upper bound of the retransmission delay in seconds
            tx_spacing: Pause after every transmitted frame in seconds
            rng: Random source for jitter and packet IDs
        """
        if not 0 <= initial_ttl <= 255:
            raise ValueError(f"TTL must fit in one byte: {initial_ttl}")
        self.transport = transport
        self.initial_ttl = initial_ttl
        self.tx_spacing = tx_spacing
        self.rng = rng or random
        self.collision_avoidance = CollisionAvoidance(jitter_window, self.rng)
        self.stats = RelayStats()

        self.inbound: queue.Queue = queue.Queue()
        self.outbound: queue.Queue = queue.Queue()

        self._timers: set = set()
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._error: Optional[BaseException] = None
        self._local_sent = False

        self._receiver = ReceiverThread(transport, self.inbound, self.stats, self._fail)
        self._sender = SenderThread(transport, self.outbound, self.stats, tx_spacing, self._fail)
        self._dispatcher = Thread(target=self._dispatch_loop, name="flood-dispatcher", daemon=True)

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    @property
    def pending_timers(self) -> int:
        with self._lock:
            return len(self._timers)

    def start(self):
        logging.info(f"Flood relay starting: ttl={self.initial_ttl}, "
                     f"jitter={self.collision_avoidance.jitter_window*1000:.0f}ms, "
                     f"spacing={self.tx_spacing*1000:.0f}ms")
        self._sender.start()
        self._dispatcher.start()
        self._receiver.start()

    def stop(self):
        """Stop the relay, dropping pending retransmissions"""
        if not self._done.is_set():
            logging.info("Flood relay stopping")
        self._done.set()
        self._shutdown_workers()

    def wait(self, timeout: float = None) -> bool:
        """
        Block until the relay stops

        Returns:
            True if stopped, False if timeout elapsed first

        Raises:
            RelayError: a worker thread failed
        """
        stopped = self._done.wait(timeout)
        if self._error is not None:
            raise RelayError(f"Flood relay failed: {self._error}") from self._error
        return stopped

    def run_forever(self, stats_interval: float = None):
        """Start and block until stopped, logging stats every stats_interval seconds"""
        self.start()
        self.monitor(stats_interval)

    def monitor(self, stats_interval: float = None):
        """
        Block until the relay stops, logging stats periodically

        A stats_interval of None, 0 or less disables periodic stats.
        """
        if stats_interval is not None and stats_interval <= 0:
            stats_interval = None
        while not self.wait(stats_interval):
            self.stats.log_stats()

    def handle(self, packet: FloodPacket):
        """Decide what to do with one received packet"""
        logging.info(f"Read {packet}")

        if packet.is_terminal:
            self.stats.increment('packets_terminal')
            logging.debug(f"TTL exhausted, not repeating {packet}")
            return

        repeat = packet.create_repeat()
        delay = self.collision_avoidance.retransmit_delay()
        self.stats.increment('packets_scheduled')
        logging.info(f"Repeating {repeat} in {delay*1000:.1f}ms")
        self.schedule(repeat, delay)

    def inject(self, message: Union[str, bytes]) -> FloodPacket:
        """
        Originate a local message with a random ID and the initial TTL

        The first local message goes out without delay, later ones get
        the same jitter as retransmissions.
        """
        packet = FloodPacket.create(message, self.initial_ttl,
                                    packet_id=self.rng.randrange(256))
        with self._lock:
            first = not self._local_sent
            self._local_sent = True
        delay = 0.0 if first else self.collision_avoidance.retransmit_delay()

        self.stats.increment('messages_originated')
        logging.info(f"Sending local {packet} in {delay*1000:.1f}ms")
        self.schedule(packet, delay)
        return packet

    def schedule(self, packet: FloodPacket, delay: float = 0.0):
        """Enqueue packet for transmission after delay seconds"""
        if delay <= 0:
            self.outbound.put(packet)
            return

        timer = threading.Timer(delay, self._timer_expired, args=(packet,))
        timer.daemon = True
        with self._lock:
            if self._done.is_set():
                return
            self._timers.add(timer)
        timer.start()

    def _timer_expired(self, packet: FloodPacket):
        with self._lock:
            self._timers.discard(threading.current_thread())
        if not self._done.is_set():
            self.outbound.put(packet)

    def _dispatch_loop(self):
        try:
            while True:
                packet = self.inbound.get()
                if packet is _STOP:
                    break
                self.handle(packet)
        except Exception as e:
            self._fail(e)

    def _fail(self, error: BaseException):
        with self._lock:
            if self._error is None and not self._done.is_set():
                self._error = error
                logging.error(f"Fatal error in flood relay: {error}")
        self._done.set()
        self._shutdown_workers()

    def _shutdown_workers(self):
        with self._lock:
            timers = list(self._timers)
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        self._receiver.kill()
        self.inbound.put(_STOP)
        self.outbound.put(_STOP)
