"""
Collision Avoidance for Flood Retransmission

Every node that hears a flood retransmits it, so neighbours that received
the same frame would otherwise transmit at the same instant. A uniformly
random delay before each retransmission desynchronizes them.

There is no channel sensing on the LoRa6100 UART interface, so the random
delay together with the paced sender is the only contention mechanism.
"""

import random
import logging


class CollisionAvoidance:
    """Randomized retransmission delays"""

    def __init__(self, jitter_window: float = 0.0, rng: random.Random = None):
        """
        Args:
            jitter_window: Upper bound of the random delay in seconds,
                0 disables jitter
            rng: Random source, module level generator by default
        """
        if jitter_window < 0:
            raise ValueError(f"Jitter window must not be negative: {jitter_window}")
        self.jitter_window = jitter_window
        self.rng = rng or random

    def retransmit_delay(self) -> float:
        """Delay in seconds drawn from [0, jitter_window)"""
        if not self.jitter_window:
            return 0.0
        delay = self.rng.random() * self.jitter_window
        logging.debug(f"Random delay: {delay*1000:.1f}ms")
        return delay
