#!/usr/bin/env python3
"""
RTS Toggle Check

Drives RTS high, low, then high again with a pause in between, so the
module SET wiring can be checked with a meter or the module status LED.

Usage:
    python3 utility_tools/rts_toggle.py [/dev/ttyUSB0] [--pause 2.0]
"""

import os
import sys
import time
import argparse
import logging

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from lora6100 import SerialTransport, TransportError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)


def main():
    parser = argparse.ArgumentParser(description="Toggle RTS to check SET wiring")
    parser.add_argument('port', nargs='?', default='/dev/ttyUSB0')
    parser.add_argument('--pause', type=float, default=2.0, help="Seconds between transitions")
    args = parser.parse_args()

    transport = SerialTransport(args.port)
    try:
        transport.open()
        for asserted in (True, False, True):
            print(f"setting: {asserted}")
            transport.set_control_line(asserted)
            print("Waiting")
            time.sleep(args.pause)
    except TransportError as e:
        logging.error(f"RTS toggle failed: {e}")
        return 1
    finally:
        transport.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
