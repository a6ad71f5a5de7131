#!/usr/bin/env python3
"""
LoRa6100 Device Info

Opens the module, then prints its firmware version and parameters.
RTS must be wired to the module SET pin.

Usage:
    python3 utility_tools/device_info.py [/dev/ttyUSB0]
"""

import os
import sys
import logging

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from lora6100 import LoRa6100, DriverError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)


def main():
    port_name = sys.argv[1] if len(sys.argv) > 1 else '/dev/ttyUSB0'

    try:
        with LoRa6100.from_port(port_name) as device:
            print("Version:", device.get_version())

            params = device.get_parameters()
            print("Parameters:")
            print(f"  RF channel:      {params.rf_channel}")
            print(f"  RF frequency:    {params.rf_frequency}")
            print(f"  RF data rate:    {params.rf_data_rate}")
            print(f"  TX power:        {params.tx_power}")
            print(f"  Serial baud:     {params.serial_baud!r}")
            print(f"  Data bits:       {params.serial_data_bits!r}")
            print(f"  Stop bits:       {params.serial_stop_bits!r}")
            print(f"  Parity:          {params.serial_parity!r}")
            print(f"  Network ID:      0x{params.net_id:08X}")
            print(f"  Node ID:         0x{params.node_id:04X}")
            print(f"  AES key setting: {params.aes_key_setting!r}")
            print(f"  AES key:         {params.aes_key.hex()}")
    except DriverError as e:
        logging.error(f"Device query failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
