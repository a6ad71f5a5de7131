#!/usr/bin/env python3
"""
LoRa6100 Flood Test Node

Configures a Nice-RF LoRa6100 module over UART, then floods messages
across every node in range. Each node repeats what it hears with the TTL
decremented until the TTL reaches zero.

Startup:
- Opens the module and forces it out of settings mode
- Optionally prints version and parameters (--info, RTS must be wired to SET)
- Optionally persists a new serial baud rate and follows it (--baud)
- Optionally sends a first message (--msg)

Usage:
    python floodtest.py /dev/ttyUSB0 --msg hello --rdelay 200

    Defaults are read from the environment (see utils/config.py):
    FLOOD_JITTER_MS=200 LORA_PORT=/dev/ttyUSB1 python floodtest.py
"""

import argparse
import logging
import logging.handlers
import sys
from dotenv import load_dotenv

load_dotenv()

from lora6100 import (
    LoRa6100, FloodRelay, FloodPacket, SerialBaudRate, RetStatus, DriverError, RelayError
)
from utils.config import (
    LORA_PORT, LORA_BAUD, LORA_SETTINGS_IN_DELAY_MS, LORA_SETTINGS_OUT_DELAY_MS,
    FLOOD_TTL, FLOOD_JITTER_MS, FLOOD_TX_SPACING_MS, FLOOD_STATS_INTERVAL,
    LOG_FILENAME, MAX_LOG_SIZE, BACKUP_COUNT, DEBUG, HOME_DIR
)


def setup_logging():
    log_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    console = logging.StreamHandler()
    console.setFormatter(log_formatter)
    logging.getLogger().addHandler(console)
    try:
        handler = logging.handlers.RotatingFileHandler(
            f'{HOME_DIR}/log/{LOG_FILENAME}',
            maxBytes=MAX_LOG_SIZE,
            backupCount=BACKUP_COUNT
        )
        handler.setFormatter(log_formatter)
        logging.getLogger().addHandler(handler)
    except Exception as e:
        print(f'Error creating log object: {e}')
    logging.getLogger().setLevel(logging.DEBUG if DEBUG else logging.INFO)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="LoRa6100 flood relay test node")
    parser.add_argument('port', nargs='?', default=LORA_PORT,
                        help=f"Serial port of the module (default {LORA_PORT})")
    parser.add_argument('--info', action='store_true',
                        help="Show hw version and params on startup (must have RTS connected to SET)")
    parser.add_argument('--msg', default='',
                        help=f"The message to send, {FloodPacket.PAYLOAD_SIZE} bytes max")
    parser.add_argument('--rdelay', type=float, default=FLOOD_JITTER_MS,
                        help="Random delay window before retransmission, in ms")
    parser.add_argument('--ttl', type=int, default=FLOOD_TTL,
                        help="Hop budget of locally sent messages")
    parser.add_argument('--spacing', type=float, default=FLOOD_TX_SPACING_MS,
                        help="Pause between transmitted frames, in ms")
    parser.add_argument('--baud', type=int, default=None,
                        help="Persist a new serial baud rate on the module and switch to it")
    args = parser.parse_args(argv)

    if len(args.msg.encode('utf-8')) > FloodPacket.PAYLOAD_SIZE:
        parser.error("Provided message is too long")
    if args.baud is not None and SerialBaudRate.from_speed(args.baud) == SerialBaudRate.UNKNOWN:
        parser.error(f"Unsupported baud rate: {args.baud}")
    if not 0 <= args.ttl <= 255:
        parser.error(f"TTL must be between 0 and 255: {args.ttl}")
    if args.rdelay < 0:
        parser.error(f"Random delay must not be negative: {args.rdelay}")
    if args.spacing < 0:
        parser.error(f"Spacing must not be negative: {args.spacing}")
    return args


def configure(device: LoRa6100, args):
    """Settings mode phase, must complete before the relay starts"""
    if args.info:
        version = device.get_version()
        print("Version:", version)
        params = device.get_parameters()
        print("Parameters:", params)

    if args.baud is not None:
        baud = SerialBaudRate.from_speed(args.baud)
        params = device.get_parameters()
        params.serial_baud = baud
        status = device.set_parameters(params)
        if status != RetStatus.OK:
            raise DriverError(f"Module refused baud rate {args.baud}: {status.value}")
        device.change_baud(baud)


def start_relay(device: LoRa6100, args) -> FloodRelay:
    """Hand the configured transport to a new relay and send the first message"""
    relay = FloodRelay(
        device.transport,
        initial_ttl=args.ttl,
        jitter_window=args.rdelay / 1000.0,
        tx_spacing=args.spacing / 1000.0
    )
    relay.start()
    if args.msg:
        logging.info("Sending first message")
        relay.inject(args.msg)
    else:
        logging.info("Listening for messages")
    return relay


def main(argv=None, device: LoRa6100 = None):
    """Configure the module, then run the flood relay until stopped"""
    args = parse_args(argv)
    setup_logging()

    logging.info(f"Opening device {args.port}")
    if device is None:
        device = LoRa6100.from_port(
            args.port,
            LORA_BAUD,
            settings_in_delay=LORA_SETTINGS_IN_DELAY_MS / 1000.0,
            settings_out_delay=LORA_SETTINGS_OUT_DELAY_MS / 1000.0
        )

    try:
        device.open()
        configure(device, args)
        relay = start_relay(device, args)
    except (DriverError, ValueError) as e:
        logging.error(f"Startup failed: {e}")
        device.close()
        return 1

    try:
        relay.monitor(FLOOD_STATS_INTERVAL)
    except KeyboardInterrupt:
        logging.info("Flood relay shutting down...")
        relay.stop()
        relay.stats.log_stats()
        print("\nFlood relay stopped")
        return 0
    except RelayError as e:
        logging.error(f"Fatal error: {e}")
        relay.stats.log_stats()
        return 1
    finally:
        device.close()

    relay.stats.log_stats()
    return 0


if __name__ == "__main__":
    sys.exit(main())
