import os

# Project Configuration
DEBUG = os.getenv('DEBUG', 'FALSE') == 'TRUE'

# LOGGING Configuration
LOG_FILENAME = os.getenv('LOG_FILENAME', 'LoRa6100_Flood.debug')
MAX_LOG_SIZE = 20 * 1024 * 1024  # 20Mb
BACKUP_COUNT = 10

if os.getenv('LOCAL', None) == 'TRUE':
    HOME_DIR = '.'
else:
    HOME_DIR = os.getenv('HOME_DIR', '/home/lora')

# LoRa6100 Serial Configuration
LORA_PORT = os.getenv('LORA_PORT', '/dev/ttyUSB0')
LORA_BAUD = int(os.getenv('LORA_BAUD', '9600'))
# Settle delays around SET transitions, empirical hardware timings
LORA_SETTINGS_IN_DELAY_MS = int(os.getenv('LORA_SETTINGS_IN_DELAY_MS', '20'))
LORA_SETTINGS_OUT_DELAY_MS = int(os.getenv('LORA_SETTINGS_OUT_DELAY_MS', '100'))

# Flood Relay Configuration
FLOOD_TTL = int(os.getenv('FLOOD_TTL', '10'))  # Hop budget for local messages
FLOOD_JITTER_MS = int(os.getenv('FLOOD_JITTER_MS', '0'))  # 0 = retransmit immediately
FLOOD_TX_SPACING_MS = int(os.getenv('FLOOD_TX_SPACING_MS', '50'))
FLOOD_STATS_INTERVAL = int(os.getenv('FLOOD_STATS_INTERVAL', '300'))  # seconds
