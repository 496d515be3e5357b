# config.py
# Serial link (8N1 is fixed; only the speed is tunable)
BAUD_RATE = 115200
READ_CHUNK = 128              # max bytes per transport read, one record row per read

# Records
RECORDINGS_DIR = "."
FILE_PREFIX = "data_"         # data_YYYYMMDD_HHMMSS.csv

# Last used port, offered again on the next run
PORT_CONFIG_FILE = "portconfig.json"

# Session keys: Ctrl+X discards, Alt+C (ESC then "c") commits
DISCARD_KEY = 0x18
ESCAPE_KEY = 0x1B
COMMIT_LETTER = "c"

# What happens to the record when the device fails mid-session: "commit" or "discard"
ON_TRANSPORT_ERROR = "commit"

ECHO_DATA = True              # print each received chunk
LOG_FILE = None               # e.g. "serial-recorder.log"
