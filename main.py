# main.py
"""Serial recorder.

Reads a serial port and logs every received chunk, timestamped to the
millisecond, to a new CSV file (data_YYYYMMDD_HHMMSS.csv).

Keys while recording:
  Alt+C   save the CSV file and exit
  Ctrl+X  exit without saving (the CSV file is deleted)

Usage examples:
  python main.py                          # offer the last used port, 115200 baud
  python main.py --port /dev/ttyUSB0 --baud 9600
  python main.py --out-dir logs --on-error discard --quiet
  python main.py --list-ports
"""

import argparse
import sys
from functools import partial

from config import (
    BAUD_RATE,
    READ_CHUNK,
    RECORDINGS_DIR,
    FILE_PREFIX,
    PORT_CONFIG_FILE,
    ON_TRANSPORT_ERROR,
    ECHO_DATA,
    LOG_FILE,
)

from seriallog.log import setup_logger
from seriallog.portconfig import confirm_device, remembered_baud, save_device
from seriallog.session import EXIT_FAILED, ON_ERROR_POLICIES, SessionController
from seriallog.terminal import RawInput
from seriallog.transport import list_candidate_ports, open_transport
from seriallog.writer import CsvRecord


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Timestamped serial logger with save/discard keys")
    p.add_argument("--port", default=None, help="Serial port (default: ask, offering the last used one)")
    p.add_argument("--baud", type=int, default=None,
                   help=f"Baud rate (default: the one saved with the port, else {BAUD_RATE})")
    p.add_argument("--out-dir", default=RECORDINGS_DIR, help="Directory for CSV records")
    p.add_argument(
        "--on-error",
        choices=ON_ERROR_POLICIES,
        default=ON_TRANSPORT_ERROR,
        help=f"Keep or delete the partial record if the device fails (default: {ON_TRANSPORT_ERROR})",
    )
    p.add_argument("--quiet", action="store_true", default=not ECHO_DATA, help="Do not echo received data")
    p.add_argument("--log-file", default=LOG_FILE, help="Also write diagnostics to this file")
    p.add_argument("--config", default=PORT_CONFIG_FILE, help="Where the last used port is remembered")
    p.add_argument("--list-ports", action="store_true", help="List candidate serial ports and exit")
    return p.parse_args(argv)


def resolve_device(args: argparse.Namespace):
    device = args.port or confirm_device(args.config)
    baud = args.baud or remembered_baud(args.config, device) or BAUD_RATE
    save_device(device, args.config, baud=baud)
    return device, baud


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logger(log_file=args.log_file)

    if args.list_ports:
        ports = list_candidate_ports()
        if not ports:
            print("No serial ports auto-detected. Use --port to name one.")
        for port in ports:
            print(f"- {port}")
        return 0

    try:
        device, baud = resolve_device(args)
    except (EOFError, KeyboardInterrupt):
        print("\nNo port selected.", file=sys.stderr)
        return EXIT_FAILED

    raw = RawInput()
    controller = SessionController(
        open_transport=partial(open_transport, device, baud),
        open_record=partial(CsvRecord.open, args.out_dir, FILE_PREFIX),
        next_key=raw.next_key,
        on_error=args.on_error,
        chunk=READ_CHUNK,
        echo=not args.quiet,
        restore_terminal=raw.restore,
    )
    print(f"⏺  Opening {device} @ {baud} baud")
    code = controller.run()
    if controller.error is not None:
        print(f"ERROR: {controller.error}", file=sys.stderr)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
