# seriallog/portconfig.py
import logging
from typing import Callable, Optional

import orjson
from pydantic import BaseModel, Field, ValidationError

from seriallog.errors import ConfigUnavailable
from seriallog.transport import list_candidate_ports

log = logging.getLogger(__name__)


class DeviceSettings(BaseModel):
    device: str = Field(min_length=1)
    baud: Optional[int] = Field(default=None, gt=0)


def load_last_device(path: str) -> DeviceSettings:
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as exc:
        raise ConfigUnavailable(f"no saved device in {path}: {exc}") from exc
    try:
        return DeviceSettings.model_validate(orjson.loads(raw))
    except (orjson.JSONDecodeError, ValidationError) as exc:
        raise ConfigUnavailable(f"unusable device settings in {path}: {exc}") from exc


def save_device(name: str, path: str, baud: Optional[int] = None) -> bool:
    settings = DeviceSettings(device=name, baud=baud)
    try:
        with open(path, "wb") as f:
            f.write(orjson.dumps(settings.model_dump(), option=orjson.OPT_INDENT_2))
    except OSError as exc:
        log.warning("could not save device to %s: %s", path, exc)
        return False
    return True


def remembered_baud(path: str, device: str) -> Optional[int]:
    """Baud rate saved alongside `device`, if that is the device on file."""
    try:
        last = load_last_device(path)
    except ConfigUnavailable:
        return None
    return last.baud if last.device == device else None


def confirm_device(path: str, ask: Callable[[str], str] = input,
                   candidates: Callable[[], list] = list_candidate_ports) -> str:
    """Offer the last used device; otherwise ask for one and remember it."""
    try:
        last = load_last_device(path)
    except ConfigUnavailable as exc:
        log.debug("%s", exc)
    else:
        print(f"Previously saved port: {last.device}")
        if ask("Do you want to use this port? (Y/N): ").strip().lower() == "y":
            return last.device

    ports = candidates()
    if ports:
        print("Candidate serial ports:")
        for port in ports:
            print(f"- {port}")

    device = ""
    while not device:
        device = ask("Enter the serial port (e.g., COM3 or /dev/ttyUSB0): ").strip()
    save_device(device, path)
    return device
