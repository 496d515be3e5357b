# seriallog/entries.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal
from datetime import datetime

RecordState = Literal["open", "committed", "discarded"]
Outcome = Literal["commit", "discard", "failed"]

STAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"
PAYLOAD_ENCODING = "utf-8"
PAYLOAD_ERRORS = "surrogateescape"  # keeps non-UTF-8 bytes exact on disk


def format_stamp(t: datetime) -> str:
    # millisecond precision: drop the last three digits of %f
    return t.strftime(STAMP_FORMAT)[:-3]


# parse_stamp, encode_payload and Entry.from_row are the reading side, used by writer.read_record
def parse_stamp(s: str) -> datetime:
    return datetime.strptime(s, STAMP_FORMAT)


def decode_payload(data: bytes) -> str:
    return data.decode(PAYLOAD_ENCODING, PAYLOAD_ERRORS)


def encode_payload(text: str) -> bytes:
    return text.encode(PAYLOAD_ENCODING, PAYLOAD_ERRORS)


class Entry(BaseModel):
    """One chunk exactly as returned by a single transport read."""

    model_config = ConfigDict(frozen=True)

    t: datetime = Field(default_factory=datetime.now)
    data: bytes

    @property
    def stamp(self) -> str:
        return format_stamp(self.t)

    @property
    def text(self) -> str:
        return decode_payload(self.data)

    def row(self) -> list:
        return [self.stamp, self.text]

    @classmethod
    def from_row(cls, row: list) -> "Entry":
        stamp, text = row
        return cls(t=parse_stamp(stamp), data=encode_payload(text))
