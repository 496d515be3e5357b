# seriallog/errors.py
"""Error taxonomy for the serial recorder.

Every failure the session can hit is one of four kinds, each with a stable
`code` so the CLI and tests can tell them apart without parsing messages:

- TransportError: the serial device is absent or went away mid-session.
- StorageUnavailable: the record file could not be created.
- WriteFailed: an append or flush on an open record failed.
- ConfigUnavailable: no usable device on file (recoverable: prompt instead).
"""

SL_E_TRANSPORT = "SL_E_TRANSPORT"
SL_E_STORAGE = "SL_E_STORAGE"
SL_E_WRITE = "SL_E_WRITE"
SL_E_CONFIG = "SL_E_CONFIG"


class SerialLogError(Exception):
    code = "SL_E_INTERNAL"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class TransportError(SerialLogError):
    code = SL_E_TRANSPORT


class StorageUnavailable(SerialLogError):
    code = SL_E_STORAGE


class WriteFailed(SerialLogError):
    code = SL_E_WRITE


class ConfigUnavailable(SerialLogError):
    code = SL_E_CONFIG
