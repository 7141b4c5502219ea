from typing import Optional

from fastapi import HTTPException


class ConfigError(ValueError):
    """Configuration document is malformed or incomplete (fatal at startup)"""


class BridgeError(HTTPException):
    """
    Base class for per-request errors

    The detail is always a plain string, rendered as text/plain body
    by the exception handler registered in main.create_app().
    """
    def __init__(self, status_code: int, message: str):
        super().__init__(status_code=status_code, detail=message)

    @property
    def message(self) -> str:
        return self.detail


class NotFoundError(BridgeError):
    def __init__(self, message: str = "Not Found"):
        super().__init__(404, message)


class BadRequestError(BridgeError):
    def __init__(self, message: str):
        super().__init__(400, message)


class DeviceConnectionError(BridgeError):
    """Device could not be dialed, TLS handshake failed or transport broke mid-session"""
    def __init__(self, device: str, address: str, cause: Exception):
        self.device = device
        self.address = address
        self.cause = cause
        super().__init__(500, f"cannot connect to device '{device}' at {address}: {cause}")


class TLSTrustError(BridgeError):
    def __init__(self, device: str, ca_file: str, reason: str):
        self.device = device
        self.ca_file = ca_file
        super().__init__(500, f"failed to load root CA certificate '{ca_file}' for device '{device}': {reason}")


class AuthError(BridgeError):
    def __init__(self, device: str, reason: str):
        self.device = device
        super().__init__(500, f"login to device '{device}' failed: {reason}")


class DeviceError(BridgeError):
    """Device answered, but reported that the operation failed"""
    def __init__(self, status_word: str, device_message: Optional[str] = None):
        self.status_word = status_word
        self.device_message = device_message
        text = status_word if not device_message else f"{status_word} {device_message}"
        super().__init__(500, f"invalid response from device: {text}")
