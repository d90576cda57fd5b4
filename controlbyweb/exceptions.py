"""
ControlByWeb library exceptions.

This module defines all custom exceptions used throughout the library.
"""

from typing import Optional


class CbwError(Exception):
    """Base exception for ControlByWeb errors"""
    pass


class CbwTimeoutError(CbwError):
    """Raised when a device does not answer in time"""
    pass


class CbwConnectionError(CbwError):
    """Raised when connection to a device fails"""

    def __init__(self, host: str, port: int, message: Optional[str] = None):
        self.host = host
        self.port = port
        super().__init__(message or f"Unable to connect to {host}:{port}")


class CbwUnauthorizedError(CbwError):
    """Raised when the device rejects the supplied password"""
    pass


class CbwBadResponseError(CbwError):
    """Raised when the device answers with something that is not valid XML"""

    def __init__(self, message: str, response: str = ""):
        self.response = response
        super().__init__(message)


class CbwConfigurationError(CbwError):
    """Raised when configuration is invalid"""
    pass


class CbwModeError(CbwError):
    """Raised when an operation is not allowed in the controller's current mode"""
    pass


class CbwUnsupportedMethodError(CbwError):
    """Raised when a device model does not support an operation"""

    def __init__(self, method_name: str, reason: str):
        self.method_name = method_name
        self.reason = reason
        super().__init__(f"{method_name}: {reason}")
