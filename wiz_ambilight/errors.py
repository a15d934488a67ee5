"""
errors.py
Exceptions raised by the ambient lighting loop.
"""


class AmbilightError(Exception):
    pass


class StartupError(AmbilightError):
    """The bulb list is missing or invalid; nothing has been sent yet."""


class CaptureError(AmbilightError):
    """The screen could not be sampled."""


class SendError(AmbilightError):
    """A single datagram to a single bulb could not be sent."""

    def __init__(self, address, cause):
        super().__init__(f"send to {address} failed: {cause}")
        self.address = address
        self.cause = cause
