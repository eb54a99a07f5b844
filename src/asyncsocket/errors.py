"""Exceptions raised by the socket client."""

import os
from typing import Optional


class AsyncSocketError(Exception):
    """Base class for all asyncsocket errors."""


class InvalidArgumentError(AsyncSocketError, ValueError):
    """A required argument is missing or malformed."""


class OperationInProgressError(AsyncSocketError, RuntimeError):
    """An operation was issued while another one is still in flight."""


class TransportError(AsyncSocketError, OSError):
    """
    A transport operation completed with a non-success status.

    The native status code is available as ``errno`` (and ``error_code``).
    """

    def __init__(self, error_code: int, message: Optional[str] = None):
        super().__init__(error_code, message or os.strerror(error_code))

    @property
    def error_code(self) -> int:
        return self.errno
