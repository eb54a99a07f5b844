"""Completion context handed to observers."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from asyncsocket.endpoint import Endpoint


class Operation(Enum):
    """Kind of asynchronous transport operation."""

    CONNECT = "connect"
    SEND = "send"
    RECEIVE = "receive"


@dataclass(frozen=True)
class SocketEvent:
    """
    Result of one completed transport operation.

    For sends ``buffer`` is the caller's data, for receives it is the buffer
    filled by the transport. ``error_code`` is 0 on success and an ``errno``
    value otherwise.
    """

    operation: Operation
    buffer: bytes = b""
    bytes_transferred: int = 0
    error_code: int = 0
    remote_endpoint: Optional[Endpoint] = None

    @property
    def succeeded(self) -> bool:
        return self.error_code == 0

    @property
    def data(self) -> bytes:
        """The transferred part of the buffer."""
        return bytes(self.buffer[: self.bytes_transferred])
