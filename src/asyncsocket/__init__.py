"""Blocking socket client over an asynchronous transport."""

from asyncsocket.client import AsyncSocketClient, ClientState
from asyncsocket.endpoint import Endpoint, ProtocolKind, SocketKind
from asyncsocket.errors import (
    AsyncSocketError,
    InvalidArgumentError,
    OperationInProgressError,
    TransportError,
)
from asyncsocket.events import Operation, SocketEvent
from asyncsocket.handlers.base import CallbackObserver, SocketObserver

__version__ = "0.1.0"
__all__ = [
    "AsyncSocketClient",
    "ClientState",
    "Endpoint",
    "SocketKind",
    "ProtocolKind",
    "SocketEvent",
    "Operation",
    "SocketObserver",
    "CallbackObserver",
    "AsyncSocketError",
    "InvalidArgumentError",
    "OperationInProgressError",
    "TransportError",
    "__version__",
]
