"""Transport interface used by the socket client."""

from abc import ABC, abstractmethod
from typing import Callable

from asyncsocket.endpoint import Endpoint
from asyncsocket.events import SocketEvent

CompletionCallback = Callable[[SocketEvent], None]


class Transport(ABC):
    """
    Base interface for asynchronous socket transports.

    Every ``*_async`` method returns immediately and later invokes
    ``callback`` exactly once with a SocketEvent describing the outcome,
    on whatever thread the transport chooses. Failures of the operation are
    reported through ``SocketEvent.error_code``, never raised from the
    callback.
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the socket currently has a connected peer."""
        pass

    @abstractmethod
    def connect_async(self, endpoint: Endpoint, callback: CompletionCallback) -> None:
        """
        Start connecting to endpoint.

        Args:
            endpoint: Remote peer
            callback: Completion callback
        """
        pass

    @abstractmethod
    def send_async(self, data: bytes, callback: CompletionCallback) -> None:
        """
        Start sending data to the connected peer.

        Args:
            data: Bytes to send
            callback: Completion callback
        """
        pass

    @abstractmethod
    def send_to_async(
        self, data: bytes, endpoint: Endpoint, callback: CompletionCallback
    ) -> None:
        """
        Start sending a datagram to endpoint.

        Args:
            data: Bytes to send
            endpoint: Target peer
            callback: Completion callback
        """
        pass

    @abstractmethod
    def receive_async(self, buffer: bytearray, callback: CompletionCallback) -> None:
        """
        Start receiving into buffer.

        The buffer belongs to the transport until callback fires.

        Args:
            buffer: Receive buffer, filled from the start
            callback: Completion callback
        """
        pass

    @abstractmethod
    def shutdown(self) -> None:
        """
        Shut down both directions of the connection.

        Raises:
            OSError: If the socket cannot be shut down
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the socket handle. Safe to call more than once."""
        pass
