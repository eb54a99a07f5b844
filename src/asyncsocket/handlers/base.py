"""Observer interfaces for client events."""

from typing import Callable, Optional

from asyncsocket.events import SocketEvent


class SocketObserver:
    """
    Base class for client observers.

    All hooks default to doing nothing; override the ones you need.
    Return values are ignored.
    """

    def on_connected(self, event: SocketEvent) -> None:
        """
        Called when the connect operation succeeded.

        Args:
            event: Connect completion
        """
        pass

    def on_disconnected(self) -> None:
        """Called once when the client disconnects."""
        pass

    def on_received(self, event: SocketEvent) -> None:
        """
        Called when a receive operation completed.

        A zero-length successful receive on a stream means the peer closed.

        Args:
            event: Receive completion, data in ``event.data``
        """
        pass

    def on_sent(self, event: SocketEvent) -> None:
        """
        Called when a send operation completed, successfully or not.

        Args:
            event: Send completion
        """
        pass


class CallbackObserver(SocketObserver):
    """Observer built from optional plain callables."""

    def __init__(
        self,
        on_connected: Optional[Callable[[SocketEvent], None]] = None,
        on_disconnected: Optional[Callable[[], None]] = None,
        on_received: Optional[Callable[[SocketEvent], None]] = None,
        on_sent: Optional[Callable[[SocketEvent], None]] = None,
    ):
        self._on_connected = on_connected
        self._on_disconnected = on_disconnected
        self._on_received = on_received
        self._on_sent = on_sent

    def on_connected(self, event: SocketEvent) -> None:
        if self._on_connected:
            self._on_connected(event)

    def on_disconnected(self) -> None:
        if self._on_disconnected:
            self._on_disconnected()

    def on_received(self, event: SocketEvent) -> None:
        if self._on_received:
            self._on_received(event)

    def on_sent(self, event: SocketEvent) -> None:
        if self._on_sent:
            self._on_sent(event)
