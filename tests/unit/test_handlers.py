"""Unit tests for handlers.base module."""

from unittest.mock import Mock

from asyncsocket.events import Operation, SocketEvent
from asyncsocket.handlers.base import CallbackObserver, SocketObserver


class RecordingObserver(SocketObserver):
    """Concrete observer recording every notification."""

    def __init__(self):
        self.events = []

    def on_connected(self, event):
        self.events.append(("connected", event))

    def on_received(self, event):
        self.events.append(("received", event))


class TestSocketObserver:
    """Test suite for SocketObserver base class."""

    def test_base_hooks_do_nothing(self):
        """Test all base hooks can be called and return None."""
        observer = SocketObserver()
        event = SocketEvent(Operation.SEND)

        assert observer.on_connected(event) is None
        assert observer.on_disconnected() is None
        assert observer.on_received(event) is None
        assert observer.on_sent(event) is None

    def test_partial_override(self):
        """Test subclass overriding only some hooks."""
        observer = RecordingObserver()
        received = SocketEvent(Operation.RECEIVE, buffer=b"hi", bytes_transferred=2)

        observer.on_received(received)
        observer.on_sent(SocketEvent(Operation.SEND))
        observer.on_disconnected()

        assert observer.events == [("received", received)]


class TestCallbackObserver:
    """Test suite for CallbackObserver."""

    def test_callbacks_invoked(self):
        """Test each hook forwards to its callable."""
        on_connected, on_disconnected = Mock(), Mock()
        on_received, on_sent = Mock(), Mock()
        observer = CallbackObserver(
            on_connected=on_connected,
            on_disconnected=on_disconnected,
            on_received=on_received,
            on_sent=on_sent,
        )
        event = SocketEvent(Operation.CONNECT)

        observer.on_connected(event)
        observer.on_disconnected()
        observer.on_received(event)
        observer.on_sent(event)

        on_connected.assert_called_once_with(event)
        on_disconnected.assert_called_once_with()
        on_received.assert_called_once_with(event)
        on_sent.assert_called_once_with(event)

    def test_missing_callbacks(self):
        """Test hooks without a callable do nothing."""
        observer = CallbackObserver()

        observer.on_connected(SocketEvent(Operation.CONNECT))  # Should not raise
        observer.on_disconnected()

    def test_is_socket_observer(self):
        """Test CallbackObserver is a SocketObserver."""
        assert isinstance(CallbackObserver(), SocketObserver)
