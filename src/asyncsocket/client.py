"""Blocking socket client over an asynchronous transport."""

import errno
import logging
import os
from enum import Enum
from typing import Callable, Iterable, List, Optional, Union

from asyncsocket.config.settings import ClientConfig
from asyncsocket.endpoint import Endpoint, IPAddress, ProtocolKind, SocketKind, parse_kind
from asyncsocket.errors import InvalidArgumentError, TransportError
from asyncsocket.events import SocketEvent
from asyncsocket.gate import CompletionGate
from asyncsocket.handlers.base import SocketObserver
from asyncsocket.transports.asyncio_transport import AsyncioSocketTransport
from asyncsocket.transports.base import CompletionCallback, Transport

logger = logging.getLogger(__name__)


class ClientState(Enum):
    """Client operation state."""

    IDLE = "idle"
    CONNECTING = "connecting"
    SENDING = "sending"
    RECEIVING = "receiving"
    CLOSED = "closed"


class AsyncSocketClient:
    """
    Socket client with a blocking API over an asynchronous transport.

    Each public operation closes the completion gate, issues one transport
    operation and blocks until the transport's completion callback reopens
    the gate. At most one operation is in flight per instance; all of them
    are serialized through the gate.

    Successful connect and send calls are each followed by exactly one
    receive, so they return only after that receive has completed too.
    A receive never re-arms itself: when no further send is issued the
    client stops reading.

    Any failed completion tears the client down and raises TransportError.
    The instance cannot be reused afterwards, nor after disconnect().
    """

    def __init__(
        self,
        address: Union[IPAddress, str],
        port: int,
        socket_kind: Union[SocketKind, str] = SocketKind.STREAM,
        protocol_kind: Union[ProtocolKind, str] = ProtocolKind.TCP,
        config: Optional[ClientConfig] = None,
        observers: Iterable[SocketObserver] = (),
        transport: Optional[Transport] = None,
    ):
        """
        Initialize the client. No network I/O happens here.

        Args:
            address: Remote IP address (no name resolution)
            port: Remote port
            socket_kind: Stream or datagram socket
            protocol_kind: TCP or UDP
            config: Optional ClientConfig, defaults are used if None
            observers: Observers to subscribe right away
            transport: Optional transport instance. If None, an
                      AsyncioSocketTransport is opened for the endpoint.

        Raises:
            InvalidArgumentError: If address is None or any argument is invalid
            TransportError: If the socket cannot be opened
        """
        if address is None:
            raise InvalidArgumentError("address is required")

        self.config = config if config is not None else ClientConfig()
        self._endpoint = Endpoint(address, port)
        self._socket_kind = parse_kind(SocketKind, socket_kind)
        self._protocol_kind = parse_kind(ProtocolKind, protocol_kind)
        self._observers: List[SocketObserver] = list(observers)
        self._gate = CompletionGate()
        self._state = ClientState.IDLE

        if transport is None:
            try:
                transport = AsyncioSocketTransport(
                    self._endpoint.family,
                    self._socket_kind,
                    self._protocol_kind,
                    thread_name=self.config.worker_thread_name,
                    join_timeout=self.config.join_timeout,
                )
            except OSError as e:
                raise TransportError(e.errno or errno.EINVAL, e.strerror) from e
        self._transport = transport

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def socket_kind(self) -> SocketKind:
        return self._socket_kind

    @property
    def protocol_kind(self) -> ProtocolKind:
        return self._protocol_kind

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def gate(self) -> CompletionGate:
        """The completion gate, exposed for instrumentation."""
        return self._gate

    @property
    def is_connected(self) -> bool:
        return self._state is not ClientState.CLOSED and self._transport.is_connected

    def subscribe(self, observer: SocketObserver) -> None:
        """
        Add an observer. Observers fire in subscription order.

        Args:
            observer: Observer to add
        """
        self._observers.append(observer)

    def unsubscribe(self, observer: SocketObserver) -> None:
        """
        Remove an observer. Unknown observers are ignored.

        Args:
            observer: Observer to remove
        """
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify(self, hook: str, *args) -> None:
        for observer in list(self._observers):
            getattr(observer, hook)(*args)

    def _ensure_open(self) -> None:
        if self._state is ClientState.CLOSED:
            raise TransportError(errno.EBADF, "Client is closed")

    def _run(
        self, state: ClientState, issue: Callable[[CompletionCallback], None]
    ) -> SocketEvent:
        """
        Issue one transport operation and block until it completes.

        Args:
            state: State to hold while the operation is in flight
            issue: Starts the operation, given the completion callback

        Returns:
            The completion event
        """
        self._gate.close()
        previous, self._state = self._state, state
        try:
            issue(self._gate.open)
        except OSError as e:
            self._gate.abandon()
            self._fail(e.errno or errno.EIO)
        except BaseException:
            self._gate.abandon()
            self._state = previous
            raise
        event = self._gate.wait()
        if self._state is state:
            self._state = ClientState.IDLE
        return event

    def _release(self) -> None:
        self._state = ClientState.CLOSED
        self._transport.close()

    def _fail(self, error_code: int) -> None:
        """
        Tear down after a failed operation and raise.

        Shutdown errors raised by disconnect() take precedence.

        Raises:
            TransportError: Always
        """
        logger.warning(
            "Transport error on %s: [Errno %d] %s, tearing down",
            self._endpoint,
            error_code,
            os.strerror(error_code),
        )
        try:
            self.disconnect()
        finally:
            self._release()
        raise TransportError(error_code)

    def _receive(self) -> None:
        """Run one receive cycle."""
        buffer = bytearray(self.config.receive_buffer_size)
        event = self._run(
            ClientState.RECEIVING,
            lambda done: self._transport.receive_async(buffer, done),
        )
        if event.succeeded:
            logger.debug("Received %d bytes from %s", event.bytes_transferred, self._endpoint)
        else:
            logger.debug(
                "Receive from %s failed: [Errno %d]", self._endpoint, event.error_code
            )
        self._notify("on_received", event)
        if not event.succeeded:
            self._fail(event.error_code)

    def connect(self) -> None:
        """
        Connect to the endpoint and complete the first receive.

        Raises:
            TransportError: If the client is closed or already connected, or
                           if the connect or the first receive fails
            OperationInProgressError: If another call is in progress
        """
        with self._gate.hold():
            self._ensure_open()
            if self.is_connected:
                raise TransportError(errno.EISCONN)

            logger.info("Connecting to %s", self._endpoint)
            event = self._run(
                ClientState.CONNECTING,
                lambda done: self._transport.connect_async(self._endpoint, done),
            )
            if not event.succeeded:
                self._fail(event.error_code)
            if not self._transport.is_connected:
                self._fail(errno.ENOTCONN)

            logger.info("Connected to %s", self._endpoint)
            self._notify("on_connected", event)
            self._receive()

    def disconnect(self) -> None:
        """
        Shut the connection down and release the socket.

        Does nothing unless connected. on_disconnected fires even when the
        shutdown fails.

        Raises:
            TransportError: If the shutdown fails
            OperationInProgressError: If another call is in progress
        """
        if not self.is_connected:
            return

        with self._gate.hold():
            logger.info("Disconnecting from %s", self._endpoint)
            try:
                self._transport.shutdown()
            except OSError as e:
                raise TransportError(e.errno or errno.EIO, e.strerror) from e
            finally:
                self._release()
                self._notify("on_disconnected")

    def send(self, buffer: Union[bytes, bytearray, memoryview]) -> None:
        """
        Send buffer and complete one receive.

        UDP clients send to the endpoint and need no prior connect.

        Args:
            buffer: Bytes to send

        Raises:
            InvalidArgumentError: If buffer is None or not bytes-like
            TransportError: If a TCP client is not connected, the client is
                           closed, or the send or the receive fails
            OperationInProgressError: If another call is in progress
        """
        if buffer is None:
            raise InvalidArgumentError("buffer is required")
        if not isinstance(buffer, (bytes, bytearray, memoryview)):
            raise InvalidArgumentError(
                f"buffer must be bytes-like, got {type(buffer).__name__}"
            )
        with self._gate.hold():
            self._ensure_open()
            connectionless = self._protocol_kind is ProtocolKind.UDP
            if not connectionless and not self.is_connected:
                raise TransportError(errno.ENOTCONN)

            data = bytes(buffer)
            if connectionless:
                event = self._run(
                    ClientState.SENDING,
                    lambda done: self._transport.send_to_async(
                        data, self._endpoint, done
                    ),
                )
            else:
                event = self._run(
                    ClientState.SENDING,
                    lambda done: self._transport.send_async(data, done),
                )

            self._notify("on_sent", event)
            if not event.succeeded:
                self._fail(event.error_code)
            self._receive()

    def close(self) -> None:
        """
        Disconnect if connected and release the socket in any case.

        Raises:
            OperationInProgressError: If another call is in progress
        """
        with self._gate.hold():
            try:
                self.disconnect()
            finally:
                self._release()

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
