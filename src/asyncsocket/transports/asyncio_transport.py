"""Asyncio-backed socket transport running on a worker thread."""

import asyncio
import concurrent.futures
import errno
import functools
import logging
import socket
import threading
from typing import Any, Coroutine, Optional

from asyncsocket.endpoint import Endpoint, ProtocolKind, SocketKind
from asyncsocket.events import Operation, SocketEvent
from asyncsocket.transports.base import CompletionCallback, Transport

logger = logging.getLogger(__name__)


class AsyncioSocketTransport(Transport):
    """
    Non-blocking socket driven by a private asyncio event loop.

    The loop runs in a daemon thread that is started on the first operation.
    Completion callbacks are invoked on that thread.
    """

    def __init__(
        self,
        family: socket.AddressFamily,
        socket_kind: SocketKind,
        protocol_kind: ProtocolKind,
        thread_name: str = "asyncsocket-transport",
        join_timeout: float = 5.0,
    ):
        """
        Initialize transport and open its socket.

        Args:
            family: Address family of the remote endpoint
            socket_kind: Stream or datagram socket
            protocol_kind: TCP or UDP
            thread_name: Name of the worker thread
            join_timeout: Seconds to wait for the worker thread on close

        Raises:
            OSError: If the socket cannot be created
        """
        self.socket_kind = socket_kind
        self.protocol_kind = protocol_kind
        self.thread_name = thread_name
        self.join_timeout = join_timeout
        self.socket = socket.socket(family, socket_kind.value, protocol_kind.value)
        self.socket.setblocking(False)
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._closed = False

    @property
    def is_connected(self) -> bool:
        if self._closed:
            return False
        try:
            self.socket.getpeername()
        except OSError:
            return False
        return True

    def _run_loop(self) -> None:
        """Run the event loop until close() stops it, then close the socket."""
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            # Cancelled operations still report through their callbacks
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            if pending:
                self._loop.run_until_complete(
                    asyncio.gather(*pending, return_exceptions=True)
                )
            self._loop.close()
            self.socket.close()

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._closed:
                raise OSError(errno.EBADF, "Transport is closed")
            if self._loop is None:
                self._loop = asyncio.new_event_loop()
                self._thread = threading.Thread(
                    target=self._run_loop, name=self.thread_name, daemon=True
                )
                self._thread.start()
            return self._loop

    def _on_done(
        self,
        operation: Operation,
        callback: CompletionCallback,
        endpoint: Optional[Endpoint],
        future: concurrent.futures.Future,
    ) -> None:
        """Turn a finished operation into a SocketEvent and report it."""
        if future.cancelled():
            event = SocketEvent(operation, error_code=errno.ECANCELED, remote_endpoint=endpoint)
        elif future.exception() is None:
            event = future.result()
        else:
            error = future.exception()
            if isinstance(error, OSError):
                logger.debug("%s failed: %s", operation.value, error)
                error_code = error.errno or errno.EIO
            else:
                logger.error("%s raised %r", operation.value, error)
                error_code = errno.EIO
            event = SocketEvent(operation, error_code=error_code, remote_endpoint=endpoint)
        callback(event)

    def _submit(
        self,
        operation: Operation,
        pending: Coroutine[Any, Any, SocketEvent],
        callback: CompletionCallback,
        endpoint: Optional[Endpoint] = None,
    ) -> None:
        try:
            loop = self._ensure_loop()
        except OSError:
            pending.close()
            raise
        future = asyncio.run_coroutine_threadsafe(pending, loop)
        future.add_done_callback(
            functools.partial(self._on_done, operation, callback, endpoint)
        )

    async def _connect(self, endpoint: Endpoint) -> SocketEvent:
        await asyncio.get_running_loop().sock_connect(self.socket, endpoint.as_tuple())
        return SocketEvent(Operation.CONNECT, remote_endpoint=endpoint)

    async def _send(self, data: bytes) -> SocketEvent:
        await asyncio.get_running_loop().sock_sendall(self.socket, data)
        return SocketEvent(Operation.SEND, buffer=data, bytes_transferred=len(data))

    async def _send_to(self, data: bytes, endpoint: Endpoint) -> SocketEvent:
        sent = await asyncio.get_running_loop().sock_sendto(
            self.socket, data, endpoint.as_tuple()
        )
        return SocketEvent(
            Operation.SEND, buffer=data, bytes_transferred=sent, remote_endpoint=endpoint
        )

    async def _receive(self, buffer: bytearray) -> SocketEvent:
        loop = asyncio.get_running_loop()
        if self.socket_kind is SocketKind.DATAGRAM:
            received, address = await loop.sock_recvfrom_into(self.socket, buffer)
            return SocketEvent(
                Operation.RECEIVE,
                buffer=buffer,
                bytes_transferred=received,
                remote_endpoint=Endpoint(address[0], address[1]),
            )
        received = await loop.sock_recv_into(self.socket, buffer)
        return SocketEvent(Operation.RECEIVE, buffer=buffer, bytes_transferred=received)

    def connect_async(self, endpoint: Endpoint, callback: CompletionCallback) -> None:
        logger.debug("Connecting to %s", endpoint)
        self._submit(Operation.CONNECT, self._connect(endpoint), callback, endpoint)

    def send_async(self, data: bytes, callback: CompletionCallback) -> None:
        logger.debug("Sending %d bytes", len(data))
        self._submit(Operation.SEND, self._send(data), callback)

    def send_to_async(
        self, data: bytes, endpoint: Endpoint, callback: CompletionCallback
    ) -> None:
        logger.debug("Sending %d bytes to %s", len(data), endpoint)
        self._submit(
            Operation.SEND, self._send_to(data, endpoint), callback, endpoint
        )

    def receive_async(self, buffer: bytearray, callback: CompletionCallback) -> None:
        logger.debug("Receiving up to %d bytes", len(buffer))
        self._submit(Operation.RECEIVE, self._receive(buffer), callback)

    def shutdown(self) -> None:
        self.socket.shutdown(socket.SHUT_RDWR)

    def close(self) -> None:
        """
        Stop the worker thread and close the socket.

        Once the loop has started, the socket is closed by the worker thread
        after its pending operations are cancelled. If the worker does not
        stop within join_timeout, the socket is left to it.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            loop, thread = self._loop, self._thread
        if loop is None:
            self.socket.close()
            logger.debug("Transport closed")
            return

        loop.call_soon_threadsafe(loop.stop)
        if thread is threading.current_thread():
            return
        thread.join(self.join_timeout)
        if thread.is_alive():
            logger.warning(
                "Worker thread %s still running after %.1fs, socket left open",
                thread.name,
                self.join_timeout,
            )
        else:
            logger.debug("Transport closed")
