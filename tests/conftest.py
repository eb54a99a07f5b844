"""Shared fixtures: an in-memory transport and loopback echo servers."""

import socket
import threading
from collections import deque

import pytest

from asyncsocket.events import Operation, SocketEvent
from asyncsocket.transports.base import Transport


class FakeTransport(Transport):
    """
    Scripted transport completing every operation on a separate thread.

    Records each issued operation in ``calls`` and, when ``gate`` is set,
    whether the gate was open at the moment the operation was issued.
    """

    def __init__(self):
        self.calls = []
        self.receive_data = deque()
        self.failures = {}
        self.connect_leaves_disconnected = False
        self.shutdown_error = None
        self.shutdown_calls = 0
        self.close_calls = 0
        self.connected = False
        self.closed = False
        self.gate = None
        self.gate_open_at_issue = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def fail_next(self, operation: Operation, error_code: int) -> None:
        self.failures[operation] = error_code

    @property
    def is_connected(self) -> bool:
        return self.connected and not self.closed

    def _issue(self, operation, make_event, callback):
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            if self.gate is not None:
                self.gate_open_at_issue.append(self.gate.is_open)
        error_code = self.failures.pop(operation, 0)

        def complete():
            if error_code:
                event = SocketEvent(operation, error_code=error_code)
            else:
                event = make_event()
            with self._lock:
                self.in_flight -= 1
            callback(event)

        threading.Thread(target=complete, daemon=True).start()

    def connect_async(self, endpoint, callback):
        self.calls.append((Operation.CONNECT, endpoint))

        def make_event():
            self.connected = not self.connect_leaves_disconnected
            return SocketEvent(Operation.CONNECT, remote_endpoint=endpoint)

        self._issue(Operation.CONNECT, make_event, callback)

    def send_async(self, data, callback):
        self.calls.append((Operation.SEND, data))
        self._issue(
            Operation.SEND,
            lambda: SocketEvent(Operation.SEND, buffer=data, bytes_transferred=len(data)),
            callback,
        )

    def send_to_async(self, data, endpoint, callback):
        self.calls.append((Operation.SEND, data, endpoint))
        self._issue(
            Operation.SEND,
            lambda: SocketEvent(
                Operation.SEND,
                buffer=data,
                bytes_transferred=len(data),
                remote_endpoint=endpoint,
            ),
            callback,
        )

    def receive_async(self, buffer, callback):
        self.calls.append((Operation.RECEIVE, len(buffer)))

        def make_event():
            data = self.receive_data.popleft() if self.receive_data else b""
            buffer[: len(data)] = data
            return SocketEvent(Operation.RECEIVE, buffer=buffer, bytes_transferred=len(data))

        self._issue(Operation.RECEIVE, make_event, callback)

    def shutdown(self):
        self.shutdown_calls += 1
        if self.shutdown_error is not None:
            raise self.shutdown_error
        self.connected = False

    def close(self):
        self.close_calls += 1
        self.closed = True

    def operations(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def fake_transport():
    """Create a fresh FakeTransport."""
    return FakeTransport()


def _serve_tcp(server_socket: socket.socket, greeting: bytes, close_on_accept: bool):
    while True:
        try:
            conn, _ = server_socket.accept()
        except OSError:
            return
        with conn:
            if close_on_accept:
                continue
            conn.sendall(greeting)
            while True:
                try:
                    data = conn.recv(4096)
                except OSError:
                    break
                if not data:
                    break
                conn.sendall(data)


def _start_tcp_server(greeting: bytes = b"welcome", close_on_accept: bool = False):
    server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    server_socket.bind(("127.0.0.1", 0))
    server_socket.listen(5)
    thread = threading.Thread(
        target=_serve_tcp,
        args=(server_socket, greeting, close_on_accept),
        daemon=True,
    )
    thread.start()
    return server_socket


@pytest.fixture
def tcp_echo_server():
    """TCP echo server that greets each client with b"welcome" first."""
    server_socket = _start_tcp_server()
    yield server_socket.getsockname()[1]
    server_socket.close()


@pytest.fixture
def tcp_closing_server():
    """TCP server that closes every connection right after accepting it."""
    server_socket = _start_tcp_server(close_on_accept=True)
    yield server_socket.getsockname()[1]
    server_socket.close()


def _start_udp_server():
    server_socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    server_socket.bind(("127.0.0.1", 0))

    def serve():
        while True:
            try:
                data, address = server_socket.recvfrom(4096)
            except OSError:
                return
            server_socket.sendto(data, address)

    threading.Thread(target=serve, daemon=True).start()
    return server_socket


@pytest.fixture
def udp_echo_server():
    """UDP server echoing every datagram back to its sender."""
    server_socket = _start_udp_server()
    yield server_socket.getsockname()[1]
    server_socket.close()


@pytest.fixture
def udp_echo_socket():
    """UDP echo server socket, exposed so a test can send the first datagram."""
    server_socket = _start_udp_server()
    yield server_socket
    server_socket.close()


@pytest.fixture
def refused_port():
    """A loopback port with nothing listening on it."""
    reserved = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    reserved.bind(("127.0.0.1", 0))
    port = reserved.getsockname()[1]
    reserved.close()
    return port


@pytest.fixture
def fake_transport_factory():
    """Return the FakeTransport class for tests needing several instances."""
    return FakeTransport
