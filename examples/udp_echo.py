"""Example: UDP echo server and AsyncSocketClient."""

import socket
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from asyncsocket import AsyncSocketClient, ProtocolKind, SocketKind, SocketObserver


class PrintingObserver(SocketObserver):
    """Print sent and received datagrams."""

    def on_sent(self, event):
        print(f"Sent to {event.remote_endpoint}: {event.data.decode()}")

    def on_received(self, event):
        print(f"Received from {event.remote_endpoint}: {event.data.decode()}")


def run_server():
    """Run the UDP echo server."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 9999))
    print("UDP server listening on 127.0.0.1:9999")
    try:
        while True:
            data, addr = sock.recvfrom(4096)
            print(f"Received from {addr}: {data.decode()}")
            sock.sendto(data, addr)
    except KeyboardInterrupt:
        print("\nShutting down server...")
    finally:
        sock.close()


def run_client():
    """Run the UDP echo client. No connect is needed for datagrams."""
    client = AsyncSocketClient(
        "127.0.0.1",
        9999,
        SocketKind.DATAGRAM,
        ProtocolKind.UDP,
        observers=[PrintingObserver()],
    )
    try:
        client.send(b"Hello, UDP Server!")
    finally:
        client.close()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "client":
        run_client()
    else:
        run_server()
