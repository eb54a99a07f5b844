"""Example: TCP echo server and AsyncSocketClient."""

import socket
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from asyncsocket import AsyncSocketClient, CallbackObserver


def run_server():
    """Run an echo server that greets each client first."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    server.bind(("127.0.0.1", 8888))
    server.listen(5)
    print("Server listening on 127.0.0.1:8888")
    try:
        while True:
            conn, address = server.accept()
            with conn:
                print(f"Client connected from {address}")
                conn.sendall(b"Hello, Client!")
                while True:
                    data = conn.recv(4096)
                    if not data:
                        break
                    print(f"Received from {address}: {data.decode()}")
                    conn.sendall(data)
    except KeyboardInterrupt:
        print("\nShutting down server...")
    finally:
        server.close()


def run_client():
    """Run the echo client."""
    observer = CallbackObserver(
        on_connected=lambda event: print(f"Connected to {event.remote_endpoint}"),
        on_received=lambda event: print(f"Received: {event.data.decode()}"),
        on_sent=lambda event: print(f"Sent {event.bytes_transferred} bytes"),
        on_disconnected=lambda: print("Disconnected"),
    )
    # connect() returns once the server greeting has been received
    with AsyncSocketClient("127.0.0.1", 8888, observers=[observer]) as client:
        client.send(b"Hello, Server!")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "client":
        run_client()
    else:
        run_server()
