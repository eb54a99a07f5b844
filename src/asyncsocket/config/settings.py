"""Client configuration settings."""

from dataclasses import dataclass

from asyncsocket.errors import InvalidArgumentError


@dataclass
class ClientConfig:
    """Socket client configuration."""

    receive_buffer_size: int = 1024

    # Transport worker settings
    worker_thread_name: str = "asyncsocket-transport"
    join_timeout: float = 5.0  # seconds to wait for the worker on close

    def __post_init__(self):
        if self.receive_buffer_size <= 0:
            raise InvalidArgumentError(
                f"receive_buffer_size must be positive, got {self.receive_buffer_size}"
            )
