"""Remote endpoint and socket kind definitions."""

import ipaddress
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from asyncsocket.errors import InvalidArgumentError

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class SocketKind(Enum):
    """Socket type."""

    STREAM = socket.SOCK_STREAM
    DATAGRAM = socket.SOCK_DGRAM


class ProtocolKind(Enum):
    """Transport protocol."""

    TCP = socket.IPPROTO_TCP
    UDP = socket.IPPROTO_UDP


def parse_kind(kind_type, value):
    """
    Coerce an enum member or its (case-insensitive) name into ``kind_type``.

    Raises:
        InvalidArgumentError: If the value names no member
    """
    if isinstance(value, kind_type):
        return value
    if isinstance(value, str):
        try:
            return kind_type[value.upper()]
        except KeyError:
            pass
    raise InvalidArgumentError(f"Invalid {kind_type.__name__}: {value!r}")


@dataclass(frozen=True)
class Endpoint:
    """
    Remote peer address.

    Only IP literals are accepted; host names are not resolved.
    """

    address: IPAddress
    port: int

    def __post_init__(self):
        if self.address is None:
            raise InvalidArgumentError("address is required")
        if not isinstance(self.address, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
            try:
                parsed = ipaddress.ip_address(self.address)
            except ValueError as e:
                raise InvalidArgumentError(str(e)) from e
            object.__setattr__(self, "address", parsed)
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise InvalidArgumentError(f"port must be an integer, got {self.port!r}")
        if not 0 <= self.port <= 65535:
            raise InvalidArgumentError(f"port out of range: {self.port}")

    @property
    def family(self) -> socket.AddressFamily:
        """Address family matching the address version."""
        if self.address.version == 6:
            return socket.AF_INET6
        return socket.AF_INET

    def as_tuple(self) -> Tuple[str, int]:
        """Address tuple for socket calls."""
        return (str(self.address), self.port)

    def __str__(self) -> str:
        if self.address.version == 6:
            return f"[{self.address}]:{self.port}"
        return f"{self.address}:{self.port}"
