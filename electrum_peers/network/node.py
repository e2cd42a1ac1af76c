"""
Node - Immutable description of a remote Electrum server.

A NodeDescriptor says where a server lives and which transports it
advertises. It holds no sockets; connections are opened per call by
the TransportSelector.
"""

from dataclasses import dataclass
from typing import Tuple

from electrum_peers.utils.validation import validate_host, validate_port


ONION_SUFFIX = ".onion"


@dataclass(frozen=True)
class NodeDescriptor:
    """
    A remote endpoint and its advertised transports.

    Attributes:
        host: DNS name, IPv4/IPv6 literal or onion address
        tcp_port: Plaintext port (0 = not offered)
        ssl_port: TLS port (0 = not offered)
        supports_tls: Whether the node accepts TLS on ssl_port
    """
    host: str
    tcp_port: int = 0
    ssl_port: int = 0
    supports_tls: bool = False

    def __post_init__(self):
        for valid, err in (
            validate_host(self.host),
            validate_port(self.tcp_port, "tcp_port"),
            validate_port(self.ssl_port, "ssl_port"),
        ):
            if not valid:
                raise ValueError(err)

        if self.supports_tls and self.ssl_port == 0:
            raise ValueError(f"{self.host} claims TLS support without an ssl_port")

    @classmethod
    def from_ports(cls, host: str, tcp_port: int = 0, ssl_port: int = 0) -> "NodeDescriptor":
        """Build a descriptor, deriving TLS support from the TLS port."""
        return cls(
            host=host,
            tcp_port=tcp_port,
            ssl_port=ssl_port,
            supports_tls=ssl_port != 0,
        )

    @property
    def is_onion(self) -> bool:
        return self.host.lower().rstrip(".").endswith(ONION_SUFFIX)

    @property
    def tcp_address(self) -> Tuple[str, int]:
        return (self.host, self.tcp_port)

    @property
    def ssl_address(self) -> Tuple[str, int]:
        return (self.host, self.ssl_port)

    def __str__(self) -> str:
        return self.host
