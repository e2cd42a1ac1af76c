"""
Transport Selector - Picks one connection method for a node.

Order (first applicable wins, no fallback):
1. Onion host  -> refused (UnsupportedTransport), no network I/O
2. TLS offered -> TLS to host:ssl_port
3. Otherwise   -> plain TCP to host:tcp_port

Electrum servers mostly use self-signed certificates, so the TLS
context skips chain and hostname verification.
"""

import logging
import socket
import ssl
from typing import Callable, Optional

from electrum_peers.network.errors import (
    CloseError,
    ConnectError,
    Transport,
    UnsupportedTransport,
)
from electrum_peers.network.node import NodeDescriptor
from electrum_peers.utils.logger import get_logger


Dialer = Callable[..., socket.socket]


def create_tls_context() -> ssl.SSLContext:
    """TLS client context that accepts any server certificate."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def close_quietly(conn, host: str, logger: logging.Logger) -> None:
    """Close conn; a failure is logged as a CloseError and swallowed."""
    try:
        conn.close()
    except OSError as e:
        logger.error(str(CloseError(host, e)))


class TransportSelector:
    """
    Opens a connection to a node using the best available transport.

    Args:
        logger: Diagnostics sink
        dial: socket.create_connection-compatible callable
        tls_context: Context used to wrap TLS connections
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        dial: Dialer = socket.create_connection,
        tls_context: Optional[ssl.SSLContext] = None,
    ):
        self.logger = logger or get_logger("transport")
        self.dial = dial
        self.tls_context = tls_context or create_tls_context()

    def connect(self, node: NodeDescriptor, timeout: float) -> socket.socket:
        """
        Connect to a node: onion refused, then TLS, then TCP.

        Raises:
            UnsupportedTransport: node is an onion address
            ConnectError: the chosen transport failed
        """
        self._refuse_onion(node)

        if node.supports_tls:
            self.logger.info(f"{node.host} supports TLS, attempting TLS connection")
            return self.get_tls_conn(node, timeout)

        self.logger.info(f"{node.host} supports TCP, attempting TCP connection")
        return self.get_tcp_conn(node, timeout)

    def get_tls_conn(self, node: NodeDescriptor, timeout: float) -> ssl.SSLSocket:
        """Establish a TLS connection to node.ssl_port."""
        self._refuse_onion(node)
        if not node.supports_tls:
            self.logger.error(f"{node.host} does not support TLS, not attempting to connect")
            raise UnsupportedTransport(node.host, Transport.ENCRYPTED, "node does not support SSL/TLS")

        host, port = node.ssl_address
        # Unencodable hostnames (IDNA) surface as ValueError from getaddrinfo
        try:
            raw = self.dial((host, port), timeout=timeout)
        except (OSError, ValueError) as e:
            self.logger.error(f"error establishing TLS connection to {host}:{port}: {e}")
            raise ConnectError(host, port, Transport.ENCRYPTED, e) from e

        try:
            conn = self.tls_context.wrap_socket(raw, server_hostname=host)
        except (OSError, ValueError) as e:
            # TCP is up but the handshake failed: release the raw socket
            self.logger.error(f"TLS handshake with {host}:{port} failed: {e}")
            close_quietly(raw, host, self.logger)
            raise ConnectError(host, port, Transport.ENCRYPTED, e) from e

        self.logger.info(f"successfully established TLS connection to {host}:{port}")
        return conn

    def get_tcp_conn(self, node: NodeDescriptor, timeout: float) -> socket.socket:
        """Establish a plain TCP connection to node.tcp_port."""
        self._refuse_onion(node)

        host, port = node.tcp_address
        self.logger.info(f"establishing TCP connection to {host}:{port}")
        try:
            conn = self.dial((host, port), timeout=timeout)
        except (OSError, ValueError) as e:
            self.logger.error(f"could not establish TCP connection to {host}:{port}: {e}")
            raise ConnectError(host, port, Transport.PLAIN, e) from e

        self.logger.info(f"successfully established TCP connection to {host}:{port}")
        return conn

    def _refuse_onion(self, node: NodeDescriptor) -> None:
        if node.is_onion:
            self.logger.error(f"failed to connect to {node.host}: tor support not yet implemented")
            raise UnsupportedTransport(node.host)
