"""
Request/Response Exchanger - One request, one response, one connection.

Handles:
- Newline framing of a single request/response pair
- A single deadline shared by the write and the read
- Closing the connection exactly once on every exit path

There is no pipelining: a connection carries exactly one request and
is closed once its response line has been read.
"""

import logging
import socket
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from electrum_peers.network.errors import (
    ExchangeTimeout,
    ReadError,
    WriteError,
)
from electrum_peers.network.node import NodeDescriptor
from electrum_peers.network.protocol import (
    LINE_TERMINATOR,
    MAX_RESPONSE_SIZE,
    RequestEnvelope,
)
from electrum_peers.network.transport import TransportSelector, close_quietly
from electrum_peers.utils.logger import get_logger


RECV_CHUNK_SIZE = 4096


class RequestExchanger:
    """
    Sends single JSON-RPC requests and reads back one response line.

    Args:
        selector: Transport selector used by send_request*
        logger: Diagnostics sink
        max_response_size: Upper bound on one response line, in bytes
    """

    def __init__(
        self,
        selector: Optional[TransportSelector] = None,
        logger: Optional[logging.Logger] = None,
        max_response_size: int = MAX_RESPONSE_SIZE,
    ):
        self.logger = logger or get_logger("exchange")
        self.selector = selector or TransportSelector(logger=self.logger)
        self.max_response_size = max_response_size

    @contextmanager
    def _scoped(self, conn, host: str) -> Iterator:
        """Yield conn and close it on the way out, whatever happens."""
        try:
            yield conn
        finally:
            close_quietly(conn, host, self.logger)

    def exchange(self, conn, request_bytes: bytes, timeout: float, host: str = "?") -> bytes:
        """
        Write one request line and read one response line.

        Takes ownership of conn: it is closed before this returns or raises.

        Args:
            conn: Connected socket-like object (sendall/recv/settimeout/close)
            request_bytes: Serialized request, without terminator
            timeout: Seconds allowed for the whole exchange
            host: Used in diagnostics and errors

        Returns:
            The response record, without its terminator

        Raises:
            WriteError, ReadError, ExchangeTimeout
        """
        deadline = time.monotonic() + timeout

        with self._scoped(conn, host):
            self._write(conn, request_bytes + LINE_TERMINATOR, deadline, host)
            return self._read_line(conn, deadline, host)

    def _remaining(self, deadline: float, host: str, phase: str) -> float:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            if phase == "write":
                raise WriteError(host, "timed out before request was sent")
            raise ExchangeTimeout(host, "no response terminator before timeout")
        return remaining

    def _write(self, conn, data: bytes, deadline: float, host: str) -> None:
        try:
            conn.settimeout(self._remaining(deadline, host, "write"))
            conn.sendall(data)
        except OSError as e:
            self.logger.error(f"error sending request to {host}: {e}")
            raise WriteError(host, e) from e

    def _read_line(self, conn, deadline: float, host: str) -> bytes:
        buffer = bytearray()

        while True:
            try:
                conn.settimeout(self._remaining(deadline, host, "read"))
                chunk = conn.recv(RECV_CHUNK_SIZE)
            except socket.timeout as e:
                self.logger.error(f"timed out waiting for response from {host}")
                raise ExchangeTimeout(host, e) from e
            except OSError as e:
                self.logger.error(f"error reading response from {host}: {e}")
                raise ReadError(host, e) from e

            if not chunk:
                self.logger.error(
                    f"{host} closed the connection after {len(buffer)} bytes without a terminator"
                )
                raise ReadError(host, "connection closed before response terminator")

            end = chunk.find(LINE_TERMINATOR)
            if end != -1:
                buffer += chunk[:end]
            else:
                buffer += chunk

            if len(buffer) > self.max_response_size:
                self.logger.error(f"response from {host} exceeds {self.max_response_size} bytes")
                raise ReadError(host, f"response exceeds {self.max_response_size} bytes")

            if end != -1:
                return bytes(buffer)

    def send_request_bytes(self, request_bytes: bytes, node: NodeDescriptor, timeout: float) -> bytes:
        """Connect to node and exchange a pre-serialized request."""
        self.logger.info(f"attempting to connect to {node.host}")
        conn = self.selector.connect(node, timeout)
        return self.exchange(conn, request_bytes, timeout, host=node.host)

    def send_request(self, request: RequestEnvelope, node: NodeDescriptor, timeout: float) -> bytes:
        """Connect to node, send request and return the raw response line."""
        self.logger.info(f"sending request ID: {request.id} to: {node.host}")
        return self.send_request_bytes(request.to_bytes(), node, timeout)
