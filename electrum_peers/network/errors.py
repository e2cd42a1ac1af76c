"""
Error taxonomy for the Electrum client.

Every failure the client can surface is one of the classes below, each
carrying structured context (host, transport, underlying cause) so that
callers branch on type rather than on message text.
"""

from enum import Enum
from typing import Any, Optional


class Transport(Enum):
    """Connection method used (or refused) for a node."""
    PLAIN = "tcp"
    ENCRYPTED = "ssl"
    OVERLAY = "tor"


class ElectrumError(Exception):
    """Base class for all client errors."""


class UnsupportedTransport(ElectrumError):
    """The node is only reachable over a transport we do not implement."""

    def __init__(self, host: str, transport: Transport = Transport.OVERLAY, reason: str = ""):
        self.host = host
        self.transport = transport
        self.reason = reason or f"{transport.value} support not implemented"
        super().__init__(f"cannot connect to {host}: {self.reason}")


class ConnectError(ElectrumError):
    """Dialing the node failed."""

    def __init__(self, host: str, port: int, transport: Transport, cause: Optional[BaseException] = None):
        self.host = host
        self.port = port
        self.transport = transport
        self.cause = cause
        super().__init__(
            f"could not establish {transport.value} connection to {host}:{port}: {cause}"
        )


class ExchangeError(ElectrumError):
    """I/O failure after the connection was established."""

    action = "exchange"

    def __init__(self, host: str, cause: Any = None):
        self.host = host
        self.cause = cause
        super().__init__(f"{self.action} failed for {host}: {cause}")


class WriteError(ExchangeError):
    """Sending the request failed."""
    action = "write"


class ReadError(ExchangeError):
    """Reading the response failed or the stream ended early."""
    action = "read"


class ExchangeTimeout(ReadError):
    """No response terminator arrived within the timeout."""
    action = "read (timeout)"


class DecodeError(ElectrumError):
    """Bytes received do not form a well-formed envelope or payload."""

    def __init__(self, reason: str, data: Optional[bytes] = None):
        self.reason = reason
        self.data = data
        super().__init__(f"decode error: {reason}")


class RemoteError(ElectrumError):
    """The server answered with a JSON-RPC error object."""

    def __init__(self, host: str, code: int, message: str):
        self.host = host
        self.code = code
        self.message = message
        super().__init__(f"{host} returned error {code}: {message}")


class CloseError(ElectrumError):
    """Releasing a connection failed. Logged, never raised to callers."""

    def __init__(self, host: str, cause: Optional[BaseException] = None):
        self.host = host
        self.cause = cause
        super().__init__(f"could not close connection to {host}: {cause}")
