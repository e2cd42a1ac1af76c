"""
Shared test doubles for electrum-peers tests.

Connections, dialers and TLS contexts are replaced by in-memory fakes
so transport and exchange logic can be tested without a network.
"""

import itertools
import logging
import ssl

import pytest


class FakeConnection:
    """Socket stand-in that replays canned recv chunks."""

    def __init__(self, chunks=(), send_error=None, recv_error=None):
        self.chunks = list(chunks)
        self.send_error = send_error
        self.recv_error = recv_error
        self.sent = b""
        self.timeouts = []
        self.close_calls = 0

    def settimeout(self, value):
        self.timeouts.append(value)

    def sendall(self, data):
        if self.send_error:
            raise self.send_error
        self.sent += data

    def recv(self, size):
        if self.recv_error:
            raise self.recv_error
        if not self.chunks:
            return b""
        return self.chunks.pop(0)

    def close(self):
        self.close_calls += 1
        if self.close_calls > 1:
            raise OSError("connection already closed")


class FailingCloseConnection(FakeConnection):
    """Connection whose very first close() fails."""

    def close(self):
        self.close_calls += 1
        raise OSError("close failed")


class FakeDialer:
    """socket.create_connection stand-in recording every dial."""

    def __init__(self, result=None, error=None):
        self.result = result if result is not None else FakeConnection()
        self.error = error
        self.calls = []

    def __call__(self, address, timeout=None):
        self.calls.append((address, timeout))
        if self.error:
            raise self.error
        return self.result


class FakeTLSContext:
    """ssl.SSLContext stand-in; wrap_socket returns the raw socket."""

    def __init__(self, error=None):
        self.error = error
        self.wrapped = []

    def wrap_socket(self, sock, server_hostname=None):
        self.wrapped.append((sock, server_hostname))
        if self.error:
            raise self.error
        return sock


class FakeSelector:
    """TransportSelector stand-in handing out one prepared connection."""

    def __init__(self, conn=None, error=None):
        self.conn = conn
        self.error = error
        self.calls = []

    def connect(self, node, timeout):
        self.calls.append((node, timeout))
        if self.error:
            raise self.error
        return self.conn


class CapturingSink:
    """Logger with an in-memory handler."""

    _counter = itertools.count()

    def __init__(self):
        self.records = []
        self.logger = logging.getLogger(f"tests.sink.{next(self._counter)}")
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        handler = logging.Handler()
        handler.emit = self.records.append
        self.logger.addHandler(handler)

    def messages(self, level=None):
        return [
            r.getMessage() for r in self.records
            if level is None or r.levelno == level
        ]


@pytest.fixture
def sink():
    return CapturingSink()


@pytest.fixture
def fake_conn():
    return FakeConnection


@pytest.fixture
def fake_dialer():
    return FakeDialer


@pytest.fixture
def fake_tls_context():
    return FakeTLSContext


@pytest.fixture
def fake_selector():
    return FakeSelector


@pytest.fixture
def failing_close_conn():
    return FailingCloseConnection


@pytest.fixture
def ssl_error():
    return ssl.SSLError("handshake failure")
