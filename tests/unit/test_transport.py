"""
Unit tests for TransportSelector.

Tests cover:
1. Onion refusal without network I/O
2. TLS-first selection with no fallback to TCP
3. Plain TCP selection
4. Cleanup of half-open TLS connections
"""

import logging
import ssl

import pytest

from electrum_peers.network.errors import ConnectError, Transport, UnsupportedTransport
from electrum_peers.network.discovery import parse_peer_entry
from electrum_peers.network.node import NodeDescriptor
from electrum_peers.network.transport import TransportSelector, create_tls_context


ONION = NodeDescriptor.from_ports("abcdefghijklmnop.onion", tcp_port=50001, ssl_port=50002)
TLS_NODE = NodeDescriptor.from_ports("a.example", tcp_port=50001, ssl_port=50002)
TCP_NODE = NodeDescriptor.from_ports("b.example", tcp_port=50001)


class TestOnion:
    """Onion nodes are refused before any dial."""

    @pytest.mark.parametrize("method", ["connect", "get_tls_conn", "get_tcp_conn"])
    def test_refused_without_io(self, method, sink, fake_dialer, fake_tls_context):
        dialer = fake_dialer()
        tls = fake_tls_context()
        selector = TransportSelector(logger=sink.logger, dial=dialer, tls_context=tls)

        with pytest.raises(UnsupportedTransport) as exc:
            getattr(selector, method)(ONION, 5.0)

        assert exc.value.transport == Transport.OVERLAY
        assert exc.value.host == ONION.host
        assert dialer.calls == []
        assert tls.wrapped == []
        assert any("tor support" in m for m in sink.messages(logging.ERROR))


class TestTLS:
    """TLS-capable nodes."""

    def test_tls_attempted_first(self, sink, fake_dialer, fake_tls_context):
        dialer = fake_dialer()
        tls = fake_tls_context()
        selector = TransportSelector(logger=sink.logger, dial=dialer, tls_context=tls)

        conn = selector.connect(TLS_NODE, 5.0)

        assert conn is dialer.result
        assert dialer.calls == [(("a.example", 50002), 5.0)]
        assert tls.wrapped == [(dialer.result, "a.example")]

    def test_dial_failure_does_not_fall_back(self, sink, fake_dialer, fake_tls_context):
        dialer = fake_dialer(error=ConnectionRefusedError("refused"))
        selector = TransportSelector(logger=sink.logger, dial=dialer, tls_context=fake_tls_context())

        with pytest.raises(ConnectError) as exc:
            selector.connect(TLS_NODE, 5.0)

        assert exc.value.transport == Transport.ENCRYPTED
        assert exc.value.port == 50002
        assert isinstance(exc.value.cause, ConnectionRefusedError)
        # Only the TLS port was dialed
        assert [addr for addr, _ in dialer.calls] == [("a.example", 50002)]

    def test_handshake_failure_closes_raw_socket(
        self, sink, fake_conn, fake_dialer, fake_tls_context, ssl_error
    ):
        raw = fake_conn()
        selector = TransportSelector(
            logger=sink.logger,
            dial=fake_dialer(result=raw),
            tls_context=fake_tls_context(error=ssl_error),
        )

        with pytest.raises(ConnectError) as exc:
            selector.connect(TLS_NODE, 5.0)

        assert exc.value.transport == Transport.ENCRYPTED
        assert exc.value.cause is ssl_error
        assert raw.close_calls == 1

    def test_close_failure_is_secondary(
        self, sink, failing_close_conn, fake_dialer, fake_tls_context, ssl_error
    ):
        """A failing close is logged; the handshake error is still raised."""
        selector = TransportSelector(
            logger=sink.logger,
            dial=fake_dialer(result=failing_close_conn()),
            tls_context=fake_tls_context(error=ssl_error),
        )

        with pytest.raises(ConnectError) as exc:
            selector.connect(TLS_NODE, 5.0)

        assert exc.value.cause is ssl_error
        assert any("could not close" in m for m in sink.messages(logging.ERROR))

    def test_get_tls_conn_requires_tls_support(self, sink, fake_dialer, fake_tls_context):
        dialer = fake_dialer()
        selector = TransportSelector(logger=sink.logger, dial=dialer, tls_context=fake_tls_context())

        with pytest.raises(UnsupportedTransport) as exc:
            selector.get_tls_conn(TCP_NODE, 5.0)

        assert exc.value.transport == Transport.ENCRYPTED
        assert dialer.calls == []

    def test_default_context_skips_verification(self):
        context = create_tls_context()

        assert context.check_hostname is False
        assert context.verify_mode == ssl.CERT_NONE


class TestTCP:
    """Plain TCP nodes."""

    def test_tcp_selected(self, sink, fake_dialer, fake_tls_context):
        dialer = fake_dialer()
        tls = fake_tls_context()
        selector = TransportSelector(logger=sink.logger, dial=dialer, tls_context=tls)

        conn = selector.connect(TCP_NODE, 2.5)

        assert conn is dialer.result
        assert dialer.calls == [(("b.example", 50001), 2.5)]
        assert tls.wrapped == []
        assert any("successfully established TCP" in m for m in sink.messages(logging.INFO))

    def test_tcp_failure_tagged_plain(self, sink, fake_dialer, fake_tls_context):
        selector = TransportSelector(
            logger=sink.logger,
            dial=fake_dialer(error=TimeoutError("timed out")),
            tls_context=fake_tls_context(),
        )

        with pytest.raises(ConnectError) as exc:
            selector.connect(TCP_NODE, 1.0)

        assert exc.value.transport == Transport.PLAIN
        assert exc.value.host == "b.example"

    def test_zero_port_still_attempted(self, sink, fake_dialer, fake_tls_context):
        dialer = fake_dialer()
        selector = TransportSelector(logger=sink.logger, dial=dialer, tls_context=fake_tls_context())

        selector.connect(NodeDescriptor("c.example"), 1.0)

        assert dialer.calls == [(("c.example", 0), 1.0)]

    @pytest.mark.parametrize("host", ["a" * 64 + ".example", "a..example"])
    def test_unencodable_hostname_is_connect_error(self, sink, host):
        """IDNA failures inside getaddrinfo become a tagged ConnectError."""
        node, _ = parse_peer_entry(["", host, ["t50001"]])
        selector = TransportSelector(logger=sink.logger)

        with pytest.raises(ConnectError) as exc:
            selector.connect(node, 1.0)

        assert exc.value.transport == Transport.PLAIN
        assert isinstance(exc.value.cause, UnicodeError)

    @pytest.mark.parametrize("node, transport", [
        (TCP_NODE, Transport.PLAIN),
        (TLS_NODE, Transport.ENCRYPTED),
    ])
    def test_dial_value_error_wrapped(self, sink, fake_dialer, fake_tls_context, node, transport):
        error = UnicodeError("label empty or too long")
        tls = fake_tls_context()
        selector = TransportSelector(
            logger=sink.logger,
            dial=fake_dialer(error=error),
            tls_context=tls,
        )

        with pytest.raises(ConnectError) as exc:
            selector.connect(node, 1.0)

        assert exc.value.transport == transport
        assert exc.value.cause is error
        assert tls.wrapped == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
