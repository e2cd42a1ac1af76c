"""
Client - Single entry point wiring transport, exchange and discovery.

All three components share the logger passed in here, so a caller can
route every diagnostic of one client to its own sink.
"""

import logging
import socket
import ssl
from typing import List, Optional

from electrum_peers.network.discovery import PeerDiscovery
from electrum_peers.network.exchange import RequestExchanger
from electrum_peers.network.node import NodeDescriptor
from electrum_peers.network.protocol import MAX_RESPONSE_SIZE, RequestEnvelope
from electrum_peers.network.transport import Dialer, TransportSelector
from electrum_peers.utils.logger import get_logger


class ElectrumClient:
    """Connects to Electrum servers, sends requests and fetches peer lists."""

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        dial: Dialer = socket.create_connection,
        tls_context: Optional[ssl.SSLContext] = None,
        max_response_size: int = MAX_RESPONSE_SIZE,
        default_ports: Optional[dict] = None,
    ):
        self.logger = logger or get_logger("client")
        self.selector = TransportSelector(logger=self.logger, dial=dial, tls_context=tls_context)
        self.exchanger = RequestExchanger(
            selector=self.selector,
            logger=self.logger,
            max_response_size=max_response_size,
        )
        self.discovery = PeerDiscovery(
            exchanger=self.exchanger,
            logger=self.logger,
            default_ports=default_ports,
        )

    def connect(self, node: NodeDescriptor, timeout: float) -> socket.socket:
        return self.selector.connect(node, timeout)

    def get_tls_conn(self, node: NodeDescriptor, timeout: float) -> ssl.SSLSocket:
        return self.selector.get_tls_conn(node, timeout)

    def get_tcp_conn(self, node: NodeDescriptor, timeout: float) -> socket.socket:
        return self.selector.get_tcp_conn(node, timeout)

    def send_request(self, request: RequestEnvelope, node: NodeDescriptor, timeout: float) -> bytes:
        return self.exchanger.send_request(request, node, timeout)

    def send_request_bytes(self, request: bytes, node: NodeDescriptor, timeout: float) -> bytes:
        return self.exchanger.send_request_bytes(request, node, timeout)

    def get_peer_info(self, node: NodeDescriptor, request_id: int, timeout: float) -> List[NodeDescriptor]:
        """Ask node for its peers via server.peers.subscribe."""
        return self.discovery.discover_peers(node, request_id, timeout)
