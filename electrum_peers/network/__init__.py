"""
Electrum Network Module - transport, request exchange and peer discovery.

Provides one-shot JSON-RPC calls against Electrum servers and the
server.peers.subscribe crawl step.
"""

from electrum_peers.network.errors import (
    ElectrumError,
    UnsupportedTransport,
    ConnectError,
    ExchangeError,
    WriteError,
    ReadError,
    ExchangeTimeout,
    DecodeError,
    RemoteError,
    CloseError,
    Transport,
)
from electrum_peers.network.node import NodeDescriptor
from electrum_peers.network.protocol import (
    RequestEnvelope,
    ResponseEnvelope,
    RpcErrorObject,
    PEERS_SUBSCRIBE,
    DEFAULT_PORTS,
    create_peers_subscribe_request,
    decode_response,
)
from electrum_peers.network.transport import TransportSelector, create_tls_context
from electrum_peers.network.exchange import RequestExchanger
from electrum_peers.network.discovery import (
    PeerDiscovery,
    PeerCapabilities,
    RawPeerEntry,
    parse_features,
    parse_peer_entry,
    parse_peers_subscription,
)
from electrum_peers.network.client import ElectrumClient

__all__ = [
    # Errors
    "ElectrumError",
    "UnsupportedTransport",
    "ConnectError",
    "ExchangeError",
    "WriteError",
    "ReadError",
    "ExchangeTimeout",
    "DecodeError",
    "RemoteError",
    "CloseError",
    "Transport",
    # Node
    "NodeDescriptor",
    # Protocol
    "RequestEnvelope",
    "ResponseEnvelope",
    "RpcErrorObject",
    "PEERS_SUBSCRIBE",
    "DEFAULT_PORTS",
    "create_peers_subscribe_request",
    "decode_response",
    # Transport / exchange
    "TransportSelector",
    "create_tls_context",
    "RequestExchanger",
    # Discovery
    "PeerDiscovery",
    "PeerCapabilities",
    "RawPeerEntry",
    "parse_features",
    "parse_peer_entry",
    "parse_peers_subscription",
    # Client
    "ElectrumClient",
]
