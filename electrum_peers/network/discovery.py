"""
Peer Discovery - Electrum peer list retrieval and normalization.

Handles:
- Sending server.peers.subscribe to a node
- Decoding the loosely-typed peer list it returns
- Normalizing each entry into a NodeDescriptor

Wire shape of the result (one entry per known peer):
    [[address, host, [feature, ...]], ...]

e.g. ["1.2.3.4", "a.example", ["v1.4", "s50002", "t50001", "p10000"]]

Feature strings are a single letter followed by an optional value:
    t<port>  plaintext TCP port (bare "t" = default port)
    s<port>  TLS port (bare "s" = default port)
    v, p, h, g, ...  protocol version, pruning, other transports: ignored

Entries that fail to parse are dropped; only a result that is not a
list at all fails the call.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from electrum_peers.network.errors import (
    DecodeError,
    ElectrumError,
    RemoteError,
    UnsupportedTransport,
)
from electrum_peers.network.exchange import RequestExchanger
from electrum_peers.network.node import NodeDescriptor
from electrum_peers.network.protocol import (
    DEFAULT_PORTS,
    create_peers_subscribe_request,
    decode_response,
)
from electrum_peers.utils.logger import get_logger
from electrum_peers.utils.validation import validate_features, validate_port


# =============================================================================
# Raw Entries
# =============================================================================

class RawPeerEntry(BaseModel):
    """One untrusted entry of a server.peers.subscribe result."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    address: str = ""
    host: str = ""
    features: List[str] = []

    @model_validator(mode="before")
    @classmethod
    def _from_wire_list(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise ValueError(f"peer entry must have 3 fields, got {len(data)}")
            address, host, features = data
            return {"address": address, "host": host, "features": features}
        return data

    @field_validator("address", "host", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("features", mode="before")
    @classmethod
    def _check_features(cls, value: Any) -> Any:
        if value is None:
            return []
        valid, err = validate_features(value)
        if not valid:
            raise ValueError(err)
        return list(value)


@dataclass(frozen=True)
class PeerCapabilities:
    """Ports recovered from a feature list (0 = not offered)."""
    tcp_port: int = 0
    ssl_port: int = 0


# =============================================================================
# Parsing
# =============================================================================

def parse_features(
    features: Sequence[str],
    default_ports: Optional[dict] = None,
) -> Tuple[Optional[PeerCapabilities], str]:
    """
    Parse a feature list into advertised ports.

    Args:
        features: Feature strings, e.g. ["v1.4", "s50002", "t"]
        default_ports: Ports for bare "t"/"s" (defaults to DEFAULT_PORTS)

    Returns:
        (capabilities, "") on success, (None, reason) on rejection
    """
    defaults = default_ports or DEFAULT_PORTS
    ports = {"t": 0, "s": 0}

    for token in features:
        if not isinstance(token, str) or not token:
            return None, f"empty or non-string feature {token!r}"

        letter, value = token[0].lower(), token[1:]
        if not letter.isalpha():
            return None, f"malformed feature {token!r}"

        if letter not in ports:
            continue

        if value:
            if not (value.isascii() and value.isdigit()):
                return None, f"non-numeric port in feature {token!r}"
            port = int(value)
        else:
            port = defaults[letter]

        valid, err = validate_port(port, f"feature {token!r}")
        if not valid or port == 0:
            return None, err or f"zero port in feature {token!r}"

        if ports[letter] and ports[letter] != port:
            return None, f"conflicting '{letter}' ports {ports[letter]} and {port}"
        ports[letter] = port

    if not ports["t"] and not ports["s"]:
        return None, "no tcp or ssl port advertised"

    return PeerCapabilities(tcp_port=ports["t"], ssl_port=ports["s"]), ""


def parse_peer_entry(
    raw: Any,
    default_ports: Optional[dict] = None,
) -> Tuple[Optional[NodeDescriptor], str]:
    """
    Normalize one raw peer entry.

    Returns:
        (node, "") on success, (None, reason) on rejection
    """
    try:
        entry = raw if isinstance(raw, RawPeerEntry) else RawPeerEntry.model_validate(raw)
    except ValidationError as e:
        return None, f"invalid entry: {e.error_count()} validation error(s)"

    host = entry.host or entry.address
    if not host:
        return None, "address and host are both empty"

    caps, reason = parse_features(entry.features, default_ports)
    if caps is None:
        return None, reason

    try:
        node = NodeDescriptor.from_ports(host, tcp_port=caps.tcp_port, ssl_port=caps.ssl_port)
    except ValueError as e:
        return None, str(e)

    return node, ""


def parse_peers_subscription(
    result: Any,
    logger: Optional[logging.Logger] = None,
    default_ports: Optional[dict] = None,
) -> List[NodeDescriptor]:
    """
    Normalize a server.peers.subscribe result.

    Malformed entries are dropped (logged at debug level).

    Raises:
        DecodeError: if result is not a list
    """
    logger = logger or get_logger("discovery")

    if not isinstance(result, list):
        raise DecodeError(f"peer list must be a JSON array, got {type(result).__name__}")

    peers = []
    for index, raw in enumerate(result):
        node, reason = parse_peer_entry(raw, default_ports)
        if node is None:
            logger.debug(f"dropping peer entry {index}: {reason}")
            continue
        peers.append(node)

    logger.debug(f"parsed {len(peers)} of {len(result)} peer entries")
    return peers


# =============================================================================
# Peer Discovery
# =============================================================================

class PeerDiscovery:
    """
    Asks a node for the peers it knows about.

    One call, one connection, no retries: callers that crawl the
    network decide themselves when and whom to ask again.
    """

    def __init__(
        self,
        exchanger: Optional[RequestExchanger] = None,
        logger: Optional[logging.Logger] = None,
        default_ports: Optional[dict] = None,
    ):
        self.logger = logger or get_logger("discovery")
        self.exchanger = exchanger or RequestExchanger(logger=self.logger)
        self.default_ports = default_ports

    def discover_peers(self, node: NodeDescriptor, request_id: int, timeout: float) -> List[NodeDescriptor]:
        """
        Fetch and normalize the peer list of a node.

        Args:
            node: Node to query
            request_id: JSON-RPC id for the request
            timeout: Seconds allowed for connect and for the exchange

        Returns:
            Peers that parsed successfully (possibly empty)

        Raises:
            UnsupportedTransport: node is an onion address
            ConnectError, ExchangeError: transport failures
            DecodeError: response or peer list is malformed
            RemoteError: server returned a JSON-RPC error
        """
        if node.is_onion:
            self.logger.error(f"failed to connect to {node.host}: tor support not yet implemented")
            raise UnsupportedTransport(node.host)

        request = create_peers_subscribe_request(request_id)
        try:
            response = self.exchanger.send_request(request, node, timeout)
        except ElectrumError as e:
            self.logger.error(f"failed to send peer request ID {request_id} to {node.host}: {e}")
            raise

        try:
            envelope = decode_response(response, expected_id=request_id)
        except DecodeError as e:
            self.logger.error(
                f"error decoding server peer subscription from {node.host} req ID {request_id}: {e}"
            )
            raise

        if envelope.error is not None:
            self.logger.error(
                f"{node.host} rejected peer request ID {request_id}: {envelope.error.message}"
            )
            raise RemoteError(node.host, envelope.error.code, envelope.error.message)

        try:
            peers = parse_peers_subscription(envelope.result, self.logger, self.default_ports)
        except DecodeError as e:
            self.logger.error(
                f"error parsing server peer subscription response from {node.host} for req ID {request_id}: {e}"
            )
            raise

        self.logger.info(f"successfully retrieved {len(peers)} peers from {node.host}")
        return peers
