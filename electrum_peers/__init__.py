"""
electrum-peers

A client for Electrum-style line-delimited JSON-RPC servers:
- Transport selection (TLS, plain TCP; onion refused)
- Single-shot request/response exchange
- Peer discovery via server.peers.subscribe
"""

__version__ = "0.1.0"
