"""
Network Protocol - JSON-RPC envelopes for the Electrum wire format.

Wire format:
    one JSON document per line, UTF-8, terminated by b"\\n"

Requests carry a method, a parameter list and a numeric id; responses
echo the id and carry either a result or an error object.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from electrum_peers.network.errors import DecodeError


# Protocol constants
JSONRPC_VERSION = "2.0"
PEERS_SUBSCRIBE = "server.peers.subscribe"
LINE_TERMINATOR = b"\n"
MAX_RESPONSE_SIZE = 10 * 1024 * 1024  # 10 MB max response line

# Default ports per transport letter ('t' = TCP, 's' = SSL)
DEFAULT_PORTS: Dict[str, int] = {"t": 50001, "s": 50002}


class RequestEnvelope(BaseModel):
    """A single JSON-RPC request."""
    model_config = ConfigDict(frozen=True)

    method: str = Field(min_length=1)
    params: List[Any] = Field(default_factory=list)
    id: int
    jsonrpc: str = JSONRPC_VERSION

    def to_bytes(self) -> bytes:
        """Serialize to one compact JSON document (no terminator)."""
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "RequestEnvelope":
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise DecodeError(f"invalid request envelope: {e}", data) from e


class RpcErrorObject(BaseModel):
    """JSON-RPC error member."""
    code: int
    message: str
    data: Any = None


class ResponseEnvelope(BaseModel):
    """A single JSON-RPC response."""
    model_config = ConfigDict(frozen=True)

    id: Optional[StrictInt] = None
    result: Any = None
    error: Optional[RpcErrorObject] = None
    jsonrpc: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


def decode_response(data: bytes, expected_id: Optional[int] = None) -> ResponseEnvelope:
    """
    Decode one response line into a ResponseEnvelope.

    Args:
        data: Raw line, with or without the trailing terminator
        expected_id: Id of the request this answers; a mismatch is an error

    Raises:
        DecodeError: if the bytes are not exactly one valid envelope
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError("response is not valid UTF-8", data) from e

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"response is not a single JSON document: {e}", data) from e

    if not isinstance(document, dict):
        raise DecodeError(f"response must be a JSON object, got {type(document).__name__}", data)

    if "result" not in document and "error" not in document:
        raise DecodeError("response has neither result nor error", data)

    try:
        envelope = ResponseEnvelope.model_validate(document)
    except ValidationError as e:
        raise DecodeError(f"invalid response envelope: {e}", data) from e

    if expected_id is not None and envelope.id != expected_id:
        raise DecodeError(
            f"response id {envelope.id} does not match request id {expected_id}", data
        )

    return envelope


def create_peers_subscribe_request(request_id: int) -> RequestEnvelope:
    """Create a server.peers.subscribe request."""
    return RequestEnvelope(method=PEERS_SUBSCRIBE, params=[], id=request_id)
