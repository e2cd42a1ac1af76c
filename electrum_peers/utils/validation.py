"""
Input Validation - Sanitization of untrusted node and peer data.

Peer lists come from arbitrary servers on the network, so every host,
port and feature list is checked before it becomes a NodeDescriptor.
"""

import re
from typing import Any, Tuple

# =============================================================================
# Constants
# =============================================================================

MAX_HOST_LENGTH = 255
MAX_FEATURES = 64
MAX_FEATURE_LENGTH = 64

MIN_PORT = 0  # 0 means "not offered"
MAX_PORT = 65535

_WHITESPACE = re.compile(r"\s")


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int,
    max_val: int,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    # bool is an int subclass; True is not a port
    if not isinstance(value, int) or isinstance(value, bool):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_port(value: Any, name: str = "port") -> Tuple[bool, str]:
    """Validate a TCP port (0 allowed, meaning not offered)."""
    return validate_integer(value, name, MIN_PORT, MAX_PORT)


def validate_host(value: Any, name: str = "host") -> Tuple[bool, str]:
    """
    Validate a host identifier.

    Accepts DNS names, IPv4/IPv6 literals and onion addresses alike;
    only emptiness, length and embedded whitespace are rejected.
    """
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    if not value:
        return False, f"{name} must not be empty"

    if len(value) > MAX_HOST_LENGTH:
        return False, f"{name} exceeds max length {MAX_HOST_LENGTH}"

    if _WHITESPACE.search(value):
        return False, f"{name} must not contain whitespace"

    return True, ""


def validate_features(value: Any, name: str = "features") -> Tuple[bool, str]:
    """Validate the shape of a peer feature list (not its contents)."""
    if not isinstance(value, (list, tuple)):
        return False, f"{name} must be list/tuple, got {type(value).__name__}"

    if len(value) > MAX_FEATURES:
        return False, f"{name} exceeds max length {MAX_FEATURES}, got {len(value)}"

    for token in value:
        if not isinstance(token, str):
            return False, f"{name} entries must be str, got {type(token).__name__}"
        if len(token) > MAX_FEATURE_LENGTH:
            return False, f"{name} entry exceeds max length {MAX_FEATURE_LENGTH}"

    return True, ""


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    "validate_integer",
    "validate_port",
    "validate_host",
    "validate_features",
    "MAX_HOST_LENGTH",
    "MAX_FEATURES",
    "MAX_FEATURE_LENGTH",
    "MIN_PORT",
    "MAX_PORT",
]
