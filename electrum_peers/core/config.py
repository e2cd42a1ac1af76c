"""
Client configuration for electrum-peers.

Defaults can be overridden through ELECTRUM_PEERS_* environment
variables, optionally loaded from a .env file.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

from electrum_peers.network.protocol import DEFAULT_PORTS, MAX_RESPONSE_SIZE


ENV_PREFIX = "ELECTRUM_PEERS_"

T = TypeVar("T")


@dataclass
class ClientConfig:
    """Client-wide configuration parameters"""

    # Network
    timeout: float = 10.0  # Seconds, per connect/exchange call
    max_response_size: int = MAX_RESPONSE_SIZE  # Bytes per response line
    default_tcp_port: int = DEFAULT_PORTS["t"]
    default_ssl_port: int = DEFAULT_PORTS["s"]

    # Logging
    log_level: int = logging.INFO
    log_to_file: bool = False
    log_dir: Path = Path("logs")

    def __post_init__(self):
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")
        if self.max_response_size <= 0:
            raise ValueError(f"max_response_size must be > 0, got {self.max_response_size}")


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _parse_level(raw: str) -> int:
    value = raw.strip()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level: {raw!r}")
    return level


def _env(name: str, parse: Callable[[str], T], default: T) -> T:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        return parse(raw)
    except ValueError as e:
        raise ValueError(f"invalid {ENV_PREFIX}{name}: {e}") from e


def load_config(env_file: Optional[str] = None) -> ClientConfig:
    """
    Load configuration from the environment.

    Args:
        env_file: Optional .env file; variables already set in the
            process environment take precedence over it

    Returns:
        ClientConfig instance
    """
    if env_file:
        load_dotenv(env_file, override=False)

    defaults = ClientConfig()
    return ClientConfig(
        timeout=_env("TIMEOUT", float, defaults.timeout),
        max_response_size=_env("MAX_RESPONSE_SIZE", int, defaults.max_response_size),
        default_tcp_port=_env("DEFAULT_TCP_PORT", int, defaults.default_tcp_port),
        default_ssl_port=_env("DEFAULT_SSL_PORT", int, defaults.default_ssl_port),
        log_level=_env("LOG_LEVEL", _parse_level, defaults.log_level),
        log_to_file=_env("LOG_TO_FILE", _parse_bool, defaults.log_to_file),
        log_dir=_env("LOG_DIR", Path, defaults.log_dir),
    )
