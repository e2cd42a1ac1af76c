"""
Unit tests for configuration loading and logging setup.
"""

import logging
import os
from pathlib import Path

import pytest

from electrum_peers.core.config import ClientConfig, load_config
from electrum_peers.utils.logger import ElectrumLogger, get_logger, setup_logging


ENV_VARS = [
    "ELECTRUM_PEERS_TIMEOUT",
    "ELECTRUM_PEERS_MAX_RESPONSE_SIZE",
    "ELECTRUM_PEERS_DEFAULT_TCP_PORT",
    "ELECTRUM_PEERS_DEFAULT_SSL_PORT",
    "ELECTRUM_PEERS_LOG_LEVEL",
    "ELECTRUM_PEERS_LOG_TO_FILE",
    "ELECTRUM_PEERS_LOG_DIR",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # load_dotenv writes to os.environ; give each test a private copy
    environ = {k: v for k, v in os.environ.items() if k not in ENV_VARS}
    monkeypatch.setattr(os, "environ", environ)


class TestClientConfig:
    """Tests for ClientConfig and load_config."""

    def test_defaults(self):
        config = load_config()

        assert config.timeout == 10.0
        assert config.default_tcp_port == 50001
        assert config.default_ssl_port == 50002
        assert config.log_level == logging.INFO
        assert config.log_to_file is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("ELECTRUM_PEERS_TIMEOUT", "2.5")
        monkeypatch.setenv("ELECTRUM_PEERS_DEFAULT_TCP_PORT", "51001")
        monkeypatch.setenv("ELECTRUM_PEERS_LOG_LEVEL", "debug")
        monkeypatch.setenv("ELECTRUM_PEERS_LOG_TO_FILE", "yes")
        monkeypatch.setenv("ELECTRUM_PEERS_LOG_DIR", "/tmp/electrum-logs")

        config = load_config()

        assert config.timeout == 2.5
        assert config.default_tcp_port == 51001
        assert config.log_level == logging.DEBUG
        assert config.log_to_file is True
        assert config.log_dir == Path("/tmp/electrum-logs")

    def test_env_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("ELECTRUM_PEERS_TIMEOUT=4\nELECTRUM_PEERS_MAX_RESPONSE_SIZE=1024\n")

        config = load_config(str(env_file))

        assert config.timeout == 4.0
        assert config.max_response_size == 1024

    def test_process_env_wins_over_env_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("ELECTRUM_PEERS_TIMEOUT=4\n")
        monkeypatch.setenv("ELECTRUM_PEERS_TIMEOUT", "7")

        assert load_config(str(env_file)).timeout == 7.0

    @pytest.mark.parametrize("name, value", [
        ("ELECTRUM_PEERS_TIMEOUT", "soon"),
        ("ELECTRUM_PEERS_TIMEOUT", "0"),
        ("ELECTRUM_PEERS_LOG_LEVEL", "LOUD"),
        ("ELECTRUM_PEERS_LOG_TO_FILE", "maybe"),
    ])
    def test_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ValueError):
            load_config()

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError, match="timeout"):
            ClientConfig(timeout=0)


class TestLogger:
    """Tests for logging setup."""

    def test_subsystem_names(self):
        assert get_logger("transport").name == "electrum_peers.transport"

    def test_setup_installs_handlers_once(self, tmp_path):
        ElectrumLogger.reset()
        try:
            setup_logging(level=logging.DEBUG, log_dir=str(tmp_path), log_to_file=True)
            setup_logging(level=logging.DEBUG, log_dir=str(tmp_path), log_to_file=True)

            root = logging.getLogger("electrum_peers")
            assert len(root.handlers) == 2
            assert root.level == logging.DEBUG

            get_logger("test").info("hello")
            for handler in root.handlers:
                handler.flush()
            assert "hello" in (tmp_path / "electrum_peers.log").read_text()
        finally:
            for handler in logging.getLogger("electrum_peers").handlers:
                handler.close()
            ElectrumLogger.reset()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
