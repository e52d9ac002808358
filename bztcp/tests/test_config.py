"""
Tests for bztcp.config
"""
import pytest

from bztcp.config import (
    DEFAULT_ADDR,
    ConfigurationError,
    ProtocolConfig,
    load_settings,
    parse_address,
)

ENV_VARS = ("BZTCP_ADDR", "BZTCP_USER", "BZTCP_KEY", "BZTCP_TLS", "BZTCP_REDIS_URL", "BZTCP_REDIS_PREFIX")


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestParseAddress:
    def test_host_and_port(self):
        assert parse_address("tcp-v1.benzinga.io:11337") == ("tcp-v1.benzinga.io", 11337)

    def test_bracketed_ipv6(self):
        assert parse_address("[::1]:11337") == ("::1", 11337)

    @pytest.mark.parametrize("address", ["localhost", ":11337", "host:port", "host:0", "host:70000"])
    def test_invalid(self, address):
        with pytest.raises(ConfigurationError):
            parse_address(address)


class TestProtocolConfig:
    def test_defaults(self):
        config = ProtocolConfig()
        assert config.eol == b"=BZEOT\r\n"
        assert config.auth_timeout == 10.0
        assert config.ping_interval == 20.0
        assert config.line_terminator == b"\n"

    def test_instances_are_independent(self):
        fast = ProtocolConfig(ping_interval=1.0)
        assert ProtocolConfig().ping_interval == 20.0
        assert fast.ping_interval == 1.0

    @pytest.mark.parametrize("field", ["auth_timeout", "ping_interval", "connect_timeout"])
    def test_non_positive_timing_rejected(self, field):
        with pytest.raises(ConfigurationError, match=field):
            ProtocolConfig(**{field: 0})


class TestLoadSettings:
    def test_defaults(self, clean_env):
        settings = load_settings()
        assert settings.addr == DEFAULT_ADDR
        assert settings.username == ""
        assert settings.tls is False
        assert settings.redis is None

    def test_from_environment(self, clean_env):
        clean_env.setenv("BZTCP_ADDR", "localhost:9000")
        clean_env.setenv("BZTCP_USER", "bztest")
        clean_env.setenv("BZTCP_KEY", "12345")
        clean_env.setenv("BZTCP_TLS", "yes")
        clean_env.setenv("BZTCP_REDIS_URL", "redis://localhost:6379/0")

        settings = load_settings()

        assert settings.addr == "localhost:9000"
        assert settings.username == "bztest"
        assert settings.key == "12345"
        assert settings.tls is True
        assert settings.redis.url == "redis://localhost:6379/0"
        assert settings.redis.prefix == "bztcp"

    def test_invalid_bool(self, clean_env):
        clean_env.setenv("BZTCP_TLS", "maybe")
        with pytest.raises(ConfigurationError, match="BZTCP_TLS"):
            load_settings()
