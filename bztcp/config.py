"""
BZTCP Client Configuration

Protocol constants are owned by ProtocolConfig, one instance per
connection. Environment variables are read here and nowhere else.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_ADDR = "tcp-v1.benzinga.io:11337"


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


@dataclass(frozen=True)
class ProtocolConfig:
    """Wire constants and timing for a single BZTCP connection."""

    # End-of-line magic terminating every line
    eol: bytes = b"=BZEOT\r\n"
    # Separator written between status and payload
    separator: bytes = b": "
    # Weekday, month, space-padded day, year, clock, GMT offset, zone
    time_format: str = "%a %b {day:>2} %Y %H:%M:%S GMT%z ({zone})"
    auth_timeout: float = 10.0
    ping_interval: float = 20.0
    connect_timeout: float = 10.0
    read_limit: int = 1 << 20

    def __post_init__(self) -> None:
        if not self.eol.endswith(b"\n") or b"=" not in self.eol:
            raise ConfigurationError(
                f"eol must contain '=' and end with a newline, got {self.eol!r}"
            )
        for name in ("auth_timeout", "ping_interval", "connect_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        if self.read_limit < len(self.eol):
            raise ConfigurationError("read_limit is smaller than the eol marker")

    @property
    def line_terminator(self) -> bytes:
        """Last byte of the eol marker; reads stop here."""
        return self.eol[-1:]


def parse_address(address: str) -> tuple[str, int]:
    """
    Split a "host:port" address.

    Bracketed IPv6 hosts ("[::1]:11337") are accepted.

    Raises:
        ConfigurationError: If the port is missing or not a number
    """
    host, sep, port = address.rpartition(":")
    if not sep or not host:
        raise ConfigurationError(f"Address must be host:port, got {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port_num = int(port)
    except ValueError:
        raise ConfigurationError(f"Invalid port in address {address!r}")
    if not 0 < port_num < 65536:
        raise ConfigurationError(f"Port out of range in address {address!r}")
    return host, port_num


def _optional_env(name: str, default: str = "") -> str:
    """Get an optional environment variable with a default."""
    return os.environ.get(name, default)


def _optional_env_bool(name: str, default: bool) -> bool:
    """Get an optional boolean environment variable with a default."""
    value = os.environ.get(name)
    if not value:
        return default
    lowered = value.lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ConfigurationError(f"Invalid boolean value for {name}: {value}")


@dataclass(frozen=True)
class RedisConfig:
    """Optional Redis fan-out for received records."""
    url: str
    prefix: str = "bztcp"


@dataclass(frozen=True)
class Settings:
    """Root configuration container."""
    addr: str
    username: str
    key: str
    tls: bool = False
    redis: Optional[RedisConfig] = None


def load_settings() -> Settings:
    """Load all settings from environment variables.

    Credentials are optional here so that command-line flags can supply
    them; the CLI rejects an empty username or key before dialing.
    """
    redis_url = _optional_env("BZTCP_REDIS_URL")
    redis = None
    if redis_url:
        redis = RedisConfig(
            url=redis_url,
            prefix=_optional_env("BZTCP_REDIS_PREFIX", "bztcp"),
        )

    return Settings(
        addr=_optional_env("BZTCP_ADDR", DEFAULT_ADDR),
        username=_optional_env("BZTCP_USER"),
        key=_optional_env("BZTCP_KEY"),
        tls=_optional_env_bool("BZTCP_TLS", False),
        redis=redis,
    )
