"""
Core Type Definitions and Exceptions

Error taxonomy for the BZTCP client. Every failure is terminal: nothing in
the client retries or reconnects, the caller decides what to do next.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Comparable classification of every BZTCP failure."""

    INVALID_READY = "invalid_ready"
    INVALID_AUTH_RESPONSE = "invalid_auth_response"
    INVALID_KEY_FORMAT = "invalid_key_format"
    INVALID_KEY = "invalid_key"
    MALFORMED_LINE = "malformed_line"
    UNEXPECTED_BYTE = "unexpected_byte"
    TRANSPORT = "transport"
    DECODE = "decode"


class BZTCPError(Exception):
    """Base exception for all BZTCP client errors."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context = dict(context or {})

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


_AUTH_MESSAGES = {
    ErrorKind.INVALID_READY: "invalid ready message",
    ErrorKind.INVALID_AUTH_RESPONSE: "invalid auth response",
    ErrorKind.INVALID_KEY_FORMAT: "invalid key format",
    ErrorKind.INVALID_KEY: "invalid key",
}


class AuthenticationError(BZTCPError):
    """Raised when the READY/AUTH/CONNECTED handshake fails."""

    def __init__(
        self,
        kind: ErrorKind,
        status: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        if kind not in _AUTH_MESSAGES:
            raise ValueError(f"{kind!r} is not an authentication error kind")
        ctx = dict(context or {})
        if status is not None:
            ctx["status"] = status
        super().__init__(kind, _AUTH_MESSAGES[kind], ctx)
        self.status = status


class MalformedLineError(BZTCPError):
    """Raised when a received line has no status delimiter."""

    def __init__(self, line: bytes) -> None:
        super().__init__(
            ErrorKind.MALFORMED_LINE,
            f"invalid line: {line!r}",
        )
        self.line = line


class UnexpectedByteError(BZTCPError):
    """Raised when a ticker starts with neither '{' nor '"'."""

    def __init__(self, byte: str) -> None:
        super().__init__(
            ErrorKind.UNEXPECTED_BYTE,
            f"unexpected byte '{byte}'",
        )
        self.byte = byte


class TransportError(BZTCPError):
    """Raised when the underlying connection fails, times out or closes."""

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        ctx = dict(context or {})
        if address:
            ctx["address"] = address
        super().__init__(ErrorKind.TRANSPORT, message, ctx)
        self.address = address


class DecodeError(BZTCPError):
    """Raised when a message payload cannot be decoded."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        ctx = dict(context or {})
        if field:
            ctx["field"] = field
        if value is not None:
            ctx["value"] = repr(value)[:100]  # Truncate long values
        super().__init__(ErrorKind.DECODE, message, ctx)
        self.field = field
        self.value = value
