"""
STREAM Payload Decoder

Transforms the JSON body of a STREAM message into a StreamData record.
Missing fields take their zero value; fields of the wrong type are a
DecodeError, which ends the stream.
"""
from __future__ import annotations

import json
from typing import Any

from bztcp.core.types import DecodeError, UnexpectedByteError
from bztcp.models.stream import (
    Author,
    DetailedTicker,
    PlainTicker,
    StreamData,
    Ticker,
)


def _require(raw: dict[str, Any], name: str, kind: type, default: Any) -> Any:
    """Fetch a field, substituting default for missing/null values."""
    value = raw.get(name)
    if value is None:
        return default
    # bool is an int subclass; never accept it where a number is expected
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DecodeError(
            f"Expected {kind.__name__} for {name}, got {type(value).__name__}",
            field=name,
            value=value,
        )
    return value


def _ticker_from_record(raw: dict[str, Any]) -> DetailedTicker:
    return DetailedTicker(
        name=_require(raw, "name", str, ""),
        primary=_require(raw, "primary", bool, False),
        sentiment=_require(raw, "sentiment", int, 0),
    )


def ticker_from_value(value: Any) -> Ticker:
    """
    Build a ticker from an already-parsed JSON value.

    On the wire a ticker is either a bare name (its JSON starts with '"')
    or a detailed record (starts with '{'). Strings become PlainTicker,
    objects become DetailedTicker.

    Raises:
        UnexpectedByteError: For any other JSON type, carrying the first
            character of its JSON encoding
        DecodeError: If a detailed record has fields of the wrong type
    """
    if isinstance(value, str):
        return PlainTicker(name=value)
    if isinstance(value, dict):
        return _ticker_from_record(value)
    raise UnexpectedByteError(json.dumps(value)[:1])


def _decode_authors(raw: dict[str, Any]) -> tuple[Author, ...]:
    authors = _require(raw, "authors", list, [])
    result = []
    for author in authors:
        if not isinstance(author, dict):
            raise DecodeError(
                f"Expected object in authors, got {type(author).__name__}",
                field="authors",
                value=author,
            )
        result.append(Author(name=_require(author, "name", str, "")))
    return tuple(result)


def _decode_channels(raw: dict[str, Any]) -> tuple[str, ...]:
    channels = _require(raw, "channels", list, [])
    for channel in channels:
        if not isinstance(channel, str):
            raise DecodeError(
                f"Expected string in channels, got {type(channel).__name__}",
                field="channels",
                value=channel,
            )
    return tuple(channels)


def stream_data_from_dict(raw: Any) -> StreamData:
    """
    Build a StreamData from a parsed STREAM payload.

    Raises:
        DecodeError: If the payload is not an object or a field has the
            wrong type
        UnexpectedByteError: If a ticker is neither a string nor an object
    """
    if not isinstance(raw, dict):
        raise DecodeError(
            f"Expected object, got {type(raw).__name__}",
            field="message",
            value=raw,
        )

    tickers = _require(raw, "tickers", list, [])

    return StreamData(
        id=_require(raw, "id", int, 0),
        title=_require(raw, "title", str, ""),
        body=_require(raw, "body", str, ""),
        authors=_decode_authors(raw),
        published_at=_require(raw, "published", str, ""),
        updated_at=_require(raw, "updated", str, ""),
        channels=_decode_channels(raw),
        tickers=tuple(ticker_from_value(t) for t in tickers),
        status=_require(raw, "status", str, ""),
        link=raw.get("link"),
    )


def decode_stream_data(payload: bytes | None) -> StreamData:
    """
    Decode the raw payload bytes of a STREAM message.

    Raises:
        DecodeError: If the payload is absent, not JSON, or mis-shaped
        UnexpectedByteError: If a ticker has an unexpected leading byte
    """
    if payload is None:
        raise DecodeError("STREAM message has no payload", field="data")

    try:
        raw = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(
            f"Invalid JSON in STREAM payload: {e}",
            field="data",
            value=payload,
        ) from e

    return stream_data_from_dict(raw)
