"""
Record Envelope

Every Redis message is a JSON envelope naming the channel it was sent on,
so subscribers of pattern channels (bztcp:ticker:*) can tell them apart:

  {"channel": "bztcp:ticker:AAPL", "data": {...StreamData.to_dict()...}}
"""
from __future__ import annotations

import json
from typing import Any


class SerializationError(Exception):
    """Raised when a record cannot be wrapped in an envelope."""


def serialize(channel: str, data: dict[str, Any]) -> str:
    """
    Wrap a record dict in the channel envelope.

    Values JSON cannot represent are written as their str(); a structure
    that cannot be encoded at all (a reference cycle) is rejected.

    Raises:
        SerializationError: If the envelope cannot be encoded
    """
    try:
        return json.dumps(
            {"channel": channel, "data": data},
            default=str,
            ensure_ascii=False,
        )
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"Cannot encode record for channel '{channel}': {exc}"
        ) from exc
