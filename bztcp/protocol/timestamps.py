"""
Protocol Timestamps

PING and PONG carry times in a JavaScript Date.toString()-like layout:

    Mon Jan  2 2006 15:04:05 GMT-0700 (MST)

The day of month is space-padded to two characters. Weekday and month
names are always English, whatever the process locale.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from functools import lru_cache

from bztcp.config import ConfigurationError, ProtocolConfig
from bztcp.core.types import DecodeError

DEFAULT_LAYOUT = ProtocolConfig().time_format

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_TOKEN = re.compile(r"(%.|\{day:>2\}| \(\{zone\}\))")

_TOKEN_PATTERNS = {
    "%a": "(?:" + "|".join(_WEEKDAYS) + ")",
    "%b": "(?P<month>" + "|".join(_MONTHS) + ")",
    "%d": r"(?P<day>\d{2})",
    "{day:>2}": r" ?(?P<day>\d{1,2})",
    "%Y": r"(?P<year>\d{4})",
    "%H": r"(?P<hour>\d{2})",
    "%M": r"(?P<minute>\d{2})",
    "%S": r"(?P<second>\d{2})",
    "%z": r"(?P<offset>[+-]\d{4})",
    # The zone abbreviation is optional on input
    " ({zone})": r"(?: \((?P<zone>[^()\n]*)\))?",
    "%%": "%",
}


def format_timestamp(dt: datetime, layout: str = DEFAULT_LAYOUT) -> str:
    """
    Format an aware datetime in the protocol layout.

    Raises:
        ValueError: If dt is naive (the layout needs a UTC offset)
    """
    if dt.tzinfo is None:
        raise ValueError("timestamp must be timezone-aware")
    named = (
        layout.replace("%a", _WEEKDAYS[dt.weekday()])
        .replace("%b", _MONTHS[dt.month - 1])
    )
    return dt.strftime(named).format(day=dt.day, zone=dt.tzname() or "")


@lru_cache(maxsize=8)
def _layout_pattern(layout: str) -> re.Pattern[str]:
    parts = []
    for i, piece in enumerate(_TOKEN.split(layout)):
        if i % 2 == 0:
            parts.append(re.escape(piece))
        elif piece in _TOKEN_PATTERNS:
            parts.append(_TOKEN_PATTERNS[piece])
        else:
            raise ConfigurationError(f"Unsupported directive {piece!r} in time layout")
    return re.compile("".join(parts))


def parse_timestamp(text: str, layout: str = DEFAULT_LAYOUT) -> datetime:
    """
    Parse a protocol timestamp into an aware datetime.

    The parenthesised zone abbreviation is informational only; the
    numeric GMT offset determines the UTC offset of the result.

    Raises:
        DecodeError: If the text does not match the layout
    """
    match = _layout_pattern(layout).fullmatch(text.strip())
    if match is None:
        raise DecodeError(
            f"Invalid timestamp format: {text!r}",
            field="timestamp",
            value=text,
        )

    fields = match.groupdict()
    try:
        tzinfo = None
        if fields.get("offset"):
            offset = fields["offset"]
            delta = timedelta(hours=int(offset[1:3]), minutes=int(offset[3:5]))
            if offset[0] == "-":
                delta = -delta
            tzinfo = timezone(delta, fields["zone"]) if fields.get("zone") else timezone(delta)
        return datetime(
            int(fields.get("year") or 1900),
            _MONTHS.index(fields["month"]) + 1 if fields.get("month") else 1,
            int(fields.get("day") or 1),
            int(fields.get("hour") or 0),
            int(fields.get("minute") or 0),
            int(fields.get("second") or 0),
            tzinfo=tzinfo,
        )
    except ValueError as e:
        raise DecodeError(
            f"Invalid timestamp format: {text!r}",
            field="timestamp",
            value=text,
        ) from e
