"""
Tests for bztcp.protocol.codec

Pure unit tests — no I/O.
"""
import json

import pytest

from bztcp.config import ConfigurationError, ProtocolConfig
from bztcp.core.types import DecodeError, ErrorKind, MalformedLineError
from bztcp.models import AuthData, PingData
from bztcp.protocol.codec import Message, decode_line, encode_message, new_message


class TestDecode:
    def test_status_only_line(self):
        msg = decode_line(b"READY=BZEOT\r\n")
        assert msg.status == "READY"
        assert msg.data is None

    def test_status_with_spaces(self):
        msg = decode_line(b"INVALID KEY FORMAT=BZEOT\r\n")
        assert msg.status == "INVALID KEY FORMAT"
        assert msg.data is None

    def test_payload_is_trimmed(self):
        msg = decode_line(b'PONG:   {"pingTime":"x"}  =BZEOT\r\n')
        assert msg.status == "PONG"
        assert msg.data == b'{"pingTime":"x"}'

    def test_payload_containing_equals_sign(self):
        """Only the last '=' marks the terminator."""
        line = b'STREAM: {"link":"https://x.io/?a=1&b=2"}=BZEOT\r\n'
        msg = decode_line(line)
        assert msg.status == "STREAM"
        assert json.loads(msg.data) == {"link": "https://x.io/?a=1&b=2"}

    def test_payload_containing_colons(self):
        msg = decode_line(b'PONG: {"serverTime":"15:04:05"}=BZEOT\r\n')
        assert msg.status == "PONG"
        assert msg.data == b'{"serverTime":"15:04:05"}'

    def test_colon_without_terminator_has_no_payload(self):
        msg = decode_line(b"FOO: bar\r\n")
        assert msg.status == "FOO"
        assert msg.data is None

    def test_empty_payload_between_delimiters(self):
        msg = decode_line(b"PING:=BZEOT\r\n")
        assert msg.status == "PING"
        assert msg.data == b""

    def test_no_delimiter_raises_malformed_line(self):
        with pytest.raises(MalformedLineError) as exc_info:
            decode_line(b"garbage\r\n")
        assert exc_info.value.kind is ErrorKind.MALFORMED_LINE
        assert exc_info.value.line == b"garbage\r\n"


class TestEncode:
    @pytest.mark.parametrize(
        "line",
        [
            b"READY=BZEOT\r\n",
            b"CONNECTED=BZEOT\r\n",
            b"INVALID KEY=BZEOT\r\n",
        ],
    )
    def test_status_only_lines_reproduce_exactly(self, line):
        assert encode_message(decode_line(line)) == line

    def test_payload_line_is_semantically_equivalent(self):
        line = b'PONG:  {"pingTime":"Mon Jan  2 2006"} =BZEOT\r\n'
        msg = decode_line(line)
        again = decode_line(encode_message(msg))
        assert again == msg
        assert encode_message(msg) == b'PONG: {"pingTime":"Mon Jan  2 2006"}=BZEOT\r\n'

    def test_custom_eol(self):
        config = ProtocolConfig(eol=b"=END\n")
        assert encode_message(Message("READY"), config) == b"READY=END\n"

    def test_invalid_eol_rejected(self):
        with pytest.raises(ConfigurationError):
            ProtocolConfig(eol=b"\r\n")


class TestNewMessage:
    def test_no_body(self):
        assert new_message("PING") == Message(status="PING", data=None)

    def test_auth_body_is_compact_json(self):
        msg = new_message("AUTH", AuthData(username="bztest", key="12345"))
        assert msg.data == b'{"username":"bztest","key":"12345"}'

    def test_ping_body(self):
        msg = new_message("PING", PingData(ping_time="t"))
        assert encode_message(msg) == b'PING: {"pingTime":"t"}=BZEOT\r\n'

    def test_plain_dict_body(self):
        msg = new_message("X", {"a": [1, 2]})
        assert json.loads(msg.data) == {"a": [1, 2]}

    def test_unencodable_body_raises(self):
        with pytest.raises(DecodeError, match="Failed to encode"):
            new_message("X", {"a": object()})


class TestMessageJson:
    def test_parses_payload(self):
        assert Message("PONG", b'{"pingTime":"t"}').json() == {"pingTime": "t"}

    def test_missing_payload_raises(self):
        with pytest.raises(DecodeError, match="no payload"):
            Message("STREAM").json()

    def test_invalid_json_raises(self):
        with pytest.raises(DecodeError, match="Invalid JSON"):
            Message("STREAM", b"{nope").json()
