"""
Tests for libs/secrets/values.py - secret payload decoding.

Covers the decoding rules: JSON text, raw text, base64 binary (wire string and
SDK-decoded bytes), and empty payloads.
"""

import base64
import json

import pytest

from libs.secrets.exceptions import ErrorKind, SecretEmptyError
from libs.secrets.values import (
    RawSecret,
    StructuredSecret,
    decode_binary,
    decode_payload,
    decode_text,
)


class TestDecodeText:
    @pytest.mark.unit()
    def test_json_object_becomes_structured(self) -> None:
        value = decode_text('{"user":"a","pass":"b"}')

        assert value == StructuredSecret({"user": "a", "pass": "b"})
        assert value.to_json() == {"user": "a", "pass": "b"}

    @pytest.mark.unit()
    def test_json_array_becomes_structured(self) -> None:
        assert decode_text('["a", 1]') == StructuredSecret(["a", 1])

    @pytest.mark.unit()
    def test_decoding_json_twice_is_stable(self) -> None:
        text = '{"nested": {"port": 5432, "tls": true}}'

        assert decode_text(text) == decode_text(text)

    @pytest.mark.unit()
    @pytest.mark.parametrize(
        "text",
        ["hunter2", "{not json", "  spaced  ", "postgres://u:p@host/db"],
    )
    def test_non_json_text_is_returned_unchanged(self, text: str) -> None:
        value = decode_text(text)

        assert value == RawSecret(text)
        assert value.to_json() == text

    @pytest.mark.unit()
    @pytest.mark.parametrize("text", ["12345", "true", "null", '"quoted"'])
    def test_json_scalars_stay_raw(self, text: str) -> None:
        assert decode_text(text) == RawSecret(text)

    @pytest.mark.unit()
    @pytest.mark.parametrize(
        "text",
        ['{"port": NaN}', "[Infinity]", '{"floor": -Infinity}', "NaN"],
    )
    def test_non_standard_constants_are_not_json(self, text: str) -> None:
        value = decode_text(text)

        assert value == RawSecret(text)
        assert value.to_json() == text


class TestDecodeBinary:
    @pytest.mark.unit()
    def test_base64_wire_string_without_json(self) -> None:
        encoded = base64.b64encode(b"plain-secret").decode()

        assert decode_binary(encoded) == RawSecret("plain-secret")

    @pytest.mark.unit()
    def test_base64_wire_string_with_json(self) -> None:
        encoded = base64.b64encode(json.dumps({"key": "v"}).encode()).decode()

        assert decode_binary(encoded) == StructuredSecret({"key": "v"})

    @pytest.mark.unit()
    def test_sdk_decoded_bytes_are_used_as_is(self) -> None:
        assert decode_binary(b'{"key": "v"}') == StructuredSecret({"key": "v"})

    @pytest.mark.unit()
    def test_malformed_base64_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Invalid base64"):
            decode_binary("abc")


class TestDecodePayload:
    @pytest.mark.unit()
    def test_text_takes_precedence_over_binary(self) -> None:
        value = decode_payload("s", "text-wins", b"binary")

        assert value == RawSecret("text-wins")

    @pytest.mark.unit()
    def test_empty_text_falls_back_to_binary(self) -> None:
        assert decode_payload("s", "", b"from-binary") == RawSecret("from-binary")

    @pytest.mark.unit()
    def test_no_payload_raises_empty_secret(self) -> None:
        with pytest.raises(SecretEmptyError) as exc_info:
            decode_payload("blank", None, None)

        assert exc_info.value.kind is ErrorKind.EMPTY_SECRET
        assert exc_info.value.message == "Failed to retrieve secret 'blank': Secret value is empty"
