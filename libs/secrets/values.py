"""
Secret value representation and upstream payload decoding.

A secret fetched from the store is either a JSON document (object or array) or
an opaque string. The two shapes are modelled as explicit variants so callers
branch on the type instead of sniffing the value:

    SecretValue = StructuredSecret | RawSecret

Decoding rules (applied in order):
    1. Textual payload present -> parse as JSON, fall back to the raw text.
    2. Binary payload present -> base64-decode to UTF-8 text, then rule 1.
    3. Neither present -> SecretEmptyError.

Example:
    >>> decode_text('{"user": "a", "pass": "b"}')
    StructuredSecret(data={'user': 'a', 'pass': 'b'})
    >>> decode_text("hunter2")
    RawSecret(text='hunter2')
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any, TypeAlias

from libs.secrets.exceptions import SecretEmptyError


@dataclass(frozen=True)
class StructuredSecret:
    """Secret whose payload parsed as a JSON object or array."""

    data: dict[str, Any] | list[Any]

    def to_json(self) -> dict[str, Any] | list[Any]:
        return self.data


@dataclass(frozen=True)
class RawSecret:
    """Secret whose payload is kept as an opaque string."""

    text: str

    def to_json(self) -> str:
        return self.text


SecretValue: TypeAlias = StructuredSecret | RawSecret


def _reject_constant(name: str) -> None:
    raise ValueError(f"Non-standard JSON constant: {name}")


def decode_text(text: str) -> SecretValue:
    """
    Decode a textual secret payload.

    JSON scalars (numbers, booleans, quoted strings, null) are not promoted to
    structured values and are not unwrapped: a password of "12345" is served
    as the string "12345" and "\"quoted\"" keeps its quotes. A plain JSON
    parser would return the number 12345 and the string quoted instead.

    NaN, Infinity and -Infinity are not JSON, so text containing them is
    returned unchanged.

    Args:
        text: Payload text as stored upstream

    Returns:
        StructuredSecret for JSON objects/arrays, RawSecret(text) otherwise
    """
    try:
        parsed = json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return RawSecret(text)

    if isinstance(parsed, (dict, list)):
        return StructuredSecret(parsed)
    return RawSecret(text)


def decode_binary(blob: bytes | str) -> SecretValue:
    """
    Decode a binary secret payload.

    A ``str`` blob is the base64 wire form and is decoded first. A ``bytes``
    blob has already been base64-decoded by botocore and is used as-is.

    Raises:
        ValueError: Blob is a malformed base64 string
    """
    if isinstance(blob, str):
        try:
            raw = base64.b64decode(blob)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 secret payload: {e}") from e
    else:
        raw = blob
    return decode_text(raw.decode("utf-8", errors="replace"))


def decode_payload(
    secret_name: str,
    secret_string: str | None,
    secret_binary: bytes | str | None,
) -> SecretValue:
    """
    Decode an upstream GetSecretValue payload into a SecretValue.

    Args:
        secret_name: Secret the payload belongs to (used in error messages only)
        secret_string: Textual payload, if any
        secret_binary: Binary payload, if any

    Returns:
        Decoded SecretValue

    Raises:
        SecretEmptyError: Neither payload is present
        ValueError: Binary payload is malformed base64
    """
    if secret_string:
        return decode_text(secret_string)
    if secret_binary:
        return decode_binary(secret_binary)
    raise SecretEmptyError(secret_name)
