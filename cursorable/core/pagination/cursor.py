"""Cursor encoding and decoding for pagination.

Cursors are opaque strings that encode the position in a result set.
They carry the values of the sort key columns for one row, in sort key
order, so the next query can seek directly past that row.

Wire format (version 1):
1. JSON object ``{"v": 1, "f": [[column, tag, payload], ...]}``
2. URL-safe base64, padding stripped
3. Optionally followed by ``"." + base64url(HMAC-SHA256(key, part 2))``
   when a signing key is configured

Each value carries a type tag so that decoding restores exactly the
value that was encoded:

    ====  ==========  ==========================
    tag   type        payload
    ====  ==========  ==========================
    n     None        null
    b     bool        true / false
    i     int         JSON integer
    f     float       repr() string
    d     Decimal     str() string
    s     str         JSON string
    t     datetime    ISO 8601 (offset preserved)
    D     date        ISO 8601
    T     time        ISO 8601
    u     UUID        canonical hex string
    ====  ==========  ==========================

Example payload:
    {"v":1,"f":[["created_at","t","2025-01-15T10:30:00+00:00"],["id","i",42]]}
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Collection, Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal
import hashlib
import hmac
import json
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from cursorable.core.pagination.exceptions import (
    CursorDecodeError,
    CursorEncodeError,
    CursorMismatchError,
)

CURSOR_VERSION = 1
_SIGNATURE_SEPARATOR = "."

# Longer strings are rejected before any decoding work
MAX_CURSOR_LENGTH = 4096

CursorFields = tuple[tuple[str, Any], ...]


class CursorData(BaseModel):
    """Decoded cursor contents.

    Attributes:
        fields: Ordered (column, value) pairs, in sort key order
        version: Wire format version the cursor was written with
    """

    fields: CursorFields = Field(description="Ordered (column, value) pairs")
    version: int = Field(default=CURSOR_VERSION, description="Wire format version")

    model_config = {"frozen": True}

    @property
    def columns(self) -> tuple[str, ...]:
        """Column names in cursor order."""
        return tuple(column for column, _ in self.fields)

    @property
    def values(self) -> dict[str, Any]:
        """Column -> value mapping (loses order, handy for lookups)."""
        return dict(self.fields)


def _encode_value(column: str, value: Any) -> list[Any]:
    # bool before int, datetime before date: both are subclasses
    if value is None:
        return [column, "n", None]
    if isinstance(value, bool):
        return [column, "b", value]
    if isinstance(value, int):
        return [column, "i", value]
    if isinstance(value, float):
        return [column, "f", repr(value)]
    if isinstance(value, Decimal):
        return [column, "d", str(value)]
    if isinstance(value, str):
        return [column, "s", value]
    if isinstance(value, datetime):
        return [column, "t", value.isoformat()]
    if isinstance(value, date):
        return [column, "D", value.isoformat()]
    if isinstance(value, time):
        return [column, "T", value.isoformat()]
    if isinstance(value, UUID):
        return [column, "u", str(value)]
    raise CursorEncodeError(column, f"unsupported type {type(value).__name__}")


def _decode_value(tag: str, payload: Any) -> Any:
    match tag:
        case "n":
            if payload is not None:
                raise ValueError("null tag with a payload")
            return None
        case "b":
            if not isinstance(payload, bool):
                raise ValueError("bool tag without a boolean payload")
            return payload
        case "i":
            if not isinstance(payload, int) or isinstance(payload, bool):
                raise ValueError("int tag without an integer payload")
            return payload
        case "s":
            if not isinstance(payload, str):
                raise ValueError("str tag without a string payload")
            return payload
        case "f" | "d" | "t" | "D" | "T" | "u" if not isinstance(payload, str):
            raise ValueError(f"{tag!r} tag without a string payload")
        case "f":
            return float(payload)
        case "d":
            return Decimal(payload)
        case "t":
            return datetime.fromisoformat(payload)
        case "D":
            return date.fromisoformat(payload)
        case "T":
            return time.fromisoformat(payload)
        case "u":
            return UUID(payload)
    raise ValueError(f"unknown type tag {tag!r}")


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.b64decode(padded, altchars=b"-_", validate=True)


class CursorCodec:
    """Encode and decode pagination cursors.

    A codec is a small value object: it only holds the optional signing
    key, so one instance can be shared by every paginator in a process.

    Usage:
        codec = CursorCodec()

        cursor = codec.encode([("created_at", now), ("id", 42)])
        fields = codec.decode(cursor, ["created_at", "id"])
        # (("created_at", now), ("id", 42))

        # Signed cursors reject any modification
        signed = CursorCodec(secret=b"app-secret")
    """

    __slots__ = ("_secret",)

    def __init__(self, secret: bytes | str | None = None) -> None:
        """Initialize codec.

        Args:
            secret: HMAC key. When given, cursors are signed on encode and
                the signature is required and verified on decode.
        """
        if isinstance(secret, str):
            secret = secret.encode()
        self._secret = secret or None

    @property
    def signed(self) -> bool:
        """Whether this codec signs cursors."""
        return self._secret is not None

    def encode(self, fields: Sequence[tuple[str, Any]]) -> str:
        """Encode ordered (column, value) pairs to an opaque string.

        Args:
            fields: Sort key column values, in sort key order

        Returns:
            URL-safe cursor string

        Raises:
            CursorEncodeError: If a value has an unsupported type
        """
        payload = {
            "v": CURSOR_VERSION,
            "f": [_encode_value(column, value) for column, value in fields],
        }
        body = _b64encode(json.dumps(payload, separators=(",", ":")).encode())
        if self._secret is None:
            return body
        return f"{body}{_SIGNATURE_SEPARATOR}{_sign(self._secret, body)}"

    def decode(self, cursor: str, expected_columns: Sequence[str]) -> CursorFields:
        """Decode a cursor and check it against the expected sort key columns.

        Args:
            cursor: Cursor string produced by ``encode``
            expected_columns: Column names of the sort key in use

        Returns:
            Ordered (column, value) pairs

        Raises:
            CursorDecodeError: If the cursor is malformed or its signature is invalid
            CursorMismatchError: If the cursor was issued for different columns
        """
        data = self.loads(cursor)
        if data.columns != tuple(expected_columns):
            raise CursorMismatchError(expected_columns, data.columns)
        return data.fields

    def loads(self, cursor: str) -> CursorData:
        """Decode a cursor without checking its columns.

        Raises:
            CursorDecodeError: If the cursor is malformed or its signature is invalid
        """
        if not isinstance(cursor, str) or not cursor:
            raise CursorDecodeError("empty cursor")
        if len(cursor) > MAX_CURSOR_LENGTH:
            raise CursorDecodeError(f"cursor too long ({len(cursor)} > {MAX_CURSOR_LENGTH})")

        body = self._verify(cursor)

        try:
            payload = json.loads(_b64decode(body).decode("utf-8"))
        except (binascii.Error, ValueError, RecursionError) as e:
            raise CursorDecodeError(f"not a cursor: {e}", cursor) from e

        if not isinstance(payload, dict) or not isinstance(payload.get("f"), list):
            raise CursorDecodeError("unexpected cursor structure", cursor)
        version = payload.get("v")
        if type(version) is not int or version != CURSOR_VERSION:
            raise CursorDecodeError(f"unsupported cursor version {version!r}", cursor)

        fields: list[tuple[str, Any]] = []
        for entry in payload["f"]:
            if (
                not isinstance(entry, list)
                or len(entry) != 3
                or not isinstance(entry[0], str)
                or not isinstance(entry[1], str)
            ):
                raise CursorDecodeError("unexpected cursor field", cursor)
            column, tag, raw = entry
            try:
                fields.append((column, _decode_value(tag, raw)))
            except (ValueError, ArithmeticError) as e:
                raise CursorDecodeError(f"bad value for {column!r}: {e}", cursor) from e

        return CursorData(fields=tuple(fields), version=version)

    def from_row(
        self,
        row: Any,
        columns: Sequence[str],
        *,
        not_null: Collection[str] = (),
    ) -> str:
        """Create a cursor from a database row.

        Args:
            row: ORM instance, Row, or mapping holding the sort key columns
            columns: Sort key column names, in sort key order
            not_null: Columns declared NOT NULL by the sort key

        Returns:
            Encoded cursor string

        Raises:
            CursorEncodeError: If a value cannot be encoded, or a ``not_null``
                column holds NULL (the cursor could never be decoded again)

        Example:
            cursor = codec.from_row(article, ["published_at", "id"])
        """
        fields = [(column, _row_value(row, column)) for column in columns]
        for column, value in fields:
            if value is None and column in not_null:
                raise CursorEncodeError(column, "NULL value in a column declared NOT NULL")
        return self.encode(fields)

    def _verify(self, cursor: str) -> str:
        if self._secret is None:
            return cursor
        body, sep, signature = cursor.rpartition(_SIGNATURE_SEPARATOR)
        if not sep or not body:
            raise CursorDecodeError("missing signature", cursor)
        expected = _sign(self._secret, body).encode("ascii")
        if not hmac.compare_digest(signature.encode("utf-8"), expected):
            raise CursorDecodeError("signature mismatch", cursor)
        return body


def _sign(key: bytes, body: str) -> str:
    digest = hmac.new(key, body.encode("utf-8"), hashlib.sha256).digest()
    return _b64encode(digest)


def _row_value(row: Any, column: str) -> Any:
    if isinstance(row, Mapping):
        if column not in row:
            raise CursorEncodeError(column, "column missing from row")
        return row[column]
    mapping = getattr(row, "_mapping", None)
    if mapping is not None and column in mapping:
        return mapping[column]
    try:
        return getattr(row, column)
    except AttributeError as e:
        raise CursorEncodeError(column, "column missing from row") from e


__all__ = ["CURSOR_VERSION", "MAX_CURSOR_LENGTH", "CursorCodec", "CursorData", "CursorFields"]
