"""Unit tests for the cursor codec."""

from __future__ import annotations

import base64
from datetime import UTC, date, datetime, time, timedelta, timezone
from decimal import Decimal
import json
from types import SimpleNamespace
from uuid import UUID

import pytest

from cursorable.core.pagination.cursor import (
    CURSOR_VERSION,
    MAX_CURSOR_LENGTH,
    CursorCodec,
    CursorData,
)
from cursorable.core.pagination.exceptions import (
    CursorDecodeError,
    CursorEncodeError,
    CursorMismatchError,
)


def _raw_cursor(payload: object) -> str:
    """Build an unsigned cursor from an arbitrary JSON payload."""
    return base64.urlsafe_b64encode(json.dumps(payload).encode()).decode().rstrip("=")


def _raw_bytes(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def _payload(cursor: str) -> dict:
    padded = cursor + "=" * (-len(cursor) % 4)
    return json.loads(base64.urlsafe_b64decode(padded))


# ──────────────────────────────────────────────────────────────
# Test CursorData
# ──────────────────────────────────────────────────────────────


class TestCursorData:
    """Tests for CursorData model."""

    def test_columns_keep_order(self):
        """columns should list column names in cursor order."""
        data = CursorData(fields=(("created_at", "x"), ("id", 1)))

        assert data.columns == ("created_at", "id")
        assert data.values == {"created_at": "x", "id": 1}
        assert data.version == CURSOR_VERSION


# ──────────────────────────────────────────────────────────────
# Test CursorCodec encode/decode
# ──────────────────────────────────────────────────────────────


class TestCursorCodec:
    """Tests for CursorCodec encode/decode."""

    @pytest.mark.parametrize(
        "value",
        [
            None,
            True,
            False,
            0,
            -42,
            2**63,
            1.5,
            0.1,
            Decimal("10.50"),
            "",
            "héllo, wörld",
            datetime(2023, 1, 5, 10, 30, 0, 123456),
            datetime(2023, 1, 5, 10, 30, tzinfo=UTC),
            datetime(2023, 1, 5, 10, 30, tzinfo=timezone(timedelta(hours=-5))),
            date(2023, 1, 5),
            time(23, 59, 59),
            UUID("12345678-1234-5678-1234-567812345678"),
        ],
    )
    def test_value_round_trip(self, value):
        """Every supported type should decode to an equal value of the same type."""
        codec = CursorCodec()

        fields = codec.decode(codec.encode([("col", value)]), ["col"])

        assert fields == (("col", value),)
        assert type(fields[0][1]) is type(value)

    def test_multi_column_round_trip(self):
        """Order and values of several columns should survive a round trip."""
        codec = CursorCodec()
        fields = (("created_at", datetime(2023, 1, 3)), ("title", "b"), ("id", 7))

        assert codec.decode(codec.encode(fields), ["created_at", "title", "id"]) == fields

    def test_wire_format(self):
        """Cursor should be unpadded base64url of the versioned, tagged JSON payload."""
        cursor = CursorCodec().encode([("created_at", datetime(2023, 1, 5)), ("id", 42)])

        assert "=" not in cursor
        assert "+" not in cursor and "/" not in cursor
        assert _payload(cursor) == {
            "v": 1,
            "f": [["created_at", "t", "2023-01-05T00:00:00"], ["id", "i", 42]],
        }

    def test_bool_is_not_encoded_as_int(self):
        """bool should keep its own tag even though it subclasses int."""
        cursor = CursorCodec().encode([("flag", True)])

        assert _payload(cursor)["f"] == [["flag", "b", True]]

    def test_unsupported_type_raises(self):
        """Values without a type tag should be rejected at encode time."""
        with pytest.raises(CursorEncodeError) as exc_info:
            CursorCodec().encode([("tags", ["a", "b"])])

        assert exc_info.value.column == "tags"

    def test_decode_mismatched_columns(self):
        """A cursor for other columns should raise CursorMismatchError."""
        codec = CursorCodec()
        cursor = codec.encode([("title", "a"), ("id", 1)])

        with pytest.raises(CursorMismatchError) as exc_info:
            codec.decode(cursor, ["created_at", "id"])

        assert exc_info.value.expected == ("created_at", "id")
        assert exc_info.value.actual == ("title", "id")

    def test_decode_column_order_matters(self):
        """Same columns in a different order are a different sort key."""
        codec = CursorCodec()
        cursor = codec.encode([("a", 1), ("b", 2)])

        with pytest.raises(CursorMismatchError):
            codec.decode(cursor, ["b", "a"])

    def test_loads_skips_column_check(self):
        """loads should return the decoded data for inspection."""
        codec = CursorCodec()

        data = codec.loads(codec.encode([("id", 3)]))

        assert data.columns == ("id",)
        assert data.values["id"] == 3


class TestCursorDecodeErrors:
    """Malformed cursors must always raise CursorDecodeError."""

    @pytest.mark.parametrize(
        "cursor",
        [
            "",
            "!!!",
            "not base64 at all",
            "ëëë",
            _raw_cursor([1, 2, 3]),
            _raw_cursor({"v": 1}),
            _raw_cursor({"v": 2, "f": []}),
            _raw_cursor({"v": True, "f": []}),
            _raw_cursor({"v": "1", "f": []}),
            _raw_cursor({"v": 1, "f": [["id", "i"]]}),
            _raw_cursor({"v": 1, "f": [[1, "i", 1]]}),
            _raw_cursor({"v": 1, "f": [["id", "x", 1]]}),
            _raw_cursor({"v": 1, "f": [["id", "i", "1"]]}),
            _raw_cursor({"v": 1, "f": [["id", "i", True]]}),
            _raw_cursor({"v": 1, "f": [["id", "n", 5]]}),
            _raw_cursor({"v": 1, "f": [["at", "t", "yesterday"]]}),
            _raw_cursor({"v": 1, "f": [["price", "d", "ten"]]}),
            _raw_cursor({"v": 1, "f": [["id", "u", "not-a-uuid"]]}),
            _raw_cursor({"v": 1, "f": [["score", "f", 1.5]]}),
            _raw_bytes(b"[" * 2900),
            _raw_bytes(b'{"v":1,"f":' + b"[" * 2800),
            "a" * (MAX_CURSOR_LENGTH + 1),
        ],
    )
    def test_malformed_cursor(self, cursor):
        """Garbage, wrong structure, wrong version and bad values are rejected."""
        with pytest.raises(CursorDecodeError):
            CursorCodec().decode(cursor, ["id"])

    def test_error_message_hides_reason_in_details(self):
        """The message is generic; the reason travels in details."""
        with pytest.raises(CursorDecodeError) as exc_info:
            CursorCodec().loads(_raw_cursor({"v": 9, "f": []}))

        assert exc_info.value.message == "Invalid cursor"
        assert "version" in exc_info.value.details["reason"]

    def test_too_long_rejected_before_decoding(self):
        with pytest.raises(CursorDecodeError) as exc_info:
            CursorCodec().loads("x" * (MAX_CURSOR_LENGTH + 1))

        assert "too long" in exc_info.value.details["reason"]


class TestSignedCursors:
    """Tests for HMAC-signed cursors."""

    def test_signed_round_trip(self):
        """A signing codec should accept its own cursors."""
        codec = CursorCodec(secret="s3cret")
        cursor = codec.encode([("id", 10)])

        assert codec.signed
        assert "." in cursor
        assert codec.decode(cursor, ["id"]) == (("id", 10),)

    def test_tampered_body_rejected(self):
        """Changing the payload invalidates the signature."""
        codec = CursorCodec(secret=b"s3cret")
        body, _, signature = codec.encode([("id", 10)]).partition(".")
        forged = CursorCodec().encode([("id", 11)])

        with pytest.raises(CursorDecodeError) as exc_info:
            codec.decode(f"{forged}.{signature}", ["id"])

        assert exc_info.value.reason == "signature mismatch"
        assert body != forged

    def test_other_secret_rejected(self):
        """Cursors signed with another key are rejected."""
        cursor = CursorCodec(secret="one").encode([("id", 1)])

        with pytest.raises(CursorDecodeError):
            CursorCodec(secret="two").decode(cursor, ["id"])

    def test_unsigned_cursor_rejected_when_signing(self):
        """A signing codec requires the signature."""
        cursor = CursorCodec().encode([("id", 1)])

        with pytest.raises(CursorDecodeError) as exc_info:
            CursorCodec(secret="key").decode(cursor, ["id"])

        assert exc_info.value.reason == "missing signature"

    def test_non_ascii_signature_rejected(self):
        """Odd characters in the signature part still raise CursorDecodeError."""
        cursor = CursorCodec(secret="key").encode([("id", 1)])
        body = cursor.rpartition(".")[0]

        with pytest.raises(CursorDecodeError):
            CursorCodec(secret="key").decode(f"{body}.ü", ["id"])

    def test_empty_secret_means_unsigned(self):
        """An empty secret disables signing."""
        assert not CursorCodec(secret="").signed


class TestFromRow:
    """Tests for building cursors from rows."""

    def test_from_object(self):
        """Attributes are read from ORM-like objects."""
        codec = CursorCodec()
        row = SimpleNamespace(id=5, title="x", body="ignored")

        cursor = codec.from_row(row, ["title", "id"])

        assert codec.decode(cursor, ["title", "id"]) == (("title", "x"), ("id", 5))

    def test_from_mapping(self):
        """Mappings are read by key."""
        codec = CursorCodec()

        cursor = codec.from_row({"id": 5}, ["id"])

        assert codec.decode(cursor, ["id"]) == (("id", 5),)

    @pytest.mark.parametrize("row", [SimpleNamespace(id=1), {"id": 1}])
    def test_missing_column(self, row):
        """A row without a sort column cannot produce a cursor."""
        with pytest.raises(CursorEncodeError) as exc_info:
            CursorCodec().from_row(row, ["created_at", "id"])

        assert exc_info.value.column == "created_at"

    def test_null_in_not_null_column(self):
        """A NULL the sort key says cannot occur is a server-side fault."""
        row = SimpleNamespace(rating=None, id=1)

        with pytest.raises(CursorEncodeError) as exc_info:
            CursorCodec().from_row(row, ["rating", "id"], not_null={"rating", "id"})

        assert exc_info.value.column == "rating"

    def test_null_in_nullable_column(self):
        codec = CursorCodec()
        row = SimpleNamespace(rating=None, id=1)

        cursor = codec.from_row(row, ["rating", "id"], not_null={"id"})

        assert codec.decode(cursor, ["rating", "id"]) == (("rating", None), ("id", 1))
