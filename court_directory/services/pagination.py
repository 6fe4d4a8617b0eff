"""
Opaque continuation cursors for paginated court listings.

A cursor records the query strategy that produced it and a position within
that strategy's ordering: the last court id seen (keyset) or the number of
rows already returned (offset). Cursors are URL-safe base64 JSON and must be
treated as opaque by callers.
"""

import base64
import binascii
import hashlib
import json
from dataclasses import dataclass
from typing import Optional

KEYSET = "id"
OFFSET = "offset"

# Largest position per kind: court ids are 32-bit integers, OFFSET takes a BIGINT
MAX_POSITION = {KEYSET: 2 ** 31 - 1, OFFSET: 2 ** 63 - 1}


class InvalidCursorError(ValueError):
    """Raised when a cursor cannot be decoded or belongs to another query."""


@dataclass(frozen=True)
class Cursor:
    strategy: str
    kind: str
    position: int
    scope: str = ""


def query_scope(*parts: Optional[str]) -> str:
    """Short fingerprint of the query arguments a cursor is only valid for."""
    digest = hashlib.sha256(json.dumps(list(parts)).encode("utf-8")).hexdigest()
    return digest[:16]


def encode_cursor(cursor: Cursor) -> str:
    payload = {"s": cursor.strategy, "k": cursor.kind, "p": cursor.position}
    if cursor.scope:
        payload["q"] = cursor.scope
    raw = json.dumps(payload, separators=(",", ":"))
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(
    token: Optional[str], strategy: str, kind: str, scope: str = ""
) -> Optional[Cursor]:
    """
    Decode a cursor produced by encode_cursor.

    Args:
        token: Cursor string from a previous page, or None/"" for the first page.
        strategy: Strategy the current query resolved to.
        kind: Expected position kind (KEYSET or OFFSET).
        scope: Fingerprint of the current query arguments (see query_scope),
            or "" when the strategy's cursors are not tied to them.

    Returns:
        The decoded Cursor, or None when starting from the beginning.

    Raises:
        InvalidCursorError: If the token is malformed, its position is not an
            integer in [0, MAX_POSITION[kind]], or it was issued for a different query.
    """
    if not token:
        return None

    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        data = json.loads(raw.decode("utf-8"))
        position = data["p"]
        cursor = Cursor(
            strategy=str(data["s"]),
            kind=str(data["k"]),
            position=position,
            scope=str(data.get("q", "")),
        )
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as e:
        raise InvalidCursorError(f"Malformed cursor: {token!r}") from e

    if not isinstance(position, int) or isinstance(position, bool):
        raise InvalidCursorError(f"Malformed cursor: {token!r}")
    if cursor.strategy != strategy or cursor.kind != kind or cursor.scope != scope:
        raise InvalidCursorError("Cursor was issued for a different query")
    if position < 0:
        raise InvalidCursorError("Cursor position must be non-negative")
    if position > MAX_POSITION.get(kind, 0):
        raise InvalidCursorError("Cursor position is out of range")
    return cursor
