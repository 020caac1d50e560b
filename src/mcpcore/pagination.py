"""Cursor-based pagination for */list operations.

A cursor is an opaque string that encodes ``{"offset": int, "limit": int}``
as base64 of compact JSON. The server keeps no pagination state: the cursor
is the whole state, so any page can be requested again at any time.

Example:
    >>> token = encode_cursor(Cursor(offset=50, limit=50))
    >>> decode_cursor(token)
    Cursor(offset=50, limit=50)
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Sequence
from typing import TypeVar

from pydantic import Field, ValidationError

from mcpcore.errors import InvalidCursorError
from mcpcore.models.base import FrozenModel

DEFAULT_PAGE_SIZE = 50

T = TypeVar("T")


class Cursor(FrozenModel):
    """Decoded pagination cursor."""

    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)

    def next(self) -> Cursor:
        """Cursor for the page that follows this one."""
        return Cursor(offset=self.offset + self.limit, limit=self.limit)

    def __repr__(self) -> str:
        return f"Cursor(offset={self.offset}, limit={self.limit})"


def encode_cursor(cursor: Cursor) -> str:
    payload = json.dumps({"offset": cursor.offset, "limit": cursor.limit}, separators=(",", ":"))
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def decode_cursor(token: str, default_limit: int = DEFAULT_PAGE_SIZE) -> Cursor:
    """Decode an opaque cursor string.

    A missing ``limit`` falls back to ``default_limit``; a missing ``offset``
    falls back to 0.

    Raises:
        InvalidCursorError: If the token is not base64, not a JSON object,
            or carries an out-of-range offset/limit.
    """
    try:
        raw = base64.b64decode(token.encode("ascii"), validate=True)
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise InvalidCursorError(token, "not a valid cursor token") from e

    if not isinstance(data, dict):
        raise InvalidCursorError(token, "cursor payload must be an object")

    try:
        return Cursor(
            offset=data.get("offset", 0),
            limit=data.get("limit", default_limit),
        )
    except ValidationError as e:
        raise InvalidCursorError(token, "offset must be >= 0 and limit > 0") from e


def paginate(
    items: Sequence[T],
    token: str | None,
    default_limit: int = DEFAULT_PAGE_SIZE,
) -> tuple[list[T], str | None]:
    """Slice ``items`` to the page described by ``token``.

    Args:
        items: The full, stably ordered list.
        token: Cursor from the client, or None for the first page.
        default_limit: Page size used when no cursor is supplied.

    Returns:
        Tuple of (page items, next cursor or None when nothing remains).
    """
    cursor = decode_cursor(token, default_limit) if token is not None else Cursor(limit=default_limit)
    end = cursor.offset + cursor.limit
    page = list(items[cursor.offset : end])
    next_token = encode_cursor(cursor.next()) if end < len(items) else None
    return page, next_token
