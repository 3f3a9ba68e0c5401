"""Cursor encoding and decoding for pagination.

Cursors are opaque strings that carry everything needed to fetch the next
page: the complete listing arguments plus the resume boundary (the ordering
value and id of the last row returned). No server-side state is kept.

The cursor format is:
1. JSON object ``{"q": <arguments>, "v": <codec version>}`` with sorted
   keys and no whitespace
2. Base64 URL-safe encoded with the ``=`` padding stripped

Example cursor payload:
    {"q":{"first":2,"include":["published"],"last_id":"qt00000003",
    "last_value":"2020-01-01","order":"ADDED_ASC","tags":[]},"v":1}

Bumping a codec's version invalidates every token minted by older versions,
which is how incompatible changes to a listing's arguments are rolled out.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from scholar_service.core.exceptions import InvalidCursorError

M = TypeVar("M", bound=BaseModel)


class CursorCodec(Generic[M]):
    """Encode and decode pagination cursors for one argument model.

    Usage:
        codec = CursorCodec(ItemQuerySpec, version=1)

        # Encoding
        token = codec.encode(spec.model_copy(update={"last_id": "qt1"}))

        # Decoding
        spec = codec.decode(token)   # raises InvalidCursorError on bad input
    """

    def __init__(self, model: type[M], version: int = 1) -> None:
        self.model = model
        self.version = version

    def __repr__(self) -> str:
        return f"CursorCodec({self.model.__name__}, version={self.version})"

    def encode(self, spec: M) -> str:
        """Encode a spec to an opaque string.

        Args:
            spec: Listing arguments including the resume boundary

        Returns:
            URL-safe base64 string without padding
        """
        payload = {"v": self.version, "q": spec.model_dump(mode="json")}
        json_str = json.dumps(payload, separators=(",", ":"), sort_keys=True)
        return base64.urlsafe_b64encode(json_str.encode()).decode().rstrip("=")

    def decode(self, cursor: str) -> M:
        """Decode a cursor string back to the spec that produced it.

        Args:
            cursor: Token previously returned by ``encode``

        Returns:
            The spec, equal to the one that was encoded

        Raises:
            InvalidCursorError: If the cursor is corrupted, was minted by a
                different codec version, or no longer matches the model
        """
        payload = self._load(cursor)
        if payload.get("v") != self.version:
            raise InvalidCursorError(
                "Cursor is from an incompatible version; restart the listing",
                extra={"expected": self.version, "found": payload.get("v")},
            )
        query = payload["q"]
        if not isinstance(query, dict):
            raise InvalidCursorError("Invalid cursor: malformed arguments")
        try:
            return self.model.model_validate(query)
        except ValueError as e:
            raise InvalidCursorError(f"Invalid cursor: {e}") from e

    @staticmethod
    def _load(cursor: str) -> dict[str, Any]:
        if not isinstance(cursor, str) or not cursor:
            raise InvalidCursorError("Invalid cursor: empty")
        padded = cursor + "=" * (-len(cursor) % 4)
        try:
            json_str = base64.urlsafe_b64decode(padded.encode("ascii")).decode()
            payload = json.loads(json_str)
        except ValueError as e:
            # binascii.Error, UnicodeError and JSONDecodeError are all ValueErrors
            raise InvalidCursorError(f"Invalid cursor: {e}") from e
        if not isinstance(payload, dict) or set(payload) != {"v", "q"}:
            raise InvalidCursorError("Invalid cursor: unexpected envelope")
        return payload


__all__ = ["CursorCodec"]
