"""Remote map JSON parser and Pydantic validation models.

Parses the marker listing and marker response payloads served by a
ShapeYourCity map into validated models.  Field names match the remote
JSON structure.

Response answers are kept as the raw JSON text the map sent, so file
answers can be stored byte for byte.
"""

import json
import re
from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

_DECODER = json.JSONDecoder()
_WHITESPACE = re.compile(r"[ \t\n\r]*")


class DecodeError(Exception):
    """Raised when a remote payload is malformed or has an unexpected shape."""


class _RawAnswerScanner:
    """Decode a marker response body, leaving each record's ``answer`` undecoded.

    Everything else decodes exactly as ``json.loads`` would.  An answer is
    sliced out of the source text as-is, keeping its spacing, escapes and
    number spelling.

    Raises:
        json.JSONDecodeError: If the text is not a single JSON value.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def scan(self) -> Any:
        if self._peek() == "{":
            body = self._object(lambda key: self._records() if key == "marker_response" else self._value())
        else:
            body = self._value()
        if self._peek():
            raise json.JSONDecodeError("Extra data", self.text, self.pos)
        return body

    def _records(self) -> Any:
        if self._peek() != "[":
            return self._value()
        return self._array(self._record)

    def _record(self) -> Any:
        if self._peek() != "{":
            return self._value()
        return self._object(lambda key: self._raw_value() if key == "answer" else self._value())

    def _peek(self) -> str:
        self.pos = _WHITESPACE.match(self.text, self.pos).end()
        return self.text[self.pos : self.pos + 1]

    def _expect(self, char: str) -> None:
        if self._peek() != char:
            raise json.JSONDecodeError(f"Expecting {char!r}", self.text, self.pos)
        self.pos += 1

    def _value(self) -> Any:
        self._peek()
        value, self.pos = _DECODER.raw_decode(self.text, self.pos)
        return value

    def _raw_value(self) -> str:
        self._peek()
        start = self.pos
        _, self.pos = _DECODER.raw_decode(self.text, self.pos)
        return self.text[start : self.pos]

    def _object(self, member: Callable[[str], Any]) -> dict[str, Any]:
        self._expect("{")
        out: dict[str, Any] = {}
        if self._peek() == "}":
            self.pos += 1
            return out
        while True:
            if self._peek() != '"':
                raise json.JSONDecodeError("Expecting property name enclosed in double quotes", self.text, self.pos)
            key = self._value()
            self._expect(":")
            out[key] = member(key)
            if self._peek() == ",":
                self.pos += 1
                continue
            self._expect("}")
            return out

    def _array(self, item: Callable[[], Any]) -> list[Any]:
        self._expect("[")
        out: list[Any] = []
        if self._peek() == "]":
            self.pos += 1
            return out
        while True:
            out.append(item())
            if self._peek() == ",":
                self.pos += 1
                continue
            self._expect("]")
            return out


def _coerce_null_to_list(v: Any) -> Any:
    """Coerce explicit JSON null to empty list."""
    return v if v is not None else []


def _coerce_to_str(v: Any) -> Any:
    """Coerce JSON null to empty string and numbers to their text form."""
    if v is None:
        return ""
    if isinstance(v, int | float) and not isinstance(v, bool):
        return str(v)
    return v


class RemoteCategory(BaseModel):
    """Marker category; only the display name is kept."""

    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, v: Any) -> Any:
        return _coerce_to_str(v)


class RemoteUser(BaseModel):
    """Marker author; only the login is kept."""

    login: str = ""

    @field_validator("login", mode="before")
    @classmethod
    def _coerce_login(cls, v: Any) -> Any:
        return _coerce_to_str(v)


class RemoteMarker(BaseModel):
    """A marker record from the ``markers`` listing."""

    id: int
    address: str = ""
    category: RemoteCategory = Field(default_factory=RemoteCategory)
    created_at: datetime
    editable: bool = False
    lat: str = ""
    lng: str = ""
    response_url: str = ""
    user: RemoteUser = Field(default_factory=RemoteUser)

    @field_validator("address", "lat", "lng", "response_url", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        return _coerce_to_str(v)

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, v: Any) -> Any:
        return v if v is not None else {}

    @field_validator("user", mode="before")
    @classmethod
    def _coerce_user(cls, v: Any) -> Any:
        return v if v is not None else {}


class MarkerListing(BaseModel):
    """Top-level ``markers?filter=other_users`` payload."""

    markers: list[RemoteMarker] = Field(default_factory=list)

    @field_validator("markers", mode="before")
    @classmethod
    def _coerce_markers(cls, v: Any) -> Any:
        return _coerce_null_to_list(v)


class RemoteMarkerResponse(BaseModel):
    """A raw response record; ``answer`` is undecoded JSON text, None when absent."""

    mode: str = ""
    question: str = ""
    question_type: str = ""
    answer: str | None = None

    @field_validator("mode", "question", "question_type", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        return _coerce_to_str(v)


class MarkerResponseListing(BaseModel):
    """Top-level response payload for one marker."""

    marker_response: list[RemoteMarkerResponse] = Field(default_factory=list)

    @field_validator("marker_response", mode="before")
    @classmethod
    def _coerce_responses(cls, v: Any) -> Any:
        return _coerce_null_to_list(v)


def parse_marker_listing(raw_json: Any) -> MarkerListing:
    """Parse and validate a decoded marker listing payload.

    Args:
        raw_json: The decoded JSON body of the listing endpoint.

    Returns:
        A validated MarkerListing instance.

    Raises:
        DecodeError: If the JSON structure is invalid.
    """
    try:
        return MarkerListing.model_validate(raw_json)
    except ValidationError as exc:
        msg = f"Unexpected marker listing shape: {exc}"
        raise DecodeError(msg) from exc


def parse_marker_responses(content: bytes) -> MarkerResponseListing:
    """Parse and validate a marker response body.

    Args:
        content: The undecoded body of a marker's response endpoint.

    Returns:
        A validated MarkerResponseListing whose answers are raw JSON text.

    Raises:
        DecodeError: If the body is not JSON or the structure is invalid.
    """
    try:
        raw_json = _RawAnswerScanner(content.decode("utf-8-sig")).scan()
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        msg = f"Invalid JSON in marker response payload: {exc}"
        raise DecodeError(msg) from exc

    try:
        return MarkerResponseListing.model_validate(raw_json)
    except ValidationError as exc:
        msg = f"Unexpected marker response shape: {exc}"
        raise DecodeError(msg) from exc
