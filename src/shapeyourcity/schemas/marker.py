"""Pydantic v2 schemas for markers and their responses.

These are the values passed between the map client, the store, the sync
engine, and the exporter.  They are independent of the ORM models.
"""

import html
from datetime import datetime

from pydantic import BaseModel, Field

FILE_QUESTION = "FileQuestion"


class MarkerResponse(BaseModel):
    """A question/answer pair given when a marker was created.

    ``answer`` holds the JSON text sent by the map when ``question_type`` is
    ``FileQuestion``; otherwise it holds the answer text, which may still
    contain HTML entities as delivered by the map.
    """

    model_config = {"from_attributes": True}

    mode: str
    question_type: str
    question: str
    answer: bytes

    @property
    def answer_text(self) -> str:
        """Answer decoded as UTF-8 with HTML entities unescaped."""
        return html.unescape(self.answer.decode("utf-8"))


class Marker(BaseModel):
    """An entry on a map, usually with associated responses.

    ``responses`` is empty until filled by ``MapClient.fill_responses`` or
    loaded from the store.
    """

    id: int
    user: str = ""
    created_at: datetime
    address: str = ""
    category: str = ""
    latitude: str = ""
    longitude: str = ""
    url: str = ""
    response_url: str = ""
    editable: bool = False
    responses: list[MarkerResponse] = Field(default_factory=list)
