"""MarkerRecord and ResponseRecord models — the persisted mirror of a map.

The ``responses.marker_id`` foreign key has no ON DELETE behaviour: a
marker's responses must be deleted before the marker row itself.
"""

from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Integer, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shapeyourcity.models.base import Base, UTCDateTime


class MarkerRecord(Base):
    """A map marker as last fetched from the remote map.

    Attributes:
        id: Remote marker identifier.
        url: Deep link to the marker on the map page.
        created_at: Submission time, stored in UTC.
        editable: Whether the remote still accepted edits when last synced.
        lat: Latitude exactly as delivered by the remote.
        lng: Longitude exactly as delivered by the remote.
        user: Submitter login.
        responses: Question/answer pairs in remote listing order.
    """

    __tablename__ = "markers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    url: Mapped[str] = mapped_column(String(2000), nullable=False, default="")
    address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    editable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    lat: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    lng: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    user: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    responses: Mapped[list["ResponseRecord"]] = relationship(
        back_populates="marker",
        order_by="ResponseRecord.id",
    )


class ResponseRecord(Base):
    """One question/answer pair attached to a marker.

    ``id`` is a surrogate key; it only preserves insertion order.
    """

    __tablename__ = "responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    marker_id: Mapped[int] = mapped_column(Integer, ForeignKey("markers.id"), nullable=False, index=True)
    mode: Mapped[str] = mapped_column(String(100), nullable=False)
    question_type: Mapped[str] = mapped_column(String(100), nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    marker: Mapped[MarkerRecord] = relationship(back_populates="responses")
