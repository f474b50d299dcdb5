"""ORM model registry — import all models so Alembic autogenerate discovers them."""

from shapeyourcity.models.base import Base
from shapeyourcity.models.marker import MarkerRecord, ResponseRecord

__all__ = [
    "Base",
    "MarkerRecord",
    "ResponseRecord",
]
