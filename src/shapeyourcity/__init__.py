"""Mirror ShapeYourCity map markers into a local SQLite store."""

__version__ = "0.1.0"
