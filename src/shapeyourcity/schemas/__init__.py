"""Pydantic schemas for domain values."""
