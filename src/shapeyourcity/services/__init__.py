"""Marker store, sync, and export services."""
