"""Core configuration, logging, and database plumbing."""
