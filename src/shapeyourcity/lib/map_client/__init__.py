"""Map client library — fetch, parse, and normalize ShapeYourCity markers.

Public API:
    - MapClient: Async HTTP client for one map's markers and responses
    - normalize_responses: Apply answer normalization to raw response records
    - parse_marker_listing / parse_marker_responses: Validate raw payloads
    - FetchError: HTTP failure or non-2xx status
    - DecodeError: Malformed or unexpected-shape JSON
"""

from shapeyourcity.lib.map_client.client import FetchError, MapClient, normalize_base_url
from shapeyourcity.lib.map_client.normalizer import normalize_answer, normalize_responses
from shapeyourcity.lib.map_client.parser import (
    DecodeError,
    MarkerListing,
    MarkerResponseListing,
    parse_marker_listing,
    parse_marker_responses,
)

__all__ = [
    "DecodeError",
    "FetchError",
    "MapClient",
    "MarkerListing",
    "MarkerResponseListing",
    "normalize_answer",
    "normalize_base_url",
    "normalize_responses",
    "parse_marker_listing",
    "parse_marker_responses",
]
